"""
This is the main entry point for the SealedConfig Streamlit console.

This script handles the following key responsibilities:
- Sets the overall page configuration for the Streamlit app.
- Creates the single `ConfigStore` shared by every session of the app.
- Hands the store to the GUI, which unlocks it or shows the console.

Run it with `streamlit run main.py`. The paths can be overridden with
`streamlit run main.py -- --config path/to/config.json --key-file path/to/key`.
"""
# main.py

import argparse

import streamlit as st

import gui
from sealedconfig.store import DEFAULT_CONFIG_FILE, ConfigStore

# Set the basic configuration for the Streamlit page.
st.set_page_config(
    page_title="SealedConfig",
    layout="wide"
)


def _parse_args():
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE)
    parser.add_argument("--key-file", default="")
    args, _ = parser.parse_known_args()
    return args


@st.cache_resource
def get_config_store(config_path, key_file_path):
    """
    Creates the configuration store for this app.

    This function is decorated with `@st.cache_resource` so that the store is created
    only once and shared across reruns and sessions.

    Returns:
        ConfigStore: The single store instance, not yet opened.
    """
    return ConfigStore(config_path, key_file_path)


args = _parse_args()
store = get_config_store(args.config, args.key_file)
gui.show_main_app(store)
