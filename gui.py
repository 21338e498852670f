"""
This module defines the Streamlit settings console for a SealedConfig store.

It includes the unlock page (first-run passphrase form or plain unlock when the key file
already exists) and the console itself, where an operator can:
- Browse all settings in a table.
- Set a value, either as plain text or parsed as JSON.
- Delete a setting.
- Change the configuration password.
- Download the decrypted settings as CSV or JSON.

The main entry point for the UI is `show_main_app`, which routes to the unlock page or
the console depending on whether the store is open.

The store is created once per server process and shared by every browser session.
Unlocking reads the key file with the build secret and asks for no credential, so once
any session unlocks it, every session sees the open console. Serve the console only to
operators who may read the settings.
"""
# gui.py

import datetime
import json
import os

import pandas as pd
import streamlit as st

from sealedconfig.errors import ConfigStoreError
from sealedconfig.models import kind_of


def _settings_frame(data):
    """Builds a table of settings for display and CSV export.

    Args:
        data (dict): The settings mapping.

    Returns:
        pandas.DataFrame: One row per setting with `key`, `kind` and `value` columns.
    """
    rows = [
        {"key": key, "kind": kind_of(value), "value": json.dumps(value, ensure_ascii=False)}
        for key, value in sorted(data.items())
    ]
    return pd.DataFrame(rows, columns=["key", "kind", "value"])


def _parse_value(raw, as_json):
    if not as_json:
        return raw
    return json.loads(raw)


def show_unlock_page(store):
    """Opens the store, asking for a new passphrase if no key file exists yet.

    Args:
        store: The unopened `ConfigStore`.
    """
    st.markdown("<h1 style='text-align: center;'>SealedConfig</h1>", unsafe_allow_html=True)
    st.caption(f"Config file: {store.config_path} · Key file: {store.key_file_path}")

    if os.path.exists(store.key_file_path):
        st.info("A key file was found. Unlock the configuration to continue.")
        st.caption("Unlocking opens the console for every browser session of this server.")
        if st.button("Unlock", type="primary"):
            try:
                store.open()
            except ConfigStoreError as exc:
                st.error(f"Could not open the configuration: {exc}")
            else:
                st.rerun()
        return

    st.info("No key file exists yet. Choose the password that will encrypt this configuration.")
    with st.form("first_run_form"):
        passphrase = st.text_input("Configuration Password", type="password")
        confirm = st.text_input("Repeat Password", type="password")
        submitted = st.form_submit_button("Create Configuration", width="stretch")

        if submitted:
            if not passphrase.strip():
                st.error("A password is required.")
            elif passphrase != confirm:
                st.error("The passwords do not match.")
            else:
                try:
                    store.open(prompt=lambda: passphrase)
                except ConfigStoreError as exc:
                    st.error(f"Could not create the configuration: {exc}")
                else:
                    st.rerun()


def _render_settings_table(store):
    data = store.data()
    st.subheader("Settings")
    if not data:
        st.info("No settings yet. Add one below.")
        return data
    st.dataframe(_settings_frame(data), width="stretch", hide_index=True)
    return data


def _render_set_form(store):
    st.subheader("Set a Value")
    with st.form("set_form", clear_on_submit=True):
        key = st.text_input("Key")
        raw_value = st.text_area("Value")
        as_json = st.checkbox("Parse value as JSON", help="Use this for numbers, booleans, objects and arrays.")
        submitted = st.form_submit_button("Save Setting")

        if submitted:
            if not key:
                st.error("A key is required.")
                return
            try:
                value = _parse_value(raw_value, as_json)
            except json.JSONDecodeError as exc:
                st.error(f"The value is not valid JSON: {exc}")
                return
            try:
                store.set(key, value)
            except ConfigStoreError as exc:
                # The value is kept in memory but was not written to disk.
                st.error(f"Saving failed: {exc}")
            else:
                st.success(f"Saved {key}.")


def _render_delete_form(store, keys):
    st.subheader("Delete a Setting")
    if not keys:
        st.caption("Nothing to delete.")
        return
    with st.form("delete_form"):
        key = st.selectbox("Key", keys)
        submitted = st.form_submit_button("Delete Setting")
        if submitted:
            try:
                store.delete(key)
            except ConfigStoreError as exc:
                st.error(f"Saving failed: {exc}")
            else:
                st.success(f"Deleted {key}.")


def _render_password_form(store):
    st.subheader("Change Password")
    with st.form("password_form", clear_on_submit=True):
        new_passphrase = st.text_input("New Password", type="password")
        confirm = st.text_input("Repeat New Password", type="password")
        submitted = st.form_submit_button("Change Password")

        if submitted:
            if not new_passphrase.strip():
                st.error("A password is required.")
            elif new_passphrase != confirm:
                st.error("The passwords do not match.")
            else:
                try:
                    store.set_pass(new_passphrase)
                except ConfigStoreError as exc:
                    st.error(f"The password was not changed: {exc}")
                else:
                    st.success("Password changed. The configuration was re-encrypted.")


def _render_export(store, data):
    st.subheader("Export")
    st.warning("Exports contain the decrypted settings. Handle them like the secrets they are.")
    col1, col2 = st.columns(2)
    today = datetime.date.today()
    with col1:
        st.download_button(
            "Download Settings (CSV)", _settings_frame(data).to_csv(index=False).encode("utf-8"),
            f"sealedconfig_{today}.csv", "text/csv"
        )
    with col2:
        st.download_button(
            "Download Settings (JSON)", store.export_plaintext().encode("utf-8"),
            f"sealedconfig_{today}.json", "application/json"
        )


def show_console(store):
    """Displays the settings console for an open store.

    Args:
        store: The open `ConfigStore`.
    """
    st.markdown("<h1>SealedConfig Console</h1>", unsafe_allow_html=True)
    st.caption(f"Config file: {store.config_path} · Key file: {store.key_file_path}")

    data = _render_settings_table(store)
    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        _render_set_form(store)
    with col2:
        _render_delete_form(store, sorted(data))
    st.divider()
    _render_password_form(store)
    st.divider()
    _render_export(store, data)


def show_main_app(store):
    """Routes to the console when the store is open, otherwise to the unlock page.

    Args:
        store: The application's `ConfigStore`.
    """
    if store.is_open:
        show_console(store)
    else:
        show_unlock_page(store)
