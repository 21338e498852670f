"""
Process-wide configuration, for code that does not want to pass a store around.

`init()` opens one `ConfigStore` and makes it the shared instance; the module-level
accessors forward to it. Code that needs independent stores (tests, tools handling
several deployments) can construct `ConfigStore` objects directly instead.
"""
# sealedconfig/runtime.py

import threading

from sealedconfig.errors import NotInitialized
from sealedconfig.store import ConfigStore

_global_store = None
_global_lock = threading.Lock()


def init(config_path, key_file_path="", prompt=None) -> ConfigStore:
    """Opens the shared configuration store.

    If opening fails the previously shared store, if any, is left in place.

    Args:
        config_path (str): Path of the encrypted configuration file.
        key_file_path (str): Path of the key file; empty selects the default name.
        prompt (callable, optional): Supplies the passphrase on first run.

    Returns:
        ConfigStore: The newly shared store.
    """
    global _global_store
    store = ConfigStore(config_path, key_file_path, prompt=prompt).open()
    with _global_lock:
        _global_store = store
    return store


def current() -> ConfigStore:
    """Returns the shared store, raising `NotInitialized` before `init()` succeeds."""
    store = _global_store
    if store is None:
        raise NotInitialized()
    return store


def reset():
    global _global_store
    with _global_lock:
        _global_store = None


def get(key):
    return current().get(key)


def get_string(key) -> str:
    return current().get_string(key)


def get_int(key) -> int:
    return current().get_int(key)


def get_float(key) -> float:
    return current().get_float(key)


def get_bool(key) -> bool:
    return current().get_bool(key)


def get_map(key) -> dict:
    return current().get_map(key)


def get_array(key) -> list:
    return current().get_array(key)


def set_config(key, value):
    current().set(key, value)


def del_config(key):
    current().delete(key)


def set_pass(new_passphrase):
    current().set_pass(new_passphrase)


def get_config_data() -> dict:
    """Returns a copy of all settings of the shared store."""
    return current().data()
