"""
Integration tests for SealedConfig.

These tests verify the interaction between the key file, the config file and the
store across "process restarts" (fresh `ConfigStore` instances on the same files),
and the process-wide `runtime` facade on top of the store.
"""
import threading

import pytest

import sealedconfig
from sealedconfig import runtime
from sealedconfig.errors import ConfigDecryptFailure, NotInitialized
from sealedconfig.keyfile import KeyFile

BUILD_SECRET = "Build@2025"


def test_values_survive_restart(store, make_store, prompt):
    """
    Tests that a value set in one run is read back by the next run without prompting.
    """
    store.set("PORT", 8080)
    store.set("DB", {"host": "localhost", "replicas": [1, 2]})

    restarted = make_store().open()
    assert restarted.get_int("PORT") == 8080
    assert restarted.get_map("DB") == {"host": "localhost", "replicas": [1, 2]}
    assert prompt.calls == 1


def test_rotation_survives_restart(store, make_store, paths):
    store.update({"CLIENT_ID": "12345", "PORT": 8080})
    store.set_pass("newpass")

    _, key_file_path = paths
    assert KeyFile(key_file_path, BUILD_SECRET).read() == "newpass"
    restarted = make_store().open()
    assert restarted.data() == {"CLIENT_ID": "12345", "PORT": 8080}


def test_stale_instance_cannot_read_after_rotation(store, make_store):
    """
    A store opened before a rotation still holds the old passphrase; reloading fails loudly.
    """
    stale = make_store().open()
    store.set_pass("newpass")
    with pytest.raises(ConfigDecryptFailure):
        stale.load()


def test_runtime_requires_init():
    with pytest.raises(NotInitialized):
        runtime.get("PORT")
    with pytest.raises(NotInitialized):
        sealedconfig.set_config("PORT", 1)
    with pytest.raises(NotInitialized):
        sealedconfig.get_config_data()


def test_runtime_facade_round_trip(paths, build_secret, prompt):
    config_path, key_file_path = paths
    sealedconfig.init(config_path, key_file_path, prompt=prompt)

    sealedconfig.set_config("CLIENT_ID", "12345")
    sealedconfig.set_config("PORT", 8080.0)
    sealedconfig.set_config("FEATURES", {"beta": True})
    sealedconfig.set_config("HOSTS", ["a"])
    sealedconfig.set_config("DEBUG", False)
    assert sealedconfig.get_string("CLIENT_ID") == "12345"
    assert sealedconfig.get_int("PORT") == 8080
    assert sealedconfig.get_float("PORT") == 8080.0
    assert sealedconfig.get_map("FEATURES") == {"beta": True}
    assert sealedconfig.get_array("HOSTS") == ["a"]
    assert sealedconfig.get_bool("DEBUG") is False
    assert sealedconfig.get("CLIENT_ID") == "12345"

    sealedconfig.del_config("HOSTS")
    data = sealedconfig.get_config_data()
    data["INJECTED"] = "bypass"
    assert "INJECTED" not in sealedconfig.get_config_data()
    assert "HOSTS" not in sealedconfig.get_config_data()

    sealedconfig.set_pass("rotated")
    runtime.reset()
    sealedconfig.init(config_path, key_file_path, prompt=prompt)
    assert sealedconfig.get_int("PORT") == 8080
    assert prompt.calls == 1


def test_failed_init_keeps_previous_store(paths, build_secret, prompt, monkeypatch):
    config_path, key_file_path = paths
    first = sealedconfig.init(config_path, key_file_path, prompt=prompt)
    first.set("PORT", 8080)

    monkeypatch.setattr(sealedconfig.buildinfo, "KEY_FILE_PASSWORD", "rebuilt")
    with pytest.raises(sealedconfig.KeyFileDecryptFailure):
        sealedconfig.init(config_path, key_file_path, prompt=prompt)
    assert runtime.current() is first
    assert sealedconfig.get_int("PORT") == 8080


def test_concurrent_sets_lose_no_updates(store, make_store):
    """
    Tests that `set` calls from several threads are all persisted.

    Each call rewrites the whole file, so without the store's lock two writers could
    save from the same snapshot and drop each other's key.
    """
    def writer(worker):
        for i in range(10):
            store.set(f"W{worker}_{i}", i)

    threads = [threading.Thread(target=writer, args=(worker,)) for worker in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    reopened = make_store().open().data()
    assert len(reopened) == 40
    assert reopened == store.data()
    assert reopened["W3_9"] == 9
