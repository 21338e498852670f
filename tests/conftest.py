"""
Pytest configuration file for the SealedConfig test suite.

This file defines shared fixtures used across the test modules. It includes logic to:
- Lower the PBKDF2 iteration count so that every encrypt/decrypt in the suite is fast.
- Stamp a build secret for the duration of a test, the way a packaged build would have one.
- Provide temporary config/key file paths and factories for `ConfigStore` instances, so
  tests never touch files outside their own temporary directory.
"""
import pytest

from sealedconfig import buildinfo, encryption, runtime
from sealedconfig.store import ConfigStore

BUILD_SECRET = "Build@2025"
CONFIG_PASSPHRASE = "secret123"


@pytest.fixture(autouse=True)
def fast_kdf(monkeypatch):
    """Keeps key derivation cheap; the real iteration count is far too slow for tests."""
    monkeypatch.setattr(encryption, "KDF_ITERATIONS", 1_000)


@pytest.fixture(autouse=True)
def clean_runtime():
    """Makes sure no test sees the shared store of another."""
    runtime.reset()
    yield
    runtime.reset()


@pytest.fixture
def build_secret(monkeypatch):
    monkeypatch.setattr(buildinfo, "KEY_FILE_PASSWORD", BUILD_SECRET)
    return BUILD_SECRET


@pytest.fixture
def paths(tmp_path):
    """Provides `(config_path, key_file_path)` inside the test's temporary directory."""
    return str(tmp_path / "config.json"), str(tmp_path / "configkey.json")


class PromptRecorder:
    """A first-run prompt that returns a fixed passphrase and counts its calls."""

    def __init__(self, passphrase=CONFIG_PASSPHRASE):
        self.passphrase = passphrase
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.passphrase


@pytest.fixture
def prompt():
    return PromptRecorder()


@pytest.fixture
def make_store(paths, build_secret, prompt):
    """Returns a factory for unopened stores on the shared temporary paths."""
    config_path, key_file_path = paths

    def _make(**kwargs):
        kwargs.setdefault("prompt", prompt)
        return ConfigStore(config_path, key_file_path, **kwargs)

    return _make


@pytest.fixture
def store(make_store):
    """Provides an opened store created through the first-run path."""
    return make_store().open()
