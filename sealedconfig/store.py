"""
This module provides the configuration store, the core of SealedConfig.

It defines the `ConfigStore` class, which is responsible for:
- Bootstrapping the configuration passphrase from the key file (or the first-run prompt).
- Guaranteeing that an encrypted configuration file exists before it is loaded.
- Loading and saving the settings to the encrypted JSON file, validating what it reads.
- Typed access to the settings and immediate persistence of every change.
- Rotating the configuration passphrase so the key file and the config file stay in step.

One `ConfigStore` owns its settings. Reads hand out copies, so the only way to change
what is stored is through `set`, `update` and `delete`, each of which saves before it
returns. All operations hold a single re-entrant lock. Nothing coordinates separate
processes: two processes pointed at the same files will overwrite each other.
"""
# sealedconfig/store.py

import copy
import json
import logging
import os
import threading

from sealedconfig import buildinfo, encryption
from sealedconfig import models
from sealedconfig.errors import (
    ConfigAccessFailure,
    ConfigDecryptFailure,
    ConfigParseFailure,
    ConfigPersistFailure,
    KeyFilePersistFailure,
    KeyNotFound,
    NotInitialized,
    TypeMismatch,
)
from sealedconfig.keyfile import KeyFile, read_passphrase_from_stdin, write_sealed

logger = logging.getLogger(__name__)

DEFAULT_KEY_FILE = "sealedconfigkey.json"
DEFAULT_CONFIG_FILE = "config.json"
JSON_INDENT = 4


class ConfigStore:
    """Encrypted JSON settings whose passphrase is recovered from a sealed key file.

    Attributes:
        config_path (str): Location of the encrypted configuration document.
        key_file_path (str): Location of the encrypted key file.
    """

    def __init__(self, config_path, key_file_path="", key_file_password=None, prompt=None):
        """Creates an unopened store. Call `open()` before using it.

        Args:
            config_path (str): Path of the encrypted configuration file.
            key_file_path (str): Path of the key file; empty selects `DEFAULT_KEY_FILE`.
            key_file_password (str, optional): Build secret protecting the key file.
                Defaults to `buildinfo.KEY_FILE_PASSWORD`, read when the store opens.
            prompt (callable, optional): Returns the passphrase on first run.
                Defaults to reading one line from standard input.
        """
        self.config_path = config_path
        self.key_file_path = key_file_path or DEFAULT_KEY_FILE
        self._key_file_password = key_file_password
        self._prompt = prompt or read_passphrase_from_stdin
        self._key_file = None
        self._passphrase = None
        self._data = {}
        self._lock = threading.RLock()

    def __repr__(self):
        return f"ConfigStore(config_path={self.config_path!r}, key_file_path={self.key_file_path!r}, open={self.is_open})"

    @property
    def is_open(self) -> bool:
        return self._passphrase is not None

    def _require_open(self):
        if not self.is_open:
            raise NotInitialized()

    # Bootstrap and file lifecycle
    def open(self, prompt=None):
        """Initializes the store: recovers the passphrase, then loads the settings.

        On failure nothing is kept: a key file or config file created by this call is
        removed again and the store stays unopened.

        Args:
            prompt (callable, optional): Overrides the first-run prompt for this call.

        Returns:
            ConfigStore: `self`, for chaining.
        """
        with self._lock:
            secret = self._key_file_password
            if secret is None:
                secret = buildinfo.KEY_FILE_PASSWORD
            key_file = KeyFile(self.key_file_path, secret)
            key_file.check_build_secret()

            passphrase, key_file_created = key_file.bootstrap(prompt or self._prompt, self.config_path)
            config_created = False
            try:
                config_created = self._ensure_config_file(passphrase)
                data = self._read_config(passphrase)
            except Exception:
                if config_created:
                    _remove_quietly(self.config_path)
                if key_file_created:
                    key_file.remove()
                raise

            self._key_file = key_file
            self._passphrase = passphrase
            self._data = data
            logger.info("Loaded %d settings from %s", len(data), self.config_path)
            return self

    def _ensure_config_file(self, passphrase) -> bool:
        """Writes an empty encrypted config file if none exists yet.

        Returns:
            bool: True if the file was created by this call.
        """
        try:
            os.stat(self.config_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise ConfigAccessFailure(f"failed to check config file {self.config_path}: {exc}") from exc
        else:
            return False

        print(f"Config file {self.config_path} does not exist, creating an empty one...")
        self._write_config(passphrase, {})
        print(f"Empty config file {self.config_path} created.")
        logger.info("Created empty config file %s", self.config_path)
        return True

    def _read_config(self, passphrase) -> dict:
        """Decrypts and parses the config file.

        Returns:
            dict: The settings mapping.
        """
        try:
            with open(self.config_path, "rb") as f:
                text = encryption.decrypt(f, passphrase)
        except encryption.CipherError as exc:
            raise ConfigDecryptFailure(f"failed to decrypt config file {self.config_path}: {exc}") from exc
        except OSError as exc:
            raise ConfigAccessFailure(f"failed to open config file {self.config_path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigParseFailure(f"invalid JSON format in config file {self.config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigParseFailure(
                f"config file {self.config_path} must hold a JSON object, got {models.kind_of(data)}"
            )
        logger.debug("Decrypted %s", self.config_path)
        return data

    def _write_config(self, passphrase, data):
        try:
            payload = json.dumps(data, indent=JSON_INDENT, ensure_ascii=False).encode("utf-8")
            write_sealed(self.config_path, passphrase, payload)
        except (TypeError, ValueError, OSError, encryption.CipherError) as exc:
            raise ConfigPersistFailure(
                f"failed to save config file {self.config_path}, in-memory settings are not persisted: {exc}"
            ) from exc
        logger.debug("Saved %s", self.config_path)

    def load(self):
        """Re-reads the config file from disk, replacing the in-memory settings."""
        with self._lock:
            self._require_open()
            self._data = self._read_config(self._passphrase)

    def save(self):
        """Encrypts the in-memory settings and overwrites the config file."""
        with self._lock:
            self._require_open()
            self._write_config(self._passphrase, self._data)

    # Typed accessors
    def get(self, key):
        """Returns the value stored under `key`.

        Maps and arrays are returned as copies; change them through `set`.

        Raises:
            KeyNotFound: If the key is not set.
        """
        with self._lock:
            self._require_open()
            if key not in self._data:
                raise KeyNotFound(key)
            return copy.deepcopy(self._data[key])

    def get_default(self, key, default=None):
        try:
            return self.get(key)
        except KeyNotFound:
            return default

    def has(self, key) -> bool:
        with self._lock:
            self._require_open()
            return key in self._data

    def keys(self) -> list:
        with self._lock:
            self._require_open()
            return sorted(self._data)

    def get_string(self, key) -> str:
        value = self.get(key)
        if not isinstance(value, str):
            raise TypeMismatch(key, models.STRING, models.kind_of(value))
        return value

    def get_int(self, key) -> int:
        """Returns a number setting as an int.

        Floats, the usual JSON encoding of numbers, are truncated toward zero.
        """
        value = self.get(key)
        if not models.is_integer_like(value):
            raise TypeMismatch(key, "integer", models.kind_of(value))
        try:
            return models.as_int(value)
        except ValueError:
            raise TypeMismatch(key, "integer", f"non-finite {models.NUMBER}") from None

    def get_float(self, key) -> float:
        value = self.get(key)
        if not models.is_integer_like(value):
            raise TypeMismatch(key, models.NUMBER, models.kind_of(value))
        return float(value)

    def get_bool(self, key) -> bool:
        value = self.get(key)
        if not isinstance(value, bool):
            raise TypeMismatch(key, models.BOOLEAN, models.kind_of(value))
        return value

    def get_map(self, key) -> dict:
        value = self.get(key)
        if not isinstance(value, dict):
            raise TypeMismatch(key, models.MAP, models.kind_of(value))
        return value

    def get_array(self, key) -> list:
        value = self.get(key)
        if not isinstance(value, list):
            raise TypeMismatch(key, models.ARRAY, models.kind_of(value))
        return value

    def data(self) -> dict:
        """Returns a copy of every setting."""
        with self._lock:
            self._require_open()
            return copy.deepcopy(self._data)

    def export_plaintext(self) -> str:
        """Returns the decrypted settings as indented JSON text, for recovery and debugging."""
        with self._lock:
            self._require_open()
            return json.dumps(self._data, indent=JSON_INDENT, ensure_ascii=False)

    # Mutations
    def set(self, key, value):
        """Stores `value` under `key` and saves immediately.

        Args:
            key (str): The setting name.
            value: Any JSON-serializable value, stored as the JSON encoder renders it.

        Raises:
            ConfigPersistFailure: If saving fails. The new value stays in memory.
        """
        if not isinstance(key, str):
            raise TypeError(f"config keys must be strings, got {type(key).__name__}")
        value = models.ensure_serializable(value)
        with self._lock:
            self._require_open()
            self._data[key] = value
            self._write_config(self._passphrase, self._data)

    def update(self, values):
        """Stores several settings at once with a single save."""
        normalized = {}
        for key, value in dict(values).items():
            if not isinstance(key, str):
                raise TypeError(f"config keys must be strings, got {type(key).__name__}")
            normalized[key] = models.ensure_serializable(value)
        with self._lock:
            self._require_open()
            self._data.update(normalized)
            self._write_config(self._passphrase, self._data)

    def delete(self, key):
        """Removes `key` and saves. Removing a key that is not set is not an error."""
        with self._lock:
            self._require_open()
            self._data.pop(key, None)
            self._write_config(self._passphrase, self._data)

    def set_pass(self, new_passphrase):
        """Rotates the configuration passphrase.

        The key file is rewritten first; if that fails nothing else changes. The current
        settings are then re-encrypted under the new passphrase and reloaded from disk.
        If re-encrypting the config file fails, the key file is put back to the old
        passphrase before the error is raised.

        Args:
            new_passphrase (str): The new configuration passphrase. Surrounding
                whitespace is stripped, as it is when the key file is read.
        """
        with self._lock:
            self._require_open()
            if not isinstance(new_passphrase, str) or not new_passphrase.strip():
                raise ValueError("new passphrase must be a non-empty string")
            new_passphrase = new_passphrase.strip()
            old_passphrase = self._passphrase
            self._key_file.write(new_passphrase)
            try:
                self._write_config(new_passphrase, self._data)
            except ConfigPersistFailure:
                try:
                    self._key_file.write(old_passphrase)
                except KeyFilePersistFailure:
                    logger.error(
                        "Could not restore key file %s; it no longer matches config file %s",
                        self.key_file_path,
                        self.config_path,
                    )
                raise

            self._passphrase = new_passphrase
            self._data = self._read_config(new_passphrase)
            logger.info("Configuration passphrase rotated for %s", self.config_path)


def _remove_quietly(path):
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
