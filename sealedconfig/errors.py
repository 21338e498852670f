"""
Exception types raised by the configuration store.

Every failure the store can report derives from `ConfigStoreError`, so callers can
catch the whole family at once or react to a single case. Initialization failures
(`MissingBuildSecret` through `ConfigParseFailure`) abort startup; accessor failures
(`KeyNotFound`, `TypeMismatch`, `NotInitialized`) and `ConfigPersistFailure` are
ordinary recoverable errors for the immediate caller.
"""
# sealedconfig/errors.py


class ConfigStoreError(Exception):
    """Base class for all configuration store errors."""


class MissingBuildSecret(ConfigStoreError):
    """The build-time key file password was not set."""

    def __init__(self, message=None):
        super().__init__(message or "key file password not set, stamp the build with a secret first")


class PromptFailure(ConfigStoreError):
    """The first-run passphrase could not be read from the operator."""


class KeyFileAccessFailure(ConfigStoreError):
    pass


class KeyFilePersistFailure(ConfigStoreError):
    pass


class KeyFileDecryptFailure(ConfigStoreError):
    """The key file could not be decrypted with the build secret.

    Either the file is corrupted or the binary was rebuilt with a different secret.
    """


class ConfigAccessFailure(ConfigStoreError):
    pass


class ConfigDecryptFailure(ConfigStoreError):
    pass


class ConfigParseFailure(ConfigStoreError):
    """The decrypted configuration is not a JSON object."""


class ConfigPersistFailure(ConfigStoreError):
    """Saving failed; the in-memory settings and the file on disk now differ."""


class NotInitialized(ConfigStoreError):
    def __init__(self, message=None):
        super().__init__(message or "config not initialized, call init first")


class KeyNotFound(ConfigStoreError, KeyError):
    def __init__(self, key):
        self.key = key
        super().__init__(f"config key '{key}' not found")

    def __str__(self):
        # KeyError would otherwise wrap the message in quotes.
        return self.args[0]


class TypeMismatch(ConfigStoreError, TypeError):
    """A typed accessor found a value of a different kind.

    Attributes:
        key (str): The setting that was read.
        expected_kind (str): The kind the accessor asked for.
        actual_kind (str): The kind actually stored.
    """

    def __init__(self, key, expected_kind, actual_kind):
        self.key = key
        self.expected_kind = expected_kind
        self.actual_kind = actual_kind
        super().__init__(f"config key '{key}' is not {expected_kind}, got {actual_kind}")
