"""
This module manages the key file that holds the configuration passphrase.

The key file is sealed with the build-time secret. On the first run it does not exist,
so the operator is prompted once for a configuration passphrase, which is then sealed
into a new key file. On every later run the passphrase is recovered from that file.
The module is responsible for:
- Probing whether the key file exists, separating "not found" from real I/O errors.
- Reading and decrypting the passphrase, stripping whitespace left by interactive entry.
- Writing a new key file without leaving a half-written file behind on failure.
- Running the first-run vs. recovery decision (`KeyFile.bootstrap`).

A key file that exists but cannot be decrypted is never replaced by prompting again,
because the configuration file on disk is still sealed with the old passphrase.
"""
# sealedconfig/keyfile.py

import enum
import logging
import os
import sys
import tempfile

from sealedconfig import encryption
from sealedconfig.errors import (
    KeyFileAccessFailure,
    KeyFileDecryptFailure,
    KeyFilePersistFailure,
    MissingBuildSecret,
    PromptFailure,
)

logger = logging.getLogger(__name__)


class KeyFileState(enum.Enum):
    NO_KEY_FILE = "no_key_file"
    KEY_FILE_VALID = "key_file_valid"


def read_passphrase_from_stdin(stream=None) -> str:
    """Reads one line from standard input and strips surrounding whitespace.

    Args:
        stream: The text stream to read from. Defaults to `sys.stdin`.

    Returns:
        str: The entered passphrase.

    Raises:
        PromptFailure: If input is closed before a line is read or reading fails.
    """
    stream = stream or sys.stdin
    try:
        line = stream.readline()
    except OSError as exc:
        raise PromptFailure(f"failed to read password: {exc}") from exc
    if not line:
        raise PromptFailure("failed to read password: end of input")
    return line.strip()


def write_sealed(path, passphrase, plaintext: bytes):
    """Seals `plaintext` and replaces the file at `path` with the result.

    The data is written to a temporary file in the same directory first, so a failure
    part way through leaves any existing file untouched. OS and cipher errors propagate.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".sealed-", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            encryption.encrypt(f, passphrase, plaintext)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise


class KeyFile:
    """The encrypted single-value store for the configuration passphrase.

    Attributes:
        path (str): Location of the key file on disk.
    """

    def __init__(self, path, build_secret):
        self.path = path
        self._build_secret = build_secret

    def __repr__(self):
        return f"KeyFile(path={self.path!r})"

    def check_build_secret(self):
        if not self._build_secret:
            raise MissingBuildSecret()

    def probe(self) -> KeyFileState:
        """Reports whether the key file exists.

        Raises:
            KeyFileAccessFailure: For any error other than the file being absent.
        """
        try:
            os.stat(self.path)
        except FileNotFoundError:
            return KeyFileState.NO_KEY_FILE
        except OSError as exc:
            raise KeyFileAccessFailure(f"failed to check key file {self.path}: {exc}") from exc
        return KeyFileState.KEY_FILE_VALID

    def read(self) -> str:
        """Decrypts the key file and returns the configuration passphrase."""
        self.check_build_secret()
        try:
            with open(self.path, "rb") as f:
                passphrase = encryption.decrypt(f, self._build_secret)
        except encryption.CipherError as exc:
            raise KeyFileDecryptFailure(f"failed to decrypt key file {self.path}: {exc}") from exc
        except OSError as exc:
            raise KeyFileAccessFailure(f"failed to open key file {self.path}: {exc}") from exc
        return passphrase.strip()

    def write(self, passphrase):
        """Seals `passphrase` with the build secret and (re)writes the key file."""
        self.check_build_secret()
        try:
            write_sealed(self.path, self._build_secret, passphrase.encode("utf-8"))
        except (OSError, encryption.CipherError) as exc:
            raise KeyFilePersistFailure(f"failed to create key file {self.path}: {exc}") from exc
        logger.debug("Key file %s written", self.path)

    def remove(self):
        """Deletes the key file if it exists."""
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass

    def bootstrap(self, prompt, config_path=""):
        """Obtains the configuration passphrase, creating the key file on first run.

        Args:
            prompt (callable): Called with no arguments to obtain a new passphrase
                when the key file does not exist yet.
            config_path (str): Shown to the operator in the first-run prompt.

        Returns:
            tuple: `(passphrase, created)`, where `created` is True if this call
                   wrote a new key file.
        """
        self.check_build_secret()
        state = self.probe()
        if state is KeyFileState.KEY_FILE_VALID:
            logger.debug("Recovering configuration passphrase from %s", self.path)
            return self.read(), False

        print(f"First run: set an encryption password for config file {config_path}: ", end="", flush=True)
        passphrase = prompt().strip()
        self.write(passphrase)
        print("Key file created.")
        logger.info("Key file %s created", self.path)
        return passphrase, True
