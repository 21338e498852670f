"""
This module provides the passphrase-based cipher used for both encrypted files.

It uses the `cryptography` library (Fernet symmetric encryption, keyed through PBKDF2)
so that the key file and the configuration file can be sealed with a human passphrase
instead of a raw key. The module is responsible for:
- Deriving a Fernet key from a passphrase and a random per-file salt.
- Writing the tagged file format: `MAGIC`, the salt, then the raw Fernet token.
- Reading that format back and returning the decrypted UTF-8 text.

The Fernet token is stored as raw bytes rather than base64 text, so any single-byte
change after the header breaks the token's HMAC and is reported as a `CipherAuthError`.
"""
# sealedconfig/encryption.py

import base64
import os

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

MAGIC = b"SealedCfg~01!"
SALT_SIZE = 16
KDF_ITERATIONS = 480_000


class CipherError(Exception):
    """Base class for failures raised by `encrypt` and `decrypt`."""


class CipherFormatError(CipherError):
    """The data is not in the sealed file format (bad header or truncated salt)."""


class CipherAuthError(CipherError):
    """The passphrase is wrong or the ciphertext has been altered."""


def derive_key(passphrase: str, salt: bytes) -> bytes:
    """Derives a url-safe base64 Fernet key from a passphrase.

    Args:
        passphrase (str): The secret entered by the operator or baked into the build.
        salt (bytes): The per-file random salt.

    Returns:
        bytes: A key accepted by `Fernet`.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))


def encrypt(writer, passphrase: str, plaintext: bytes) -> None:
    """Encrypts `plaintext` under `passphrase` and writes the sealed bytes to `writer`.

    Args:
        writer: A binary file-like object opened for writing.
        passphrase (str): The passphrase protecting the data.
        plaintext (bytes): The bytes to seal.
    """
    if not isinstance(plaintext, bytes):
        raise TypeError("plaintext must be bytes")
    salt = os.urandom(SALT_SIZE)
    token = Fernet(derive_key(passphrase, salt)).encrypt(plaintext)
    writer.write(MAGIC + salt + base64.urlsafe_b64decode(token))


def decrypt(reader, passphrase: str) -> str:
    """Reads sealed bytes from `reader` and returns the decrypted text.

    Args:
        reader: A binary file-like object opened for reading.
        passphrase (str): The passphrase the data was sealed with.

    Returns:
        str: The decrypted plaintext, decoded as UTF-8.

    Raises:
        CipherFormatError: If the header is missing or the data is truncated.
        CipherAuthError: If the passphrase is wrong or the data was tampered with.
    """
    raw = reader.read()
    if not raw.startswith(MAGIC):
        raise CipherFormatError("missing sealed file header")
    body = raw[len(MAGIC):]
    if len(body) <= SALT_SIZE:
        raise CipherFormatError("sealed data is truncated")
    salt, token = body[:SALT_SIZE], body[SALT_SIZE:]

    try:
        plaintext = Fernet(derive_key(passphrase, salt)).decrypt(base64.urlsafe_b64encode(token))
    except InvalidToken as exc:
        raise CipherAuthError("wrong passphrase or corrupted data") from exc
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CipherAuthError("decrypted data is not valid UTF-8") from exc
