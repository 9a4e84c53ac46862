"""
Decrypters for configuration values.

Three interchangeable capabilities share a ``decrypt(ciphertext)`` method:

- SymmetricCrypter: real AES-GCM encryption with a passphrase-derived key
- BlindingDecrypter: masks secrets without touching key material
- ForbiddenDecrypter: guard for code paths that must never decrypt
"""

import base64
import binascii
import logging
import os
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import (
    DecryptionError,
    EncryptionError,
    ForbiddenDecryptError,
    IncorrectPassphraseError,
)
from .settings import KDF_ITERATIONS, SECRET_MASK

logger = logging.getLogger(__name__)

VERSION_PREFIX = "v1"
KEY_LENGTH = 32
NONCE_LENGTH = 12
SALT_LENGTH = 8

# Encrypted into the salt state so a wrong passphrase is caught up front
CHECK_PHRASE = "stackconf"


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)


def derive_key(passphrase: str, salt: bytes, iterations: int = KDF_ITERATIONS) -> bytes:
    """Derive a 256-bit key from a passphrase and salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


class SymmetricCrypter:
    """AES-256-GCM encryption of configuration values."""

    def __init__(self, key: bytes):
        self._aead = AESGCM(key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt ``plaintext`` to ``v1:<nonce>:<ciphertext>``."""
        nonce = os.urandom(NONCE_LENGTH)
        try:
            sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        except (OverflowError, ValueError) as e:
            raise EncryptionError(f"failed to encrypt value: {e}") from e
        return f"{VERSION_PREFIX}:{_b64encode(nonce)}:{_b64encode(sealed)}"

    def decrypt(self, ciphertext: str) -> str:
        parts = ciphertext.split(":")
        if len(parts) != 3 or parts[0] != VERSION_PREFIX:
            raise DecryptionError("bad value: unrecognized ciphertext format")

        try:
            nonce = _b64decode(parts[1])
            sealed = _b64decode(parts[2])
        except (binascii.Error, ValueError) as e:
            raise DecryptionError(f"bad value: {e}") from e

        try:
            plaintext = self._aead.decrypt(nonce, sealed, None)
        except InvalidTag as e:
            raise DecryptionError("incorrect key or corrupt ciphertext") from e
        except ValueError as e:
            raise DecryptionError(f"bad value: {e}") from e

        return plaintext.decode("utf-8")


class BlindingDecrypter:
    """Returns a fixed mask for every secret; never needs key material."""

    def decrypt(self, ciphertext: str) -> str:
        return SECRET_MASK


class ForbiddenDecrypter:
    """Fails on any decrypt call."""

    def decrypt(self, ciphertext: str) -> str:
        raise ForbiddenDecryptError("decrypt called on a value assumed to be plaintext")


Decrypter = Union[SymmetricCrypter, BlindingDecrypter, ForbiddenDecrypter]


def new_salt_state(passphrase: str) -> tuple[SymmetricCrypter, str]:
    """
    Create a crypter with a fresh random salt.

    Returns the crypter and the salt state to store in the project,
    formatted ``v1:<salt>:<encrypted check phrase>``.
    """
    salt = os.urandom(SALT_LENGTH)
    crypter = SymmetricCrypter(derive_key(passphrase, salt))
    check = crypter.encrypt(CHECK_PHRASE)
    logger.debug("Generated new encryption salt")
    return crypter, f"{VERSION_PREFIX}:{_b64encode(salt)}:{check}"


def crypter_from_salt_state(passphrase: str, salt_state: str) -> SymmetricCrypter:
    """Rebuild the crypter for a stored salt state, verifying the passphrase."""
    parts = salt_state.split(":", 2)
    if len(parts) != 3 or parts[0] != VERSION_PREFIX:
        raise DecryptionError("bad encryption salt in project file")

    try:
        salt = _b64decode(parts[1])
    except (binascii.Error, ValueError) as e:
        raise DecryptionError(f"bad encryption salt in project file: {e}") from e

    crypter = SymmetricCrypter(derive_key(passphrase, salt))
    try:
        check = crypter.decrypt(parts[2])
    except DecryptionError as e:
        raise IncorrectPassphraseError("incorrect passphrase") from e

    if check != CHECK_PHRASE:
        raise IncorrectPassphraseError("incorrect passphrase")

    logger.debug("Passphrase verified against project salt")
    return crypter
