"""
Get, list, set and delete configuration values.

Every operation takes an explicit stack name; the empty string means the
project-wide scope. Reads never persist anything. Writes mutate one scope
of the store and then hand the whole store to ``save``.
"""

import logging
from typing import Callable, List, Tuple

from . import settings
from .crypto import (
    BlindingDecrypter,
    Decrypter,
    ForbiddenDecrypter,
    SymmetricCrypter,
    crypter_from_salt_state,
    new_salt_state,
)
from .errors import DecryptionError, KeyNotFoundError
from .keys import Key, pretty_key
from .store import ConfigStore, has_secure_value
from .values import Value

logger = logging.getLogger(__name__)

SaveFn = Callable[[ConfigStore], None]
CrypterFactory = Callable[[], SymmetricCrypter]
# Called with confirm=True when the passphrase is about to become the project's
PassphraseReader = Callable[[bool], str]


def _passphrase(read_passphrase: PassphraseReader, confirm: bool) -> str:
    passphrase = settings.get_passphrase()
    if passphrase is None:
        passphrase = read_passphrase(confirm)
    return passphrase


def get_symmetric_decrypter(store: ConfigStore, read_passphrase: PassphraseReader) -> SymmetricCrypter:
    """
    Build the project's crypter for reading; never modifies the project.

    Raises DecryptionError if the project has no encryption salt, since no
    passphrase could decrypt its secure values.
    """
    if not store.encryption_salt:
        raise DecryptionError("project has secure values but no encryption salt")

    return crypter_from_salt_state(_passphrase(read_passphrase, False), store.encryption_salt)


def get_symmetric_crypter(
    store: ConfigStore,
    save: SaveFn,
    read_passphrase: PassphraseReader,
) -> SymmetricCrypter:
    """
    Build the project's crypter for writing secrets.

    The passphrase comes from STACKCONF_PASSPHRASE or, failing that, from
    ``read_passphrase``. A project without a salt gets one, and is saved so
    later invocations derive the same key.
    """
    if store.encryption_salt:
        return get_symmetric_decrypter(store, read_passphrase)

    passphrase = _passphrase(read_passphrase, True)
    crypter, salt_state = new_salt_state(passphrase)
    store.encryption_salt = salt_state
    logger.info("Initialized encryption salt for project %s", store.name)
    save(store)
    return crypter


def _read(value: Value, decrypter: Decrypter, display_key: str) -> str:
    try:
        return value.read(decrypter)
    except DecryptionError as e:
        raise DecryptionError(
            f"could not decrypt configuration value '{display_key}': {e}"
        ) from e


def list_config(
    store: ConfigStore,
    stack: str,
    show_secrets: bool,
    get_crypter: CrypterFactory,
) -> List[Tuple[str, str]]:
    """
    Effective configuration for ``stack`` as ``(display key, value)`` rows.

    Rows are ordered by fully-qualified key so values from one namespace
    stay together. Secrets are blinded unless ``show_secrets`` is set and
    the listing contains at least one secret. Empty when no
    configuration exists for the scope.
    """
    config = store.effective_config(stack)
    if not config:
        return []

    decrypter: Decrypter = BlindingDecrypter()
    if show_secrets and has_secure_value(config):
        decrypter = get_crypter()

    rows = []
    for key in sorted(config, key=str):
        display_key = pretty_key(str(key), store.name)
        rows.append((display_key, _read(config[key], decrypter, display_key)))

    logger.debug("Listed %d values for stack '%s'", len(rows), stack)
    return rows


def get_config(
    store: ConfigStore,
    stack: str,
    key: Key,
    get_crypter: CrypterFactory,
) -> str:
    """Decrypted value of ``key`` in ``stack``'s effective configuration."""
    display_key = pretty_key(str(key), store.name)
    config = store.effective_config(stack)
    if not config or key not in config:
        raise KeyNotFoundError(display_key, stack)

    value = config[key]
    decrypter: Decrypter = ForbiddenDecrypter()
    if value.secure:
        decrypter = get_crypter()

    return _read(value, decrypter, display_key)


def set_config(store: ConfigStore, stack: str, key: Key, value: Value, save: SaveFn) -> None:
    """Set ``key`` in the project scope (empty stack) or in ``stack``."""
    store.writable_config(stack)[key] = value
    logger.debug(
        "Set %s value %s for stack '%s'",
        "secure" if value.secure else "plain", key, stack,
    )
    save(store)


def delete_config(store: ConfigStore, stack: str, key: Key, save: SaveFn) -> None:
    """Remove ``key`` from the project scope or from ``stack``; missing keys are ignored."""
    config = store.stack_config(stack)
    if config is not None and config.pop(key, None) is not None:
        logger.debug("Removed %s from stack '%s'", key, stack)
    save(store)
