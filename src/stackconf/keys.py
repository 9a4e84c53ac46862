"""Namespaced configuration keys."""

import re
from typing import Callable, NamedTuple

from .errors import InvalidKeyError, StackconfError

DELIMITER = ":"
DEFAULT_CATEGORY = "config"

_PART = r"[^:\s]+"
_PART_RE = re.compile(rf"^{_PART}$")
_KEY_RE = re.compile(rf"^({_PART}):({_PART}):({_PART})$")


class Key(NamedTuple):
    """A fully-qualified key, serialized as ``namespace:category:name``."""

    namespace: str
    category: str
    name: str

    def __str__(self) -> str:
        return DELIMITER.join(self)

    @classmethod
    def parse(cls, raw: str) -> "Key":
        """Parse a fully-qualified key string."""
        match = _KEY_RE.match(raw)
        if not match:
            raise InvalidKeyError(
                f"'{raw}' is not a valid key; expected namespace:category:name"
            )
        return cls(*match.groups())


def is_valid_part(part: str) -> bool:
    """Whether ``part`` can be used as one segment of a key."""
    return bool(_PART_RE.match(part))


def parse_key(raw: str, namespace_provider: Callable[[], str]) -> Key:
    """
    Parse a key given on the command line.

    A bare name (no delimiter) is treated as if
    ``<project-name>:config:<name>`` had been written instead. The project
    name is only looked up in that case.
    """
    if DELIMITER in raw:
        return Key.parse(raw)

    if not is_valid_part(raw):
        raise InvalidKeyError(f"'{raw}' is not a valid key name")

    try:
        namespace = namespace_provider()
    except StackconfError as e:
        raise InvalidKeyError(f"cannot resolve namespace for '{raw}': {e}") from e

    return Key.parse(f"{namespace}{DELIMITER}{DEFAULT_CATEGORY}{DELIMITER}{raw}")


def pretty_key(key: str, namespace: str) -> str:
    """Strip the ``<namespace>:config:`` prefix for display, if present."""
    prefix = f"{namespace}{DELIMITER}{DEFAULT_CATEGORY}{DELIMITER}"
    if key.startswith(prefix):
        return key[len(prefix):]
    return key
