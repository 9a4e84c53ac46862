"""Configuration values: plaintext or ciphertext."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import ProjectFileError

if TYPE_CHECKING:
    from .crypto import Decrypter

SECURE_TAG = "secure"


@dataclass(frozen=True)
class Value:
    """
    A configuration value.

    ``raw`` holds the plaintext for plain values and the ciphertext for
    secure ones; decrypted secret text is never stored here.
    """

    raw: str
    secure: bool = False

    @classmethod
    def plain(cls, text: str) -> "Value":
        return cls(text, secure=False)

    @classmethod
    def encrypted(cls, ciphertext: str) -> "Value":
        return cls(ciphertext, secure=True)

    def read(self, decrypter: "Decrypter") -> str:
        """Return the plaintext, decrypting only if the value is secure."""
        if not self.secure:
            return self.raw
        return decrypter.decrypt(self.raw)

    def to_yaml(self) -> Any:
        if self.secure:
            return {SECURE_TAG: self.raw}
        return self.raw

    @classmethod
    def from_yaml(cls, data: Any) -> "Value":
        if isinstance(data, dict):
            if set(data) != {SECURE_TAG} or not isinstance(data[SECURE_TAG], str):
                raise ProjectFileError(f"invalid secure value: {data!r}")
            return cls.encrypted(data[SECURE_TAG])
        if isinstance(data, bool):
            return cls.plain("true" if data else "false")
        if isinstance(data, (str, int, float)):
            return cls.plain(str(data))
        raise ProjectFileError(f"invalid configuration value: {data!r}")
