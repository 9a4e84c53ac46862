"""Exceptions raised by stackconf."""


class StackconfError(Exception):
    """Base exception for stackconf errors."""
    pass


class InvalidKeyError(StackconfError):
    """Configuration key is malformed or its namespace cannot be resolved."""
    pass


class KeyNotFoundError(StackconfError):
    """Configuration key is not set for the requested stack."""

    def __init__(self, key: str, stack: str):
        self.key = key
        self.stack = stack
        super().__init__(f"configuration key '{key}' not found for stack '{stack}'")


class DecryptionError(StackconfError):
    """Ciphertext could not be decrypted."""
    pass


class IncorrectPassphraseError(DecryptionError):
    """Passphrase does not match the project's encryption salt."""
    pass


class EncryptionError(StackconfError):
    """Plaintext could not be encrypted."""
    pass


class ProjectNotFoundError(StackconfError):
    """No project file could be located."""
    pass


class ProjectFileError(StackconfError):
    """Project file exists but cannot be read or parsed."""
    pass


class ForbiddenDecryptError(RuntimeError):
    """A secure value reached code that assumed plaintext (a programming error)."""
    pass
