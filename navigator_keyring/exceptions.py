"""Keyring errors.

Every error is raised at the offending call and propagated unchanged;
nothing in this package retries or falls back to another key.
"""
from typing import Optional


class KeyringError(Exception):
    """Base class for all keyring errors."""


class InvalidSecret(KeyringError, ValueError):
    """Key secret does not match the encryptor's key size."""


class UnknownKey(KeyringError, LookupError):
    """No key with the requested id in a non-empty keyring."""


class EmptyKeyring(KeyringError, LookupError):
    """Id-resolving operation attempted on a keyring without keys."""


class InvalidAuthentication(KeyringError):
    """Ciphertext was rejected by the encryptor."""


class MissingDigestSalt(KeyringError):
    """Keyring built without a ``digest_salt`` option."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or (
                "Please provide digest_salt; "
                "you can disable this error by explicitly passing an empty string."
            )
        )
