"""Navigator Keyring — Versioned symmetric keys for transparent key rotation.

Encrypt with the newest key, decrypt with any older key still present:

    >>> keyring = Keyring({1: old_secret, 2: new_secret}, digest_salt="salt")
    >>> ciphertext, key_id, digest = keyring.encrypt("secret")  # key_id == 2
    >>> keyring.decrypt(ciphertext, key_id)

Security Note (Threat Model):
    The default AES-128-CBC encryptor has no integrity check and the digest
    is a salted content hash, not a MAC. Use an ``-hmac`` or AEAD encryptor
    when ciphertext may be tampered with.
"""
from .version import __version__
from .exceptions import (
    KeyringError,
    InvalidSecret,
    UnknownKey,
    EmptyKeyring,
    InvalidAuthentication,
    MissingDigestSalt,
)
from .key import Key
from .encryptors import Encryptor, get_encryptor
from .keyring import Keyring, Envelope, MISSING
from .config import KeyringConfig, load_keys, create_keyring
from .rotation import rotate, rotate_all

__all__ = [
    "__version__",
    "KeyringError",
    "InvalidSecret",
    "UnknownKey",
    "EmptyKeyring",
    "InvalidAuthentication",
    "MissingDigestSalt",
    "Key",
    "Encryptor",
    "get_encryptor",
    "Keyring",
    "Envelope",
    "MISSING",
    "KeyringConfig",
    "load_keys",
    "create_keyring",
    "rotate",
    "rotate_all",
]
