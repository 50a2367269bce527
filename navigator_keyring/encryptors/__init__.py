"""Cipher strategies a Keyring can be bound to."""
from .base import Encryptor
from .aes import (
    AESCBC,
    AESCBCHMAC,
    AES128CBC,
    AES192CBC,
    AES256CBC,
    AES128CBCHMAC,
    AES256CBCHMAC,
)
from .aead import AEAD, AES128GCM, AES256GCM, CHACHA20POLY1305

DEFAULT_ENCRYPTOR = AES128CBC

ENCRYPTORS: dict[str, Encryptor] = {
    "aes-128-cbc": AES128CBC,
    "aes-192-cbc": AES192CBC,
    "aes-256-cbc": AES256CBC,
    "aes-128-cbc-hmac": AES128CBCHMAC,
    "aes-256-cbc-hmac": AES256CBCHMAC,
    "aes-128-gcm": AES128GCM,
    "aes-256-gcm": AES256GCM,
    "chacha20-poly1305": CHACHA20POLY1305,
}


def get_encryptor(name: str) -> Encryptor:
    """Return the encryptor registered under ``name`` (case-insensitive).

    Raises:
        ValueError: If no encryptor has that name.
    """
    try:
        return ENCRYPTORS[name.lower()]
    except (KeyError, AttributeError):
        raise ValueError(
            f"Unsupported encryptor: {name!r} "
            f"(supported: {', '.join(sorted(ENCRYPTORS))})"
        ) from None


__all__ = [
    "Encryptor",
    "AESCBC",
    "AESCBCHMAC",
    "AEAD",
    "AES128CBC",
    "AES192CBC",
    "AES256CBC",
    "AES128CBCHMAC",
    "AES256CBCHMAC",
    "AES128GCM",
    "AES256GCM",
    "CHACHA20POLY1305",
    "DEFAULT_ENCRYPTOR",
    "ENCRYPTORS",
    "get_encryptor",
]
