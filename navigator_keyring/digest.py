"""
Content digest — salted SHA-1 fingerprint of a plaintext.

The salt is appended to the message, not HMAC-mixed: the result is a
lookup/deduplication fingerprint, not an authentication tag. Do not use it
to detect tampering.
"""
import hashlib
from typing import Union

DIGEST_SIZE = 40  # hex characters


def to_bytes(value: Union[bytes, str]) -> bytes:
    """Return value as bytes, UTF-8 encoding str.

    Raises:
        TypeError: If value is neither bytes-like nor str.
    """
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(
        f"Expected bytes or str, got {type(value).__name__}"
    )


def digest(message: Union[bytes, str], salt: Union[bytes, str] = "") -> str:
    """Return the lowercase hex SHA-1 of ``message + salt``.

    Args:
        message: Plaintext to fingerprint.
        salt: Suffix mixed into the hash; an empty salt hashes the message alone.

    Returns:
        40-character lowercase hex string.
    """
    return hashlib.sha1(to_bytes(message) + to_bytes(salt)).hexdigest()
