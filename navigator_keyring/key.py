"""
Keyring Key — One immutable, versioned symmetric key.

Security Note:
    Never log key material. ``repr()`` only exposes the id and size.
"""
import base64
import binascii
import hmac
from typing import Union

from .exceptions import InvalidSecret


def normalize_id(key_id: Union[int, str]) -> int:
    """Normalize a key id to a non-negative integer.

    Args:
        key_id: Integer id, or its decimal string representation.

    Returns:
        The id as int.

    Raises:
        ValueError: If the id is not an integer or is negative.
    """
    if isinstance(key_id, bool):
        raise ValueError(f"Invalid key id: {key_id!r}")
    try:
        value = int(key_id)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid key id: {key_id!r}") from None
    if isinstance(key_id, float) and value != key_id:
        raise ValueError(f"Invalid key id: {key_id!r}")
    if value < 0:
        raise ValueError(f"Key id must be non-negative, got {value}")
    return value


def decode_secret(secret: Union[bytes, str]) -> bytes:
    """Return raw secret bytes; str secrets are base64-decoded.

    Raises:
        InvalidSecret: If the secret is neither bytes nor valid base64.
    """
    if isinstance(secret, (bytes, bytearray, memoryview)):
        return bytes(secret)
    if isinstance(secret, str):
        try:
            return base64.b64decode(secret, validate=True)
        except (binascii.Error, ValueError) as err:
            raise InvalidSecret(
                f"Secret is not valid base64: {err}"
            ) from err
    raise InvalidSecret(
        f"Secret must be bytes or a base64 string, got {type(secret).__name__}"
    )


class Key:
    """A versioned symmetric key.

    The secret length is checked against ``key_size`` on construction,
    so a wrongly sized key never reaches an encryptor.
    """

    __slots__ = ('_id', '_secret')

    def __init__(self, id: Union[int, str], secret: Union[bytes, str], key_size: int):
        secret = decode_secret(secret)
        if len(secret) != key_size:
            raise InvalidSecret(
                f"Secret must be {key_size} bytes, instead got {len(secret)}"
            )
        object.__setattr__(self, '_id', normalize_id(id))
        object.__setattr__(self, '_secret', secret)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def id(self) -> int:
        return self._id

    @property
    def secret(self) -> bytes:
        return self._secret

    def __len__(self) -> int:
        return len(self._secret)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self._id == other._id and hmac.compare_digest(self._secret, other._secret)

    def __hash__(self) -> int:
        return hash((self._id, self._secret))

    def __repr__(self) -> str:
        return f'<Key id={self._id} size={len(self._secret)}>'
