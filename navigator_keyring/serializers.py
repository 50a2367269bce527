"""
Value serialization for ``Keyring.encrypt_value`` / ``decrypt_value``.

Supports: str, int, float, dict, list, bytes, bool, None.
bytes values are wrapped as {"__keyring_bytes_b64__": "<base64>"} for a safe
JSON round-trip.
"""
import base64
from typing import Any

import orjson

_BYTES_WRAPPER_KEY = "__keyring_bytes_b64__"


def serialize_value(value: Any) -> bytes:
    """Serialize a Python value to orjson-encoded bytes.

    Raises:
        TypeError: If the value is not JSON serializable.
    """
    if isinstance(value, (bytes, bytearray)):
        wrapped = {_BYTES_WRAPPER_KEY: base64.b64encode(value).decode("ascii")}
        return orjson.dumps(wrapped)
    try:
        return orjson.dumps(value)
    except orjson.JSONEncodeError as err:
        raise TypeError(f"Value is not serializable: {err}") from err


def deserialize_value(data: bytes) -> Any:
    """Deserialize bytes produced by :func:`serialize_value`."""
    parsed = orjson.loads(data)
    if isinstance(parsed, dict) and _BYTES_WRAPPER_KEY in parsed and len(parsed) == 1:
        return base64.b64decode(parsed[_BYTES_WRAPPER_KEY])
    return parsed
