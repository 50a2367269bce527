"""
Keyring Configuration — Key loading, validated settings and bootstrap.

Reads keys from environment variables in the format:
    KEYRING_KEY_v{N} = <base64-encoded key>
    KEYRING_DIGEST_SALT = <string, may be empty but must be set>
    KEYRING_CIPHER = <encryptor name, default aes-128-cbc>

Security Note:
    Never log key material. Only log key IDs and version numbers.
"""
import os
import re
import base64
import binascii
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .encryptors import DEFAULT_ENCRYPTOR, Encryptor, get_encryptor
from .exceptions import InvalidSecret, MissingDigestSalt
from .keyring import Keyring

logger = logging.getLogger("navigator.keyring")

KEY_ENV_PREFIX = "KEYRING_KEY_v"
SALT_ENV = "KEYRING_DIGEST_SALT"
CIPHER_ENV = "KEYRING_CIPHER"

_OPTIONS = frozenset({"encryptor", "digest_salt"})


def load_keys(prefix: str = KEY_ENV_PREFIX) -> dict[int, bytes]:
    """Load keys from ``{prefix}{N}`` environment variables.

    Each env var value must be base64-encoded. Size is checked later, when
    the keys are bound to an encryptor.

    Returns:
        Mapping of key version (int) to raw key bytes; empty if none are set.

    Raises:
        InvalidSecret: If a value is not valid base64.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    keys: dict[int, bytes] = {}
    for name, value in os.environ.items():
        match = pattern.match(name)
        if match:
            try:
                keys[int(match.group(1))] = base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as err:
                raise InvalidSecret(f"{name} is not valid base64: {err}") from err
    logger.debug("Loaded %d key version(s): %s", len(keys), sorted(keys.keys()))
    return keys


class KeyringConfig(BaseModel):
    """Validated keyring configuration.

    ``digest_salt`` has no default on purpose: leaving it out raises
    ``MissingDigestSalt`` while an empty string disables salting.
    """

    keys: dict[int, Union[bytes, str]] = Field(default_factory=dict)
    digest_salt: str
    cipher: str = Field(default="aes-128-cbc")

    @model_validator(mode="before")
    @classmethod
    def require_digest_salt(cls, data: Any) -> Any:
        """Raise MissingDigestSalt instead of a generic validation error."""
        if isinstance(data, Mapping) and data.get("digest_salt") is None:
            raise MissingDigestSalt()
        return data

    @field_validator("cipher")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher is a registered encryptor."""
        get_encryptor(v)
        return v.lower()

    @property
    def encryptor(self) -> Encryptor:
        return get_encryptor(self.cipher)

    def build(self) -> Keyring:
        """Create the Keyring described by this configuration.

        Raises:
            InvalidSecret: If a key does not match the cipher's key size.
        """
        return Keyring(
            self.keys,
            encryptor=self.encryptor,
            digest_salt=self.digest_salt,
        )

    @classmethod
    def from_env(cls, prefix: str = KEY_ENV_PREFIX) -> "KeyringConfig":
        """Create KeyringConfig by loading values from environment.

        Raises:
            MissingDigestSalt: If KEYRING_DIGEST_SALT is not set.
        """
        return cls(
            keys=load_keys(prefix),
            digest_salt=os.environ.get(SALT_ENV),
            cipher=os.environ.get(CIPHER_ENV, "aes-128-cbc"),
        )


def create_keyring(
    keys: Optional[Mapping[Union[int, str], Union[bytes, str]]] = None,
    options: Optional[Mapping[str, Any]] = None,
) -> Keyring:
    """Build a Keyring from a raw id→secret mapping and an options mapping.

    Recognized options are ``encryptor`` (an encryptor or its registry name,
    default AES-128-CBC) and ``digest_salt`` (mandatory).

    Raises:
        TypeError: On unrecognized options.
        MissingDigestSalt: If ``digest_salt`` is absent or None.
        InvalidSecret: If a key does not match the encryptor's key size.
    """
    options = dict(options or {})
    unknown = set(options) - _OPTIONS
    if unknown:
        raise TypeError(f"Unknown keyring option(s): {', '.join(sorted(unknown))}")
    if options.get("digest_salt") is None:
        raise MissingDigestSalt()
    encryptor = options.get("encryptor")
    if encryptor is None:
        encryptor = DEFAULT_ENCRYPTOR
    elif isinstance(encryptor, str):
        encryptor = get_encryptor(encryptor)
    return Keyring(keys, encryptor=encryptor, digest_salt=options["digest_salt"])
