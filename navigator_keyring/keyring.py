"""
Keyring — Versioned symmetric keys with encrypt-new / decrypt-old semantics.

Provides the public API:
- ``encrypt(plaintext, key_id=None)`` — encrypt under ``key_id`` or the current key
- ``decrypt(ciphertext, key_id)`` — decrypt with the key that produced the ciphertext
- ``digest(plaintext)`` — salted content fingerprint
- ``lookup(id)`` / ``add(id, secret)`` / ``clear()`` — key management

The current key is the one with the highest id. Encrypting returns an
``Envelope`` (ciphertext, key_id, digest); callers store the whole triple
and hand ``ciphertext`` and ``key_id`` back to ``decrypt``.

Security Note:
    Never log plaintext, ciphertext or key material. Only key ids are logged.
"""
import logging
import threading
from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple, Optional, Union

from .digest import digest as content_digest, to_bytes
from .encryptors import DEFAULT_ENCRYPTOR, Encryptor
from .exceptions import EmptyKeyring, MissingDigestSalt, UnknownKey
from .key import Key, normalize_id
from .serializers import deserialize_value, serialize_value

logger = logging.getLogger("navigator.keyring")


class _Missing:
    """Marker for an option that was not supplied at all."""

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Envelope(NamedTuple):
    """Result of ``Keyring.encrypt``; unpacks as (ciphertext, key_id, digest)."""

    ciphertext: bytes
    key_id: int
    digest: str


class Keyring:
    """Ordered collection of versioned keys bound to one encryptor.

    Args:
        keys: Mapping of key id to secret (bytes, or base64 str).
        encryptor: Cipher strategy; defaults to AES-128-CBC.
        digest_salt: Suffix for ``digest()``. Mandatory; pass ``""`` to
            disable salting explicitly.

    Raises:
        MissingDigestSalt: If ``digest_salt`` is not given (or is None).
        InvalidSecret: If a secret does not match ``encryptor.key_size``.
    """

    def __init__(
        self,
        keys: Optional[Mapping[Union[int, str], Union[bytes, str]]] = None,
        *,
        encryptor: Optional[Encryptor] = None,
        digest_salt: Union[str, bytes, None] = MISSING,
    ):
        if digest_salt is MISSING or digest_salt is None:
            raise MissingDigestSalt()
        if not isinstance(digest_salt, (str, bytes)):
            raise TypeError(
                f"digest_salt must be str or bytes, got {type(digest_salt).__name__}"
            )
        self._encryptor = DEFAULT_ENCRYPTOR if encryptor is None else encryptor
        self._digest_salt = digest_salt
        self._lock = threading.RLock()
        self._keys: list[Key] = [
            Key(key_id, secret, self._encryptor.key_size)
            for key_id, secret in (keys or {}).items()
        ]
        logger.debug(
            "Keyring created with %d key(s): %s", len(self._keys), self.key_ids
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def encryptor(self) -> Encryptor:
        return self._encryptor

    @property
    def digest_salt(self) -> Union[str, bytes]:
        return self._digest_salt

    @property
    def key_ids(self) -> list[int]:
        """Sorted unique ids of the keys present."""
        with self._lock:
            return sorted({key.id for key in self._keys})

    @property
    def empty(self) -> bool:
        with self._lock:
            return not self._keys

    # ------------------------------------------------------------------
    # Key management
    # ------------------------------------------------------------------

    def current_key(self) -> Optional[Key]:
        """Return the key with the highest id, or None for an empty keyring."""
        with self._lock:
            if not self._keys:
                return None
            return max(self._keys, key=lambda k: k.id)

    def lookup(self, key_id: Union[int, str]) -> Key:
        """Return the first key whose id equals ``key_id``.

        Raises:
            EmptyKeyring: If the keyring has no keys.
            UnknownKey: If no key has that id.
        """
        with self._lock:
            if not self._keys:
                raise EmptyKeyring("keyring doesn't have any keys")
            try:
                wanted = normalize_id(key_id)
            except ValueError:
                raise UnknownKey(
                    f"key={key_id} is not available on keyring"
                ) from None
            for key in self._keys:
                if key.id == wanted:
                    return key
        raise UnknownKey(f"key={key_id} is not available on keyring")

    def add(self, key_id: Union[int, str], secret: Union[bytes, str]) -> Key:
        """Append a new key. Existing keys with the same id are not replaced.

        Raises:
            InvalidSecret: If the secret does not match the encryptor's key size.
        """
        key = Key(key_id, secret, self._encryptor.key_size)
        with self._lock:
            self._keys.append(key)
        logger.debug("Key %d added to keyring", key.id)
        return key

    def clear(self) -> None:
        """Remove all keys; encryptor and digest salt are kept."""
        with self._lock:
            self._keys.clear()
        logger.debug("Keyring cleared")

    # ------------------------------------------------------------------
    # Encryption protocol
    # ------------------------------------------------------------------

    def encrypt(
        self,
        plaintext: Union[bytes, str],
        key_id: Optional[Union[int, str]] = None
    ) -> Envelope:
        """Encrypt plaintext under ``key_id``, or the current key if omitted.

        Args:
            plaintext: Data to encrypt; str is UTF-8 encoded.
            key_id: Optional key id to encrypt with.

        Returns:
            Envelope of (ciphertext, key id used, digest of plaintext).

        Raises:
            EmptyKeyring: If the keyring has no keys.
            UnknownKey: If ``key_id`` is not present.
        """
        if key_id is None:
            current = self.current_key()
            if current is None:
                raise EmptyKeyring("keyring doesn't have any keys")
            key = current
        else:
            key = self.lookup(key_id)
        data = to_bytes(plaintext)
        ciphertext = self._encryptor.encrypt(key, data)
        logger.debug("Encrypted %d byte(s) with key %d", len(data), key.id)
        return Envelope(ciphertext, key.id, self.digest(data))

    def decrypt(self, ciphertext: bytes, key_id: Union[int, str]) -> bytes:
        """Decrypt ciphertext with the key that produced it.

        Raises:
            EmptyKeyring: If the keyring has no keys.
            UnknownKey: If ``key_id`` is not present.
            InvalidAuthentication: If the encryptor rejects the ciphertext.
        """
        key = self.lookup(key_id)
        return self._encryptor.decrypt(key, ciphertext)

    def digest(self, plaintext: Union[bytes, str]) -> str:
        """Return the salted SHA-1 hex fingerprint of plaintext."""
        return content_digest(plaintext, self._digest_salt)

    def encrypt_value(
        self,
        value: Any,
        key_id: Optional[Union[int, str]] = None
    ) -> Envelope:
        """Serialize a Python value with orjson and encrypt it.

        Supported types: str, int, float, dict, list, bytes, bool, None.
        """
        return self.encrypt(serialize_value(value), key_id)

    def decrypt_value(self, ciphertext: bytes, key_id: Union[int, str]) -> Any:
        """Decrypt and deserialize a value stored by ``encrypt_value``."""
        return deserialize_value(self.decrypt(ciphertext, key_id))

    # ------------------------------------------------------------------
    # Magic Methods
    # ------------------------------------------------------------------

    def __getitem__(self, key_id: Union[int, str]) -> Key:
        return self.lookup(key_id)

    def __setitem__(self, key_id: Union[int, str], secret: Union[bytes, str]) -> None:
        self.add(key_id, secret)

    def __contains__(self, key_id: object) -> bool:
        try:
            self.lookup(key_id)  # type: ignore[arg-type]
        except (EmptyKeyring, UnknownKey):
            return False
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __iter__(self) -> Iterator[Key]:
        with self._lock:
            keys = list(self._keys)
        return iter(keys)

    def __repr__(self) -> str:
        return (
            f'<Keyring encryptor={self._encryptor!r} keys={self.key_ids}>'
        )
