"""
Encryptor protocol — the cipher capability a Keyring is bound to.

An encryptor knows nothing about key versions: it encrypts and decrypts
with the single Key it is handed. Any per-call randomness (IV, nonce)
must travel inside the returned ciphertext, since ``decrypt`` only gets
the Key and the ciphertext back.
"""
from typing import Protocol, runtime_checkable

from ..key import Key


@runtime_checkable
class Encryptor(Protocol):
    """Symmetric cipher strategy.

    Attributes:
        key_size: Exact byte length required of a Key's secret.
    """

    key_size: int

    def encrypt(self, key: Key, plaintext: bytes) -> bytes:
        """Encrypt plaintext, returning self-contained ciphertext."""
        ...

    def decrypt(self, key: Key, ciphertext: bytes) -> bytes:
        """Decrypt ciphertext.

        Raises:
            InvalidAuthentication: If the ciphertext is rejected.
        """
        ...
