"""
AEAD encryptors — AES-GCM and ChaCha20-Poly1305.

Format: [nonce 12B][encrypted_payload + tag 16B]

Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from ..exceptions import InvalidAuthentication
from ..key import Key

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16


class AEAD:
    """Authenticated encryption with a random nonce per call."""

    def __init__(self, cipher_cls: type, key_size: int, name: str):
        self._cipher_cls = cipher_cls
        self.key_size = key_size
        self.name = name

    def encrypt(self, key: Key, plaintext: bytes) -> bytes:
        cipher = self._cipher_cls(key.secret)
        nonce = os.urandom(NONCE_SIZE)
        return nonce + cipher.encrypt(nonce, plaintext, None)

    def decrypt(self, key: Key, ciphertext: bytes) -> bytes:
        _min = NONCE_SIZE + TAG_SIZE
        if len(ciphertext) < _min:
            raise InvalidAuthentication(
                f"ciphertext too short: {len(ciphertext)} bytes "
                f"(minimum {_min})"
            )
        cipher = self._cipher_cls(key.secret)
        nonce = ciphertext[:NONCE_SIZE]
        try:
            return cipher.decrypt(nonce, ciphertext[NONCE_SIZE:], None)
        except InvalidTag as err:
            raise InvalidAuthentication("Invalid authentication tag") from err

    def __repr__(self) -> str:
        return f'<{self.name}>'


AES128GCM = AEAD(AESGCM, 16, 'AES-128-GCM')
AES256GCM = AEAD(AESGCM, 32, 'AES-256-GCM')
CHACHA20POLY1305 = AEAD(ChaCha20Poly1305, 32, 'ChaCha20-Poly1305')
