"""
AES-CBC encryptors.

Plain CBC variants (``AES128CBC``, ``AES192CBC``, ``AES256CBC``):
    Format: [iv 16B][PKCS7-padded ciphertext]

    Security Note:
        CBC alone has no integrity check. Corruption is only detected when it
        breaks the padding; a wrong key or a tampered block can still decrypt
        to garbage. Prefer the HMAC or AEAD variants for new deployments.

Encrypt-then-MAC variants (``AES128CBCHMAC``, ``AES256CBCHMAC``):
    Format: [iv 16B][ciphertext][HMAC-SHA256 32B]
    The secret is split in half: [signing key][encryption key].
"""
import os

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import InvalidAuthentication
from ..key import Key

BLOCK_SIZE = 16  # AES block size, also the IV size
TAG_SIZE = 32  # HMAC-SHA256


def _cbc_encrypt(encryption_key: bytes, plaintext: bytes) -> bytes:
    iv = os.urandom(BLOCK_SIZE)
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(encryption_key), modes.CBC(iv)).encryptor()
    return iv + encryptor.update(padded) + encryptor.finalize()


def _cbc_decrypt(encryption_key: bytes, ciphertext: bytes) -> bytes:
    _min = BLOCK_SIZE * 2  # iv + one padded block
    if len(ciphertext) < _min or len(ciphertext) % BLOCK_SIZE:
        raise InvalidAuthentication(
            f"Invalid ciphertext length: {len(ciphertext)} bytes "
            f"(minimum {_min}, multiple of {BLOCK_SIZE})"
        )
    iv = ciphertext[:BLOCK_SIZE]
    decryptor = Cipher(algorithms.AES(encryption_key), modes.CBC(iv)).decryptor()
    try:
        padded = decryptor.update(ciphertext[BLOCK_SIZE:]) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as err:
        raise InvalidAuthentication("Unable to decrypt message") from err


class AESCBC:
    """AES in CBC mode with PKCS7 padding and a random IV per call."""

    def __init__(self, key_size: int):
        if key_size not in (16, 24, 32):
            raise ValueError(f"Invalid AES key size: {key_size}")
        self.key_size = key_size

    def encrypt(self, key: Key, plaintext: bytes) -> bytes:
        return _cbc_encrypt(key.secret, plaintext)

    def decrypt(self, key: Key, ciphertext: bytes) -> bytes:
        return _cbc_decrypt(key.secret, ciphertext)

    def __repr__(self) -> str:
        return f'<AES-{self.key_size * 8}-CBC>'


class AESCBCHMAC:
    """AES-CBC with an HMAC-SHA256 tag over iv and ciphertext.

    ``key_size`` is twice the AES key size; the first half of the secret
    signs, the second half encrypts.
    """

    def __init__(self, key_size: int):
        if key_size not in (32, 48, 64):
            raise ValueError(f"Invalid AES-CBC-HMAC key size: {key_size}")
        self.key_size = key_size

    def _split(self, key: Key) -> tuple[bytes, bytes]:
        half = self.key_size // 2
        return key.secret[:half], key.secret[half:]

    def _sign(self, signing_key: bytes, data: bytes) -> hmac.HMAC:
        mac = hmac.HMAC(signing_key, hashes.SHA256())
        mac.update(data)
        return mac

    def encrypt(self, key: Key, plaintext: bytes) -> bytes:
        signing_key, encryption_key = self._split(key)
        data = _cbc_encrypt(encryption_key, plaintext)
        return data + self._sign(signing_key, data).finalize()

    def decrypt(self, key: Key, ciphertext: bytes) -> bytes:
        if len(ciphertext) < TAG_SIZE:
            raise InvalidAuthentication(
                f"ciphertext too short: {len(ciphertext)} bytes "
                f"(minimum {TAG_SIZE})"
            )
        signing_key, encryption_key = self._split(key)
        data, tag = ciphertext[:-TAG_SIZE], ciphertext[-TAG_SIZE:]
        try:
            self._sign(signing_key, data).verify(tag)
        except InvalidSignature as err:
            raise InvalidAuthentication("Invalid authentication tag") from err
        return _cbc_decrypt(encryption_key, data)

    def __repr__(self) -> str:
        return f'<AES-{self.key_size * 4}-CBC-HMAC-SHA256>'


AES128CBC = AESCBC(16)
AES192CBC = AESCBC(24)
AES256CBC = AESCBC(32)
AES128CBCHMAC = AESCBCHMAC(32)
AES256CBCHMAC = AESCBCHMAC(64)
