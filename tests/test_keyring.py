"""
Comprehensive tests for Keyring.

Tests cover:
- Construction and digest_salt handling (absent vs empty)
- Key lookup, current key, add and clear
- Encrypt/decrypt round-trip and envelope contents
- Rotation scenario: encrypt with newest, decrypt with older keys
- Value serialization helpers
"""
import hashlib

import pytest

from navigator_keyring import (
    Envelope,
    EmptyKeyring,
    InvalidAuthentication,
    InvalidSecret,
    Keyring,
    MissingDigestSalt,
    UnknownKey,
)
from navigator_keyring.encryptors import AES128CBC, AES256GCM

SECRET_A = b"A" * 16
SECRET_B = b"B" * 16
SECRET_C = b"C" * 16


class CountingEncryptor:
    """Encryptor double recording calls, wrapping AES-128-CBC."""

    key_size = 16

    def __init__(self):
        self.decrypt_calls = 0

    def encrypt(self, key, plaintext):
        return AES128CBC.encrypt(key, plaintext)

    def decrypt(self, key, ciphertext):
        self.decrypt_calls += 1
        return AES128CBC.decrypt(key, ciphertext)


@pytest.fixture
def keyring():
    """Keyring with keys 1 and 2."""
    return Keyring({1: SECRET_A, 2: SECRET_B}, digest_salt="salt")


@pytest.fixture
def empty_keyring():
    return Keyring({}, digest_salt="")


# --- Construction ---

class TestConstruction:
    """Tests for Keyring construction."""

    def test_one_key_per_entry(self, keyring):
        assert len(keyring) == 2
        assert keyring.key_ids == [1, 2]

    def test_default_encryptor(self, keyring):
        assert keyring.encryptor is AES128CBC

    def test_missing_digest_salt(self):
        """Test omitting digest_salt entirely fails."""
        with pytest.raises(MissingDigestSalt, match="empty string"):
            Keyring({1: SECRET_A})

    def test_none_digest_salt(self):
        with pytest.raises(MissingDigestSalt):
            Keyring({1: SECRET_A}, digest_salt=None)

    def test_empty_digest_salt_is_accepted(self):
        keyring = Keyring({1: SECRET_A}, digest_salt="")
        assert keyring.digest_salt == ""

    def test_invalid_initial_secret(self):
        with pytest.raises(InvalidSecret):
            Keyring({1: b"short"}, digest_salt="")

    def test_secret_checked_against_encryptor(self):
        """Test key size comes from the bound encryptor."""
        with pytest.raises(InvalidSecret):
            Keyring({1: SECRET_A}, encryptor=AES256GCM, digest_salt="")
        keyring = Keyring({1: b"k" * 32}, encryptor=AES256GCM, digest_salt="")
        assert keyring.encryptor is AES256GCM

    def test_no_keys(self):
        keyring = Keyring(digest_salt="")
        assert keyring.empty is True
        assert len(keyring) == 0


# --- Key management ---

class TestKeyManagement:
    """Tests for current_key, lookup, add and clear."""

    def test_current_key_is_max_id(self):
        keyring = Keyring({5: SECRET_A, 9: SECRET_B, 2: SECRET_C}, digest_salt="")
        assert keyring.current_key().id == 9

    def test_current_key_empty(self, empty_keyring):
        assert empty_keyring.current_key() is None

    def test_lookup(self, keyring):
        assert keyring.lookup(1).secret == SECRET_A
        assert keyring[2].secret == SECRET_B

    def test_lookup_normalizes_string_id(self, keyring):
        assert keyring.lookup("1").secret == SECRET_A

    def test_lookup_unknown(self):
        keyring = Keyring({1: SECRET_A}, digest_salt="")
        with pytest.raises(UnknownKey, match="key=2 is not available"):
            keyring.lookup(2)

    def test_lookup_non_numeric(self, keyring):
        with pytest.raises(UnknownKey):
            keyring.lookup("abc")

    def test_lookup_empty_before_unknown(self, empty_keyring):
        """Test EmptyKeyring is reported before UnknownKey."""
        with pytest.raises(EmptyKeyring):
            empty_keyring.lookup(0)

    def test_lookup_errors_are_lookup_errors(self, keyring, empty_keyring):
        with pytest.raises(LookupError):
            keyring.lookup(99)
        with pytest.raises(LookupError):
            empty_keyring.lookup(1)

    def test_add(self, keyring):
        key = keyring.add(3, SECRET_C)
        assert key.id == 3
        assert keyring.current_key() is key

    def test_setitem_adds(self, keyring):
        keyring[3] = SECRET_C
        assert keyring.lookup(3).secret == SECRET_C

    def test_add_invalid_secret(self, keyring):
        with pytest.raises(InvalidSecret):
            keyring.add(3, b"short")
        assert keyring.key_ids == [1, 2]

    def test_add_duplicate_keeps_first(self, keyring):
        """Test duplicate ids are appended and lookup returns the first."""
        keyring.add(1, SECRET_C)
        assert len(keyring) == 3
        assert keyring.lookup(1).secret == SECRET_A

    def test_clear(self, keyring):
        keyring.clear()
        assert keyring.empty is True
        assert keyring.digest_salt == "salt"
        assert keyring.encryptor is AES128CBC
        with pytest.raises(EmptyKeyring):
            keyring.encrypt("x")

    def test_contains(self, keyring, empty_keyring):
        assert 1 in keyring
        assert "2" in keyring
        assert 3 not in keyring
        assert 1 not in empty_keyring

    def test_iter_keeps_insertion_order(self):
        keyring = Keyring({3: SECRET_A, 1: SECRET_B}, digest_salt="")
        assert [key.id for key in keyring] == [3, 1]


# --- Encryption protocol ---

class TestEncryption:
    """Tests for encrypt, decrypt and digest."""

    def test_round_trip_every_key(self, keyring):
        for key_id in (1, 2):
            ciphertext, used, _ = keyring.encrypt(b"payload", key_id)
            assert used == key_id
            assert keyring.decrypt(ciphertext, key_id) == b"payload"

    def test_str_plaintext(self, keyring):
        envelope = keyring.encrypt("héllo")
        assert keyring.decrypt(envelope.ciphertext, envelope.key_id) == "héllo".encode("utf-8")

    def test_envelope_unpacks_as_triple(self, keyring):
        envelope = keyring.encrypt(b"payload")
        assert isinstance(envelope, Envelope)
        ciphertext, key_id, digest = envelope
        assert (ciphertext, key_id, digest) == tuple(envelope)
        assert len(envelope) == 3

    def test_current_key_default(self, keyring):
        _, key_id, _ = keyring.encrypt(b"payload")
        assert key_id == keyring.current_key().id == 2

    def test_non_determinism(self, keyring):
        first = keyring.encrypt(b"payload", 1)
        second = keyring.encrypt(b"payload", 1)
        assert first.ciphertext != second.ciphertext
        assert first.digest == second.digest

    def test_encrypt_string_key_id(self, keyring):
        assert keyring.encrypt(b"payload", "1").key_id == 1

    def test_encrypt_unknown_key(self, keyring):
        with pytest.raises(UnknownKey):
            keyring.encrypt(b"payload", 7)

    def test_encrypt_empty_keyring(self, empty_keyring):
        with pytest.raises(EmptyKeyring):
            empty_keyring.encrypt("x")

    def test_encrypt_empty_keyring_with_id(self, empty_keyring):
        with pytest.raises(EmptyKeyring):
            empty_keyring.encrypt("x", 1)

    def test_decrypt_unknown_key_skips_cipher(self):
        """Test an unknown id fails before the encryptor is called."""
        encryptor = CountingEncryptor()
        keyring = Keyring({1: SECRET_A}, encryptor=encryptor, digest_salt="")
        ciphertext, _, _ = keyring.encrypt(b"payload")
        with pytest.raises(UnknownKey):
            keyring.decrypt(ciphertext, 2)
        assert encryptor.decrypt_calls == 0

    def test_decrypt_propagates_cipher_failure(self, keyring):
        with pytest.raises(InvalidAuthentication):
            keyring.decrypt(b"garbage", 1)

    def test_decrypt_empty_keyring(self, empty_keyring):
        with pytest.raises(EmptyKeyring):
            empty_keyring.decrypt(b"\x00" * 32, 1)


class TestDigest:
    """Tests for the salted content digest."""

    def test_digest_is_salted_sha1(self, keyring):
        expected = hashlib.sha1(b"payload" + b"salt").hexdigest()
        assert keyring.digest(b"payload") == expected
        assert len(expected) == 40

    def test_empty_salt_is_plain_hash(self):
        keyring = Keyring({1: SECRET_A}, digest_salt="")
        assert keyring.digest("payload") == hashlib.sha1(b"payload").hexdigest()

    def test_envelope_digest_matches(self, keyring):
        assert keyring.encrypt("payload").digest == keyring.digest("payload")

    def test_digest_independent_of_current_key(self, keyring):
        before = keyring.digest("payload")
        keyring.add(3, SECRET_C)
        assert keyring.digest("payload") == before

    def test_salt_changes_digest(self):
        first = Keyring({}, digest_salt="one").digest("payload")
        second = Keyring({}, digest_salt="two").digest("payload")
        assert first != second

    def test_digest_is_not_tamper_detection(self, keyring):
        """The digest fingerprints plaintext only; it does not cover ciphertext."""
        ciphertext, key_id, digest = keyring.encrypt(b"payload")
        assert digest == keyring.digest(b"payload")
        assert keyring.digest(ciphertext) != digest


class TestRotationScenario:
    """Encrypt with newest key, keep decrypting old envelopes."""

    def test_rotation(self, keyring):
        old_ciphertext, old_id, _ = keyring.encrypt(b"payload", 1)
        assert keyring.encrypt(b"payload").key_id == 2
        keyring.add(3, SECRET_C)
        assert keyring.encrypt(b"payload").key_id == 3
        assert keyring.decrypt(old_ciphertext, old_id) == b"payload"

    def test_wrong_key_is_not_silently_swapped(self, keyring):
        """Test decrypting under another present key never picks the right one."""
        ciphertext, _, _ = keyring.encrypt(b"payload" * 4, 1)
        try:
            result = keyring.decrypt(ciphertext, 2)
        except InvalidAuthentication:
            return
        # plain CBC may pass the padding check with the wrong key
        assert result != b"payload" * 4


class TestValues:
    """Tests for encrypt_value / decrypt_value."""

    @pytest.mark.parametrize("value", [
        "text", 42, 3.5, True, None, [1, "two"], {"a": {"b": 1}}, b"\x00\xff",
    ])
    def test_value_round_trip(self, keyring, value):
        ciphertext, key_id, _ = keyring.encrypt_value(value)
        assert keyring.decrypt_value(ciphertext, key_id) == value

    def test_unserializable_value(self, keyring):
        with pytest.raises(TypeError):
            keyring.encrypt_value(object())


class TestPlaintextTypes:
    """Tests rejecting values that are neither bytes nor str."""

    @pytest.mark.parametrize("plaintext", [5, None, 1.5, ["a"]])
    def test_encrypt_rejects(self, keyring, plaintext):
        with pytest.raises(TypeError):
            keyring.encrypt(plaintext)

    def test_digest_rejects(self, keyring):
        with pytest.raises(TypeError):
            keyring.digest(5)

    def test_invalid_salt_type(self):
        with pytest.raises(TypeError, match="digest_salt"):
            Keyring({1: SECRET_A}, digest_salt=5)

    def test_bytes_salt(self):
        keyring = Keyring({1: SECRET_A}, digest_salt=b"salt")
        assert keyring.digest("payload") == Keyring({}, digest_salt="salt").digest("payload")
