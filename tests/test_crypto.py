"""
Field encryption tests.

Sensitive values must round-trip, never encrypt deterministically, and any
tampering or wrong key must fail loudly with CryptoError.
"""

import base64

import pytest
from django.core.exceptions import ImproperlyConfigured

from kyc import crypto
from kyc.crypto import (
    ENCRYPTED_POSITION,
    IV_LENGTH,
    SALT_LENGTH,
    TAG_LENGTH,
    FieldCipher,
    check_configuration,
    decrypt,
    encrypt,
    hash_value,
)
from kyc.exceptions import CryptoError

SECRET = "unit-test-secret-that-is-long-enough-123"
SALT = "unit-test-salt"


@pytest.fixture
def cipher():
    return FieldCipher(SECRET, SALT)


class TestRoundTrip:

    @pytest.mark.parametrize("plaintext", [
        "000123456789",
        "GB33BUKB20201555555555",
        "a",
        "ünïcödé ✓ 身份证",
        "x" * 5000,
    ])
    def test_decrypt_returns_original_value(self, cipher, plaintext):
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_encrypt_returns_different_value(self, cipher):
        plaintext = "Account 000123456789"
        blob = cipher.encrypt(plaintext)

        assert blob != plaintext
        assert plaintext not in blob

    def test_two_encryptions_differ(self, cipher):
        first = cipher.encrypt("000123456789")
        second = cipher.encrypt("000123456789")

        assert first != second
        assert cipher.decrypt(first) == cipher.decrypt(second) == "000123456789"

    def test_blob_layout(self, cipher):
        plaintext = "12345"
        raw = base64.b64decode(cipher.encrypt(plaintext))

        assert len(raw) == SALT_LENGTH + IV_LENGTH + TAG_LENGTH + len(plaintext.encode())
        assert ENCRYPTED_POSITION == 96

    @pytest.mark.parametrize("empty", ["", None])
    def test_empty_values_pass_through(self, cipher, empty):
        assert cipher.encrypt(empty) == empty
        assert cipher.decrypt(empty) == empty

    def test_same_secret_and_salt_share_a_key(self):
        blob = FieldCipher(SECRET, SALT).encrypt("shared")
        assert FieldCipher(SECRET, SALT).decrypt(blob) == "shared"

    def test_module_helpers_use_configured_settings(self):
        assert decrypt(encrypt("from settings")) == "from settings"


class TestTampering:

    def test_flipping_any_byte_fails(self, cipher):
        raw = bytearray(base64.b64decode(cipher.encrypt("000123456789")))

        for index in range(len(raw)):
            tampered = bytearray(raw)
            tampered[index] ^= 0x01
            with pytest.raises(CryptoError):
                cipher.decrypt(base64.b64encode(bytes(tampered)).decode())

    def test_truncated_blob_fails(self, cipher):
        raw = base64.b64decode(cipher.encrypt("000123456789"))

        with pytest.raises(CryptoError):
            cipher.decrypt(base64.b64encode(raw[:ENCRYPTED_POSITION - 1]).decode())
        with pytest.raises(CryptoError):
            cipher.decrypt(base64.b64encode(raw[:-1]).decode())

    def test_invalid_base64_fails(self, cipher):
        with pytest.raises(CryptoError):
            cipher.decrypt("not base64 at all!!")

    def test_wrong_key_fails(self, cipher):
        blob = cipher.encrypt("000123456789")
        other = FieldCipher("another-secret-that-is-also-long-enough", SALT)

        with pytest.raises(CryptoError):
            other.decrypt(blob)

    def test_wrong_salt_fails(self, cipher):
        blob = cipher.encrypt("000123456789")

        with pytest.raises(CryptoError):
            FieldCipher(SECRET, "another-deployment").decrypt(blob)


class TestHash:

    def test_hash_is_deterministic(self):
        assert hash_value("P1234567") == hash_value("P1234567")
        assert hash_value("P1234567") != hash_value("P1234568")

    def test_hash_is_sha256_hex(self):
        digest = hash_value("P1234567")
        assert len(digest) == 64
        int(digest, 16)


class TestConfiguration:

    def test_missing_key_fails_fast_outside_debug(self, settings):
        settings.DEBUG = False
        settings.KYC_ENCRYPTION_KEY = None

        with pytest.raises(ImproperlyConfigured):
            check_configuration()
        with pytest.raises(ImproperlyConfigured):
            FieldCipher()

    def test_missing_salt_fails_fast_outside_debug(self, settings):
        settings.DEBUG = False
        settings.KYC_ENCRYPTION_SALT = ""

        with pytest.raises(ImproperlyConfigured):
            check_configuration()

    def test_short_key_is_rejected(self, settings):
        settings.KYC_ENCRYPTION_KEY = "too-short"

        with pytest.raises(ImproperlyConfigured):
            check_configuration()
        with pytest.raises(ImproperlyConfigured):
            FieldCipher("too-short", SALT)

    def test_debug_falls_back_to_development_material(self, settings, caplog):
        settings.DEBUG = True
        settings.KYC_ENCRYPTION_KEY = None
        settings.KYC_ENCRYPTION_SALT = None

        check_configuration()
        assert "development key material" in caplog.text

        blob = FieldCipher().encrypt("dev")
        assert FieldCipher(crypto.DEV_SECRET, crypto.DEV_SALT).decrypt(blob) == "dev"
