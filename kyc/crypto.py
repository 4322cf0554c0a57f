"""
Field encryption for sensitive KYC values (account numbers, tax and ID numbers).

AES-256-GCM with a key derived by scrypt from KYC_ENCRYPTION_KEY and the
per-deployment KYC_ENCRYPTION_SALT. Every call draws a fresh 64-byte salt and
16-byte IV; the blob is

    base64(salt(64) || iv(16) || tag(16) || ciphertext)

The per-call salt is authenticated as associated data, so changing any byte of
the blob makes decryption fail with CryptoError.

Usage:
    blob = encrypt("1234567890")
    decrypt(blob)  # "1234567890"
"""

import base64
import binascii
import hashlib
import logging
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .exceptions import CryptoError

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16
SALT_LENGTH = 64
TAG_LENGTH = 16
TAG_POSITION = SALT_LENGTH + IV_LENGTH
ENCRYPTED_POSITION = TAG_POSITION + TAG_LENGTH
MIN_SECRET_LENGTH = 32

DEV_SECRET = "dev-only-encryption-key-change-in-production"
DEV_SALT = "dev-only-salt"


def check_configuration():
    """
    Validate crypto settings at startup.

    Outside DEBUG both KYC_ENCRYPTION_KEY and KYC_ENCRYPTION_SALT are required.
    """
    secret = getattr(settings, "KYC_ENCRYPTION_KEY", None)
    salt = getattr(settings, "KYC_ENCRYPTION_SALT", None)

    if not secret or not salt:
        if not settings.DEBUG:
            raise ImproperlyConfigured(
                "KYC_ENCRYPTION_KEY and KYC_ENCRYPTION_SALT must be set when DEBUG is off."
            )
        logger.warning("KYC encryption settings missing; using development key material.")
        return

    if len(secret) < MIN_SECRET_LENGTH:
        raise ImproperlyConfigured(
            f"KYC_ENCRYPTION_KEY must be at least {MIN_SECRET_LENGTH} characters long"
        )


@lru_cache(maxsize=8)
def derive_key(secret: str, salt: str) -> bytes:
    kdf = Scrypt(salt=salt.encode(), length=KEY_LENGTH, n=2 ** 14, r=8, p=1)
    return kdf.derive(secret.encode())


class FieldCipher:
    def __init__(self, secret: str = None, salt: str = None):
        if secret is None or salt is None:
            configured_secret = getattr(settings, "KYC_ENCRYPTION_KEY", None)
            configured_salt = getattr(settings, "KYC_ENCRYPTION_SALT", None)
            if not configured_secret or not configured_salt:
                if not settings.DEBUG:
                    raise ImproperlyConfigured("KYC encryption settings are not configured.")
                configured_secret, configured_salt = DEV_SECRET, DEV_SALT
            secret = secret or configured_secret
            salt = salt or configured_salt

        if len(secret) < MIN_SECRET_LENGTH:
            raise ImproperlyConfigured(
                f"KYC_ENCRYPTION_KEY must be at least {MIN_SECRET_LENGTH} characters long"
            )
        self._aead = AESGCM(derive_key(secret, salt))

    def encrypt(self, plaintext):
        if not plaintext:
            return plaintext

        salt = os.urandom(SALT_LENGTH)
        iv = os.urandom(IV_LENGTH)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), salt)
        # AESGCM appends the tag; the stored layout keeps it in front of the ciphertext
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return base64.b64encode(salt + iv + tag + ciphertext).decode("ascii")

    def decrypt(self, blob):
        if not blob:
            return blob

        try:
            data = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CryptoError() from exc

        if len(data) < ENCRYPTED_POSITION:
            raise CryptoError()

        salt = data[:SALT_LENGTH]
        iv = data[SALT_LENGTH:TAG_POSITION]
        tag = data[TAG_POSITION:ENCRYPTED_POSITION]
        ciphertext = data[ENCRYPTED_POSITION:]

        try:
            plaintext = self._aead.decrypt(iv, ciphertext + tag, salt)
        except InvalidTag as exc:
            raise CryptoError() from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CryptoError() from exc


def get_cipher() -> FieldCipher:
    return FieldCipher()


def encrypt(plaintext):
    return get_cipher().encrypt(plaintext)


def decrypt(blob):
    return get_cipher().decrypt(blob)


def hash_value(text: str) -> str:
    """One-way SHA-256 digest for equality checks without decrypting."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
