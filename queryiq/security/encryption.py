"""Authenticated encryption for stored connection strings (Fernet)."""

from __future__ import annotations

import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionConfigError(ValueError):
    """The encryption key is missing or not a valid Fernet key."""


class DecryptionError(ValueError):
    """Ciphertext is malformed, tampered with, or was made with another key."""


def generate_key() -> str:
    """Return a fresh url-safe base64 Fernet key."""
    return Fernet.generate_key().decode("utf-8")


class CredentialCipher:
    """
    Encrypt and decrypt connection strings.

    ``decrypt(encrypt(s)) == s`` for any string; any modification of the
    ciphertext makes ``decrypt`` raise DecryptionError.
    """

    def __init__(self, key: str | bytes | None) -> None:
        if not key:
            raise EncryptionConfigError(
                "QUERYIQ_ENCRYPTION_KEY must be set to store encrypted connection strings."
            )
        if isinstance(key, str):
            key = key.encode("utf-8")
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as exc:
            raise EncryptionConfigError(
                "Invalid QUERYIQ_ENCRYPTION_KEY. Use a Fernet-compatible base64 key."
            ) from exc

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, secret: str) -> str:
        try:
            return self._fernet.decrypt(secret.encode("utf-8")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            logger.error("Failed to decrypt stored connection string")
            raise DecryptionError("Failed to decrypt connection string.") from exc
