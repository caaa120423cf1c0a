"""Credential encryption."""

from queryiq.security.encryption import (
    CredentialCipher,
    DecryptionError,
    EncryptionConfigError,
    generate_key,
)

__all__ = ["CredentialCipher", "DecryptionError", "EncryptionConfigError", "generate_key"]
