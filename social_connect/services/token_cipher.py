"""Symmetric encryption utilities for protecting stored tokens."""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from social_connect.core.errors import ConfigurationError, SecretCodecError

_NONCE_BYTES = 12


class TokenCipherService:
    """Encrypt and decrypt sensitive strings with AES-256-GCM.

    Ciphertext is serialized as ``base64(nonce):base64(ciphertext+tag)``.
    """

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ConfigurationError("Token encryption key must be provided.")
        try:
            key = base64.b64decode(secret, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ConfigurationError("Token encryption key must be base64-encoded.") from exc
        if len(key) != 32:
            raise ConfigurationError("Token encryption key must decode to 32 bytes.")
        self._aesgcm = AESGCM(key)

    async def encrypt(self, plaintext: str) -> str:
        """Encrypt a plaintext string and return the ciphertext."""
        if not isinstance(plaintext, str) or not plaintext:
            raise SecretCodecError("Refusing to encrypt an empty value.")
        nonce = os.urandom(_NONCE_BYTES)
        sealed = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
        return (
            base64.b64encode(nonce).decode("ascii")
            + ":"
            + base64.b64encode(sealed).decode("ascii")
        )

    async def decrypt(self, ciphertext: str) -> str:
        """Decrypt a ciphertext string and return the plaintext."""
        parts = ciphertext.split(":") if ciphertext else []
        if len(parts) != 2:
            raise SecretCodecError("Invalid encrypted value format.")
        try:
            nonce = base64.b64decode(parts[0], validate=True)
            sealed = base64.b64decode(parts[1], validate=True)
            plaintext = self._aesgcm.decrypt(nonce, sealed, None)
        except (binascii.Error, ValueError, InvalidTag) as exc:
            raise SecretCodecError(
                "Failed to decrypt token; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]
