"""PKCE (RFC 7636) helpers."""

from __future__ import annotations

import base64
import hashlib
import secrets
import uuid

VERIFIER_BYTES = 64


def generate_code_verifier() -> str:
    """Return a 128-character hex verifier built from 64 random bytes."""
    return secrets.token_hex(VERIFIER_BYTES)


def derive_code_challenge(verifier: str) -> str:
    """Derive the S256 challenge: unpadded base64url of SHA-256(verifier)."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_state() -> str:
    """Return a fresh opaque correlation token for the authorization round trip."""
    return str(uuid.uuid4())


__all__ = ["derive_code_challenge", "generate_code_verifier", "generate_state"]
