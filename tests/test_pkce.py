"""Tests for PKCE verifier and challenge generation."""

from __future__ import annotations

import re
import uuid

from social_connect.services.pkce import (
    derive_code_challenge,
    generate_code_verifier,
    generate_state,
)

_UNRESERVED = re.compile(r"^[A-Za-z0-9\-._~]+$")


def test_challenge_matches_rfc7636_example() -> None:
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

    assert derive_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_challenge_is_deterministic_and_unpadded() -> None:
    verifier = generate_code_verifier()

    first = derive_code_challenge(verifier)
    second = derive_code_challenge(verifier)

    assert first == second
    assert "=" not in first
    assert "+" not in first and "/" not in first
    assert len(first) == 43


def test_verifier_is_long_and_url_safe() -> None:
    verifiers = {generate_code_verifier() for _ in range(20)}

    assert len(verifiers) == 20
    for verifier in verifiers:
        assert len(verifier) == 128
        assert 43 <= len(verifier)
        assert _UNRESERVED.match(verifier)
        assert re.fullmatch(r"[0-9a-f]+", verifier)


def test_state_is_a_fresh_uuid() -> None:
    first, second = generate_state(), generate_state()

    assert first != second
    assert uuid.UUID(first).version == 4
