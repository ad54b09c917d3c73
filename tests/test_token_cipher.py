try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64

import pytest

from social_connect.core.errors import ConfigurationError, SecretCodecError
from social_connect.services.token_cipher import TokenCipherService

KEY = base64.b64encode(b"k" * 32).decode()


@pytest.mark.asyncio
async def test_token_cipher_roundtrip() -> None:
    cipher = TokenCipherService(secret=KEY)
    plaintext = "sensitive-token"

    encrypted = await cipher.encrypt(plaintext)
    assert encrypted != plaintext
    assert plaintext not in encrypted

    decrypted = await cipher.decrypt(encrypted)
    assert decrypted == plaintext


@pytest.mark.asyncio
async def test_token_cipher_uses_fresh_nonce_per_call() -> None:
    cipher = TokenCipherService(secret=KEY)

    first = await cipher.encrypt("same-value")
    second = await cipher.encrypt("same-value")

    assert first != second


@pytest.mark.asyncio
async def test_token_cipher_rejects_bad_ciphertext() -> None:
    cipher = TokenCipherService(secret=KEY)

    with pytest.raises(SecretCodecError):
        await cipher.decrypt("not-valid")
    with pytest.raises(ValueError):
        await cipher.decrypt("AAAA:AAAA")


@pytest.mark.asyncio
async def test_token_cipher_rejects_ciphertext_from_another_key() -> None:
    encrypted = await TokenCipherService(secret=KEY).encrypt("secret")
    other = TokenCipherService(secret=base64.b64encode(b"z" * 32).decode())

    with pytest.raises(SecretCodecError):
        await other.decrypt(encrypted)


@pytest.mark.parametrize("secret", ["", "not base64!", base64.b64encode(b"short").decode()])
def test_token_cipher_requires_32_byte_key(secret: str) -> None:
    with pytest.raises(ConfigurationError):
        TokenCipherService(secret=secret)
