"""Pytest configuration shared across the suite."""

from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs

import httpx
import pytest

from social_connect.clients import MetaOAuthClient, SQLiteTokenStore
from social_connect.core.config import get_settings
from social_connect.core.providers import ProviderRegistry
from social_connect.services import TokenCipherService


class ProviderStub:
    """Scripted provider endpoints served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: dict[str, list[httpx.Response]] = {}

    @staticmethod
    def _key(request: httpx.Request) -> str:
        return f"{request.url.scheme}://{request.url.host}{request.url.path}"

    def queue(self, url: str, *responses: httpx.Response) -> None:
        self._responses.setdefault(url, []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        pending = self._responses.get(self._key(request))
        if not pending:
            return httpx.Response(404, text=f"unexpected call to {self._key(request)}")
        return pending.pop(0)

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [request for request in self.requests if self._key(request) == url]

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def oauth_client(provider_stub: ProviderStub) -> MetaOAuthClient:
    return MetaOAuthClient(timeout=5.0, transport=provider_stub.transport)


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry(get_settings())


@pytest.fixture
def cipher() -> TokenCipherService:
    return TokenCipherService(secret=_bootstrap.TEST_ENCRYPTION_KEY)


@pytest.fixture
def token_store(tmp_path) -> SQLiteTokenStore:
    return SQLiteTokenStore(str(tmp_path / "tokens.db"))
