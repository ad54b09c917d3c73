"""Tests for the scheduled refresh entrypoints."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from jobs.token_refresh import handler
from jobs.token_refresh.worker import TokenRefreshWorker
from social_connect.core.errors import PersistenceError
from social_connect.core.providers import FACEBOOK_TOKEN_URL
from social_connect.models.token_record import Provider
from social_connect.services import SweepReport, TokenRefreshService


class BrokenStoreService:
    async def run_sweep(self) -> SweepReport:
        raise PersistenceError("database is locked")


class CrashingService:
    async def run_sweep(self) -> SweepReport:
        raise AttributeError("'list' object has no attribute 'get'")


@pytest.fixture
def refresh_service(registry, oauth_client, token_store, cipher) -> TokenRefreshService:
    return TokenRefreshService(
        registry=registry,
        oauth_client=oauth_client,
        store=token_store,
        token_cipher=cipher,
    )


async def _seed_due(token_store, cipher) -> str:
    now = datetime.now(timezone.utc)
    record = token_store.upsert_connected(
        user_id="user-1",
        provider=Provider.THREADS,
        access_token=await cipher.encrypt("threads-token"),
        refresh_token=None,
        long_lived_token=None,
        scopes=["basic"],
        expires_at=now + timedelta(hours=6),
        long_lived_expires_at=None,
        synced_at=now,
    )
    return record.id


def test_lambda_handler_runs_one_sweep(
    monkeypatch: pytest.MonkeyPatch, refresh_service, provider_stub, token_store, cipher
) -> None:
    record_id = asyncio.run(_seed_due(token_store, cipher))
    provider_stub.queue(
        FACEBOOK_TOKEN_URL,
        httpx.Response(200, json={"access_token": "renewed", "expires_in": 5184000}),
    )
    monkeypatch.setattr(handler, "build_refresh_service", lambda: refresh_service)

    response = handler.lambda_handler(
        {"source": "aws.events", "resources": ["arn:aws:events:rule/token-refresh"]}, None
    )

    assert response["statusCode"] == 200
    assert response["success"] is True
    assert len(response["results"]) == 1
    result = response["results"][0]
    assert result["id"] == record_id
    assert result["status"] == "refreshed"
    assert datetime.fromisoformat(result["expires_at"]) > datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_run_refresh_omits_unknown_expiry(
    refresh_service, provider_stub, token_store, cipher
) -> None:
    await _seed_due(token_store, cipher)
    provider_stub.queue(FACEBOOK_TOKEN_URL, httpx.Response(500, text="unavailable"))

    body = await handler.run_refresh(refresh_service)

    assert body["success"] is True
    assert body["results"][0]["status"] == "failed"
    assert "expires_at" not in body["results"][0]


@pytest.mark.asyncio
async def test_worker_run_once_reports_sweep(refresh_service) -> None:
    worker = TokenRefreshWorker(service=refresh_service, interval_seconds=1)

    body = await worker.run_once()

    assert body == {"success": True, "results": []}


@pytest.mark.asyncio
async def test_worker_survives_store_failure() -> None:
    worker = TokenRefreshWorker(service=BrokenStoreService(), interval_seconds=1)

    body = await worker.run_once()

    assert body == {"success": False, "results": []}


@pytest.mark.asyncio
async def test_worker_survives_unexpected_error(caplog) -> None:
    worker = TokenRefreshWorker(service=CrashingService(), interval_seconds=0)

    first = await worker.run_once()
    second = await worker.run_once()

    assert first == second == {"success": False, "results": []}
    assert "Token refresh sweep failed" in caplog.text
