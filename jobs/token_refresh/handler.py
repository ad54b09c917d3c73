"""
AWS Lambda entrypoint for the scheduled token refresh sweep.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from functools import lru_cache
from typing import Any, Dict

from social_connect.clients import MetaOAuthClient, SQLiteTokenStore
from social_connect.core.config import get_settings
from social_connect.core.logging import configure_logging
from social_connect.core.providers import ProviderRegistry
from social_connect.services import TokenCipherService, TokenRefreshService

logger = logging.getLogger(__name__)


@lru_cache()
def build_refresh_service() -> TokenRefreshService:
    """Initialize shared singletons for the Lambda runtime."""
    settings = get_settings()
    configure_logging(settings.log_level)

    return TokenRefreshService(
        registry=ProviderRegistry(settings),
        oauth_client=MetaOAuthClient(timeout=settings.refresh.http_timeout_seconds),
        store=SQLiteTokenStore(settings.storage.database_path),
        token_cipher=TokenCipherService(secret=settings.security.token_encryption_key),
        refresh_window=timedelta(days=settings.refresh.window_days),
    )


async def run_refresh(service: TokenRefreshService) -> Dict[str, Any]:
    """Execute one sweep and shape the outcome like the HTTP response."""
    report = await service.run_sweep()
    results = []
    for outcome in report.results:
        item: Dict[str, Any] = {"id": outcome.id, "status": outcome.status}
        if outcome.expires_at is not None:
            item["expires_at"] = outcome.expires_at.isoformat()
        results.append(item)
    return {"success": True, "results": results}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda handler invoked by an EventBridge schedule.

    The event body carries nothing the sweep needs; records are processed
    sequentially and per-record failures are reported, not raised.
    """
    logger.info(
        "Token refresh triggered",
        extra={"source": event.get("source"), "schedule": event.get("resources")},
    )
    body = asyncio.run(run_refresh(build_refresh_service()))
    return {"statusCode": 200, **body}


__all__ = ["build_refresh_service", "lambda_handler", "run_refresh"]
