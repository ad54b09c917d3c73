"""
Scheduled refresh of stored provider tokens nearing expiry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Literal, Optional

from social_connect.clients.meta_oauth import MetaOAuthClient, TokenGrant
from social_connect.clients.token_store import SQLiteTokenStore
from social_connect.core.errors import PersistenceError, SocialConnectError
from social_connect.core.providers import ProviderRegistry
from social_connect.models.token_record import Provider, TokenRecord
from social_connect.services.social_oauth import compute_expiry
from social_connect.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshOutcome:
    id: str
    status: Literal["refreshed", "failed"]
    expires_at: Optional[datetime] = None
    error: Optional[str] = None


@dataclass
class SweepReport:
    results: List[RefreshOutcome] = field(default_factory=list)

    @property
    def refreshed(self) -> int:
        return sum(1 for outcome in self.results if outcome.status == "refreshed")

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.results if outcome.status == "failed")


class TokenRefreshService:
    """Refresh every connected token that expires within the refresh window.

    Each record is handled on its own: a failure marks only that record as
    ``reconnect_required`` and the sweep moves on to the next one.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        oauth_client: MetaOAuthClient,
        store: SQLiteTokenStore,
        token_cipher: TokenCipherService,
        *,
        refresh_window: timedelta = timedelta(days=7),
    ) -> None:
        self._registry = registry
        self._oauth = oauth_client
        self._store = store
        self._cipher = token_cipher
        self._refresh_window = refresh_window

    async def run_sweep(self, *, now: Optional[datetime] = None) -> SweepReport:
        """Run one sweep and report a per-record outcome."""
        now = now or datetime.now(timezone.utc)
        window_end = now + self._refresh_window
        records = self._store.list_due_for_refresh(window_end)
        logger.info("Refresh sweep selected %d token(s)", len(records))

        report = SweepReport()
        for record in records:
            report.results.append(await self._refresh_record(record))

        logger.info(
            "Refresh sweep finished: %d refreshed, %d failed",
            report.refreshed,
            report.failed,
        )
        return report

    async def _refresh_record(self, record: TokenRecord) -> RefreshOutcome:
        try:
            current = await self._cipher.decrypt(
                record.long_lived_token or record.access_token
            )
            grant = await self._request_refresh(record.provider, current)
            refreshed_at = datetime.now(timezone.utc)
            encrypted = await self._cipher.encrypt(grant.access_token)
            updated = self._store.mark_refreshed(
                record.id,
                token=encrypted,
                expires_at=compute_expiry(refreshed_at, grant.expires_in),
                synced_at=refreshed_at,
            )
        except Exception as exc:  # pylint: disable=broad-except
            if isinstance(exc, SocialConnectError):
                logger.warning(
                    "Failed to refresh %s token: %s",
                    record.provider.value,
                    exc,
                    extra={"token_id": record.id},
                )
            else:
                logger.exception(
                    "Unexpected error refreshing %s token",
                    record.provider.value,
                    extra={"token_id": record.id},
                )
            try:
                self._store.mark_reconnect_required(record.id, error=str(exc))
            except PersistenceError:
                logger.exception(
                    "Could not flag token for reconnection",
                    extra={"token_id": record.id},
                )
            return RefreshOutcome(id=record.id, status="failed", error=str(exc))

        logger.info(
            "Refreshed %s token", record.provider.value, extra={"token_id": record.id}
        )
        return RefreshOutcome(
            id=record.id, status="refreshed", expires_at=updated.expires_at
        )

    async def _request_refresh(self, provider: Provider, token: str) -> TokenGrant:
        if provider is Provider.INSTAGRAM:
            return await self._oauth.refresh_instagram_long_lived_token(token)
        config = self._registry.config(provider)
        return await self._oauth.refresh_facebook_token(config, token)


__all__ = ["RefreshOutcome", "SweepReport", "TokenRefreshService"]
