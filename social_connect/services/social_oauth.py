"""
PKCE authorization start and code-for-token exchange for social providers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from social_connect.clients.meta_oauth import MetaOAuthClient
from social_connect.clients.token_store import SQLiteTokenStore
from social_connect.core.errors import ExchangeIncompleteError
from social_connect.core.providers import ProviderRegistry
from social_connect.models.token_record import Provider, TokenRecord
from social_connect.services.pkce import (
    derive_code_challenge,
    generate_code_verifier,
    generate_state,
)
from social_connect.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


def compute_expiry(issued_at: datetime, expires_in: Optional[int]) -> Optional[datetime]:
    """Return ``issued_at + expires_in`` seconds, or ``None`` when no lifetime is known."""
    if not expires_in:
        return None
    return issued_at + timedelta(seconds=expires_in)


@dataclass(frozen=True)
class AuthorizationStart:
    """Everything the caller must carry through the provider redirect."""

    provider: Provider
    authorization_url: str
    state: str
    code_verifier: str
    code_challenge: str


class SocialOAuthService:
    """Drive the start and exchange steps of the provider OAuth flow.

    The service keeps no flow state: the caller holds ``code_verifier`` and
    ``state`` between :meth:`start_authorization` and :meth:`exchange`.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        oauth_client: MetaOAuthClient,
        store: SQLiteTokenStore,
        token_cipher: TokenCipherService,
    ) -> None:
        self._registry = registry
        self._oauth = oauth_client
        self._store = store
        self._cipher = token_cipher

    def start_authorization(
        self, provider: Provider, *, redirect_uri: Optional[str] = None
    ) -> AuthorizationStart:
        """Build the consent URL and a fresh verifier/state pair."""
        config = self._registry.config(provider)
        code_verifier = generate_code_verifier()
        code_challenge = derive_code_challenge(code_verifier)
        state = generate_state()
        authorization_url = self._oauth.build_authorization_url(
            config,
            redirect_uri=redirect_uri or config.redirect_uri,
            state=state,
            code_challenge=code_challenge,
        )
        return AuthorizationStart(
            provider=config.provider,
            authorization_url=authorization_url,
            state=state,
            code_verifier=code_verifier,
            code_challenge=code_challenge,
        )

    async def exchange(
        self,
        *,
        user_id: str,
        provider: Provider,
        code: str,
        code_verifier: str,
        redirect_uri: Optional[str] = None,
    ) -> TokenRecord:
        """Exchange an authorization code and persist the encrypted credential.

        Errors from the initial code exchange propagate unchanged. Anything
        failing afterwards is raised as :class:`ExchangeIncompleteError`
        because the provider has already consumed the single-use code.
        """
        config = self._registry.config(provider)
        grant = await self._oauth.exchange_authorization_code(
            config,
            code=code,
            code_verifier=code_verifier,
            redirect_uri=redirect_uri or config.redirect_uri,
        )

        try:
            access_token = grant.access_token
            long_lived_token: Optional[str] = None
            long_lived_expires_in: Optional[int] = None

            if config.provider is Provider.INSTAGRAM:
                upgraded = await self._oauth.exchange_instagram_long_lived_token(
                    grant.access_token, client_secret=config.client_secret
                )
                access_token = upgraded.access_token
                long_lived_token = upgraded.access_token
                long_lived_expires_in = upgraded.expires_in

            now = datetime.now(timezone.utc)
            expires_at = compute_expiry(now, grant.expires_in)
            long_lived_expires_at = compute_expiry(now, long_lived_expires_in)

            encrypted_access = await self._cipher.encrypt(access_token)
            encrypted_refresh = (
                await self._cipher.encrypt(grant.refresh_token)
                if grant.refresh_token
                else None
            )
            encrypted_long_lived = (
                await self._cipher.encrypt(long_lived_token) if long_lived_token else None
            )

            record = self._store.upsert_connected(
                user_id=user_id,
                provider=config.provider,
                access_token=encrypted_access,
                refresh_token=encrypted_refresh,
                long_lived_token=encrypted_long_lived,
                scopes=config.scopes,
                expires_at=expires_at,
                long_lived_expires_at=long_lived_expires_at,
                synced_at=now,
            )
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception(
                "Exchange for %s failed after the code was redeemed: %s",
                config.provider.value,
                exc,
            )
            raise ExchangeIncompleteError(
                f"{exc} The authorization code was already redeemed with "
                f"{config.provider.value}; restart the connection flow."
            ) from exc

        logger.info(
            "Connected %s account",
            config.provider.value,
            extra={"token_id": record.id},
        )
        return record


__all__ = ["AuthorizationStart", "SocialOAuthService", "compute_expiry"]
