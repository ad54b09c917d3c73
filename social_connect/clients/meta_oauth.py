"""
OAuth utilities for Meta platforms (Facebook, Instagram, Threads).

These helpers build authorization URLs and talk to the provider token
endpoints for code exchange, long-lived upgrades and refreshes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from social_connect.core.errors import UpstreamExchangeError
from social_connect.core.providers import (
    AUTHORIZATION_URL,
    FACEBOOK_TOKEN_URL,
    ProviderConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenGrant:
    """Token material returned by a provider token endpoint."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class MetaOAuthClient:
    """Build authorization URLs and exchange or refresh provider tokens."""

    AUTH_BASE_URL = AUTHORIZATION_URL
    INSTAGRAM_LONG_LIVED_URL = "https://graph.instagram.com/access_token"
    INSTAGRAM_REFRESH_URL = "https://graph.instagram.com/refresh_access_token"

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def build_authorization_url(
        self,
        config: ProviderConfig,
        *,
        redirect_uri: str,
        state: str,
        code_challenge: str,
    ) -> str:
        """Construct the provider consent URL for a PKCE flow."""
        params = {
            "client_id": config.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": config.scope,
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_authorization_code(
        self,
        config: ProviderConfig,
        *,
        code: str,
        code_verifier: str,
        redirect_uri: str,
    ) -> TokenGrant:
        """Exchange a single-use authorization code for tokens."""
        payload = {
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "redirect_uri": redirect_uri,
            "code": code,
            "code_verifier": code_verifier,
            "grant_type": "authorization_code",
        }
        token_payload = await self._request(
            "POST",
            config.token_endpoint,
            label="Token exchange",
            data=payload,
        )
        return self._parse_grant(token_payload, label="Token exchange")

    async def exchange_instagram_long_lived_token(
        self, access_token: str, *, client_secret: str
    ) -> TokenGrant:
        """Upgrade a short-lived Instagram token to a long-lived one."""
        params = {
            "grant_type": "ig_exchange_token",
            "client_secret": client_secret,
            "access_token": access_token,
        }
        token_payload = await self._request(
            "GET",
            self.INSTAGRAM_LONG_LIVED_URL,
            label="Instagram long-lived exchange",
            params=params,
        )
        return self._parse_grant(token_payload, label="Instagram long-lived exchange")

    async def refresh_instagram_long_lived_token(self, access_token: str) -> TokenGrant:
        """Extend a long-lived Instagram token."""
        params = {"grant_type": "ig_refresh_token", "access_token": access_token}
        token_payload = await self._request(
            "GET",
            self.INSTAGRAM_REFRESH_URL,
            label="Instagram refresh",
            params=params,
        )
        return self._parse_grant(token_payload, label="Instagram refresh")

    async def refresh_facebook_token(
        self, config: ProviderConfig, access_token: str
    ) -> TokenGrant:
        """Re-exchange a Facebook-family token for a fresh long-lived one."""
        params = {
            "grant_type": "fb_exchange_token",
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "fb_exchange_token": access_token,
        }
        token_payload = await self._request(
            "GET",
            FACEBOOK_TOKEN_URL,
            label="Facebook token refresh",
            params=params,
        )
        return self._parse_grant(token_payload, label="Facebook token refresh")

    async def _request(
        self, method: str, url: str, *, label: str, **kwargs: Any
    ) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s request failed: %s", label, exc.__class__.__name__)
            raise UpstreamExchangeError(f"{label} failed: {exc}") from exc

        if not response.is_success:
            logger.warning("%s rejected with HTTP %s", label, response.status_code)
            raise UpstreamExchangeError(
                f"{label} failed: {response.text}",
                body=response.text,
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamExchangeError(
                f"{label} returned a non-JSON body.", body=response.text
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamExchangeError(
                f"{label} returned a non-object JSON body.", body=response.text
            )
        return payload

    @staticmethod
    def _parse_grant(token_payload: Dict[str, Any], *, label: str) -> TokenGrant:
        access_token = token_payload.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise UpstreamExchangeError(f"{label} returned no access token.")

        expires_in = token_payload.get("expires_in")
        try:
            expires_in = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError, OverflowError) as exc:
            raise UpstreamExchangeError(
                f"{label} returned an invalid expires_in value."
            ) from exc

        return TokenGrant(
            access_token=access_token,
            refresh_token=token_payload.get("refresh_token") or None,
            expires_in=expires_in,
        )


__all__ = ["MetaOAuthClient", "TokenGrant"]
