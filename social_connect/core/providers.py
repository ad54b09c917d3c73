"""Static OAuth configuration for each supported provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from social_connect.core.config import AppSettings
from social_connect.core.errors import ConfigurationError, InvalidRequestError
from social_connect.models.token_record import Provider

AUTHORIZATION_URL = "https://www.facebook.com/v21.0/dialog/oauth"
FACEBOOK_TOKEN_URL = "https://graph.facebook.com/v21.0/oauth/access_token"
INSTAGRAM_TOKEN_URL = "https://api.instagram.com/oauth/access_token"

_SCOPES: Dict[Provider, str] = {
    Provider.FACEBOOK: (
        "public_profile pages_show_list pages_read_engagement "
        "instagram_basic instagram_manage_insights"
    ),
    Provider.INSTAGRAM: "instagram_basic instagram_manage_insights pages_show_list",
    Provider.THREADS: "basic pages_show_list",
}

_TOKEN_ENDPOINTS: Dict[Provider, str] = {
    Provider.FACEBOOK: FACEBOOK_TOKEN_URL,
    Provider.INSTAGRAM: INSTAGRAM_TOKEN_URL,
    Provider.THREADS: FACEBOOK_TOKEN_URL,
}


@dataclass(frozen=True)
class ProviderConfig:
    provider: Provider
    client_id: str
    client_secret: str
    redirect_uri: str
    scope: str
    token_endpoint: str

    @property
    def scopes(self) -> list[str]:
        return self.scope.split(" ")


class ProviderRegistry:
    """Resolve provider identifiers to immutable OAuth configuration.

    Every provider is validated when the registry is built, so a missing
    credential surfaces once at startup instead of on the first request.
    """

    def __init__(self, settings: AppSettings) -> None:
        sources = {
            Provider.FACEBOOK: settings.facebook,
            Provider.INSTAGRAM: settings.instagram,
            Provider.THREADS: settings.threads,
        }
        self._configs: Dict[Provider, ProviderConfig] = {}
        for provider, source in sources.items():
            missing = [
                name
                for name in ("client_id", "client_secret", "redirect_uri")
                if not str(getattr(source, name, "") or "").strip()
            ]
            if missing:
                raise ConfigurationError(
                    f"{provider.value} OAuth is not configured: missing {', '.join(missing)}"
                )
            self._configs[provider] = ProviderConfig(
                provider=provider,
                client_id=source.client_id,
                client_secret=source.client_secret,
                redirect_uri=str(source.redirect_uri),
                scope=_SCOPES[provider],
                token_endpoint=_TOKEN_ENDPOINTS[provider],
            )

    def config(self, provider: Provider | str) -> ProviderConfig:
        """Return the configuration for ``provider``."""
        try:
            key = Provider(provider)
        except ValueError as exc:
            raise InvalidRequestError(f"Unsupported provider: {provider}") from exc
        return self._configs[key]


__all__ = [
    "AUTHORIZATION_URL",
    "FACEBOOK_TOKEN_URL",
    "INSTAGRAM_TOKEN_URL",
    "ProviderConfig",
    "ProviderRegistry",
]
