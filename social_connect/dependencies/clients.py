"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from datetime import timedelta
from functools import lru_cache

from social_connect.clients import MetaOAuthClient, SQLiteTokenStore
from social_connect.core.config import get_settings
from social_connect.core.providers import ProviderRegistry
from social_connect.services import (
    SocialOAuthService,
    TokenCipherService,
    TokenRefreshService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_provider_registry() -> ProviderRegistry:
    """Provide the validated provider registry."""
    return ProviderRegistry(_settings())


@lru_cache()
def get_meta_oauth_client() -> MetaOAuthClient:
    """Create a singleton provider OAuth client."""
    settings = _settings()
    return MetaOAuthClient(timeout=settings.refresh.http_timeout_seconds)


@lru_cache()
def get_token_store() -> SQLiteTokenStore:
    """Provide the shared credential table."""
    settings = _settings()
    return SQLiteTokenStore(settings.storage.database_path)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    return TokenCipherService(secret=settings.security.token_encryption_key)


def get_social_oauth_service() -> SocialOAuthService:
    """Build the OAuth start/exchange service."""
    return SocialOAuthService(
        registry=get_provider_registry(),
        oauth_client=get_meta_oauth_client(),
        store=get_token_store(),
        token_cipher=get_token_cipher_service(),
    )


def get_token_refresh_service() -> TokenRefreshService:
    """Build the refresh sweep service."""
    settings = _settings()
    return TokenRefreshService(
        registry=get_provider_registry(),
        oauth_client=get_meta_oauth_client(),
        store=get_token_store(),
        token_cipher=get_token_cipher_service(),
        refresh_window=timedelta(days=settings.refresh.window_days),
    )


__all__ = [
    "get_meta_oauth_client",
    "get_provider_registry",
    "get_social_oauth_service",
    "get_token_cipher_service",
    "get_token_refresh_service",
    "get_token_store",
]
