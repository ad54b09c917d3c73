"""Expose dependency helpers for FastAPI routers."""

from .auth import get_current_user_id, require_service_role
from .clients import (
    get_meta_oauth_client,
    get_provider_registry,
    get_social_oauth_service,
    get_token_cipher_service,
    get_token_refresh_service,
    get_token_store,
)
from .config import get_security_settings

__all__ = [
    "get_current_user_id",
    "get_meta_oauth_client",
    "get_provider_registry",
    "get_security_settings",
    "get_social_oauth_service",
    "get_token_cipher_service",
    "get_token_refresh_service",
    "get_token_store",
    "require_service_role",
]
