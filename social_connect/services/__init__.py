"""Service layer exports."""

from .social_oauth import AuthorizationStart, SocialOAuthService
from .token_cipher import TokenCipherService
from .token_refresh import RefreshOutcome, SweepReport, TokenRefreshService

__all__ = [
    "AuthorizationStart",
    "RefreshOutcome",
    "SocialOAuthService",
    "SweepReport",
    "TokenCipherService",
    "TokenRefreshService",
]
