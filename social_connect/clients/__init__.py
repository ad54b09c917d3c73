"""Expose constructed client wrappers."""

from .meta_oauth import MetaOAuthClient, TokenGrant
from .token_store import SQLiteTokenStore

__all__ = [
    "MetaOAuthClient",
    "SQLiteTokenStore",
    "TokenGrant",
]
