"""
Domain models for social credential persistence.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Provider(str, Enum):
    """Social platforms the service can connect."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    THREADS = "threads"


class TokenStatus(str, Enum):
    """Connection state of a stored credential."""

    CONNECTED = "connected"
    RECONNECT_REQUIRED = "reconnect_required"

    @property
    def needs_reconnect(self) -> bool:
        return self is TokenStatus.RECONNECT_REQUIRED


class TokenRecord(BaseModel):
    """Represents a row of the ``users_social_tokens`` table.

    Token-bearing fields always hold ciphertext.
    """

    id: str
    user_id: str
    provider: Provider
    access_token: str
    refresh_token: Optional[str] = None
    long_lived_token: Optional[str] = None
    scopes: List[str] = Field(default_factory=list)
    expires_at: Optional[datetime] = None
    long_lived_expires_at: Optional[datetime] = None
    status: TokenStatus = TokenStatus.CONNECTED
    needs_reconnect: bool = False
    last_synced_at: Optional[datetime] = None
    last_error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def public_view(self) -> dict:
        """Return the record without its ciphertext columns."""
        return self.model_dump(
            mode="json",
            exclude={"access_token", "refresh_token", "long_lived_token"},
        )


__all__ = ["Provider", "TokenRecord", "TokenStatus"]
