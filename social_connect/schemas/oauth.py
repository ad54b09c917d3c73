"""Schemas for the social OAuth and token maintenance endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AnyHttpUrl, BaseModel, Field

from social_connect.models.token_record import Provider


class StartAuthorizationRequest(BaseModel):
    """Begin a PKCE authorization flow for a provider."""

    action: Literal["start"]
    provider: Provider
    redirect_uri: Optional[AnyHttpUrl] = Field(
        None, description="Overrides the provider's configured redirect URI."
    )


class ExchangeCodeRequest(BaseModel):
    """Complete the flow by exchanging the returned authorization code."""

    action: Literal["exchange"]
    provider: Provider
    code: str = Field(..., min_length=1, description="Authorization code from the provider.")
    code_verifier: str = Field(
        ..., min_length=1, description="Verifier returned by the start action."
    )
    state: Optional[str] = Field(
        None, description="Opaque state token issued when starting OAuth."
    )
    redirect_uri: Optional[AnyHttpUrl] = None


class StartAuthorizationResponse(BaseModel):
    authorization_url: str
    code_verifier: str
    state: str
    provider: Provider


class ExchangeCodeResponse(BaseModel):
    success: bool = True
    record: Dict[str, Any]


class ConnectionListResponse(BaseModel):
    connections: List[Dict[str, Any]]


class RefreshResult(BaseModel):
    id: str
    status: Literal["refreshed", "failed"]
    expires_at: Optional[datetime] = None


class RefreshSweepResponse(BaseModel):
    success: bool = True
    results: List[RefreshResult]


class EncryptTokenRequest(BaseModel):
    access_token: str = Field(..., min_length=10, max_length=4000)
    refresh_token: Optional[str] = Field(None, min_length=10, max_length=4000)


class EncryptTokenResponse(BaseModel):
    success: bool = True
    encrypted_access_token: str
    encrypted_refresh_token: Optional[str] = None


class DecryptTokenRequest(BaseModel):
    encrypted_value: str = Field(..., min_length=10)


class DecryptTokenResponse(BaseModel):
    success: bool = True
    value: str


__all__ = [
    "ConnectionListResponse",
    "DecryptTokenRequest",
    "DecryptTokenResponse",
    "EncryptTokenRequest",
    "EncryptTokenResponse",
    "ExchangeCodeRequest",
    "ExchangeCodeResponse",
    "RefreshResult",
    "RefreshSweepResponse",
    "StartAuthorizationRequest",
    "StartAuthorizationResponse",
]
