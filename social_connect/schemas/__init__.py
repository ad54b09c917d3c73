"""Public schema exports."""

from .oauth import (
    ConnectionListResponse,
    DecryptTokenRequest,
    DecryptTokenResponse,
    EncryptTokenRequest,
    EncryptTokenResponse,
    ExchangeCodeRequest,
    ExchangeCodeResponse,
    RefreshResult,
    RefreshSweepResponse,
    StartAuthorizationRequest,
    StartAuthorizationResponse,
)

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
