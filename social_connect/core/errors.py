"""Exception hierarchy shared by the OAuth flow and the refresh sweep."""

from __future__ import annotations

from http import HTTPStatus
from typing import Optional


class SocialConnectError(Exception):
    """Base class for errors raised by the service."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR


class ConfigurationError(SocialConnectError):
    """Raised when a required secret or URI is missing from the environment."""


class InvalidRequestError(SocialConnectError):
    """Raised when caller input is malformed or outside the supported set."""

    status_code = HTTPStatus.BAD_REQUEST


class AuthenticationError(SocialConnectError):
    """Raised when the caller identity is missing or cannot be verified."""

    status_code = HTTPStatus.UNAUTHORIZED


class ForbiddenError(SocialConnectError):
    """Raised when a privileged internal call presents the wrong credentials."""

    status_code = HTTPStatus.FORBIDDEN


class UpstreamExchangeError(SocialConnectError):
    """Raised when a provider token endpoint fails or returns a non-2xx response."""

    def __init__(
        self,
        message: str,
        *,
        body: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.body = body
        self.upstream_status = upstream_status


class ExchangeIncompleteError(SocialConnectError):
    """Raised when an exchange fails after the provider accepted the code."""


class PersistenceError(SocialConnectError):
    """Raised when the credential store cannot be read or written."""


class SecretCodecError(SocialConnectError, ValueError):
    """Raised when token material cannot be encrypted or decrypted."""


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ExchangeIncompleteError",
    "ForbiddenError",
    "InvalidRequestError",
    "PersistenceError",
    "SecretCodecError",
    "SocialConnectError",
    "UpstreamExchangeError",
]
