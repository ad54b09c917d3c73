"""
Application configuration models and helpers.

Centralizes settings management so both the FastAPI app and the scheduled
token refresh job share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import AnyHttpUrl, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from social_connect.core.errors import ConfigurationError


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class FacebookSettings(BaseSettings):
    """Facebook app credentials."""

    client_id: str = Field(..., validation_alias="FACEBOOK_APP_ID", min_length=1)
    client_secret: str = Field(..., validation_alias="FACEBOOK_APP_SECRET", min_length=1)
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="FACEBOOK_REDIRECT_URI")


class InstagramSettings(BaseSettings):
    """Instagram app credentials."""

    client_id: str = Field(..., validation_alias="INSTAGRAM_APP_ID", min_length=1)
    client_secret: str = Field(..., validation_alias="INSTAGRAM_APP_SECRET", min_length=1)
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="INSTAGRAM_REDIRECT_URI")


class ThreadsSettings(BaseSettings):
    """Threads app credentials."""

    client_id: str = Field(..., validation_alias="THREADS_APP_ID", min_length=1)
    client_secret: str = Field(..., validation_alias="THREADS_APP_SECRET", min_length=1)
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="THREADS_REDIRECT_URI")


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    token_encryption_key: str = Field(
        ...,
        validation_alias="TOKEN_ENCRYPTION_KEY",
        description="Base64-encoded 32-byte key used to encrypt stored tokens.",
    )
    auth_jwt_secret: str = Field(
        ...,
        validation_alias="AUTH_JWT_SECRET",
        description="HS256 secret used to verify caller bearer tokens.",
    )
    auth_jwt_audience: str = Field("authenticated", validation_alias="AUTH_JWT_AUDIENCE")
    service_role_key: Optional[str] = Field(
        None,
        validation_alias="SERVICE_ROLE_KEY",
        description="Shared key required on privileged internal calls.",
    )


class StorageSettings(BaseSettings):
    """Location of the credential table."""

    database_path: str = Field("data/social_tokens.db", validation_alias="TOKEN_DB_PATH")


class RefreshSettings(BaseSettings):
    """Refresh sweep tuning."""

    window_days: int = Field(7, validation_alias="TOKEN_REFRESH_WINDOW_DAYS", ge=0)
    interval_seconds: float = Field(
        3600.0, validation_alias="TOKEN_REFRESH_INTERVAL_SECONDS", gt=0
    )
    http_timeout_seconds: float = Field(
        10.0, validation_alias="PROVIDER_HTTP_TIMEOUT", gt=0
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    facebook: FacebookSettings = Field(default_factory=FacebookSettings)
    instagram: InstagramSettings = Field(default_factory=InstagramSettings)
    threads: ThreadsSettings = Field(default_factory=ThreadsSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def load_settings() -> AppSettings:
    """Build settings, converting validation failures into a configuration error."""
    try:
        return AppSettings()  # type: ignore[call-arg]
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
            for error in exc.errors()
        ]
        raise ConfigurationError(
            "Missing or invalid configuration: " + "; ".join(problems)
        ) from exc


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return load_settings()


__all__ = [
    "AppSettings",
    "FacebookSettings",
    "InstagramSettings",
    "RefreshSettings",
    "SecuritySettings",
    "StorageSettings",
    "ThreadsSettings",
    "get_settings",
    "load_settings",
]
