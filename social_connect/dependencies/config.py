"""
FastAPI dependencies exposing configuration to the auth guards.
"""

from social_connect.core.config import SecuritySettings, get_settings


def get_security_settings() -> SecuritySettings:
    """JWT and service-key settings used to authenticate callers."""
    return get_settings().security


__all__ = ["get_security_settings"]
