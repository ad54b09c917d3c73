"""
Caller authentication dependencies.

User-facing routes require a bearer JWT issued by the identity provider;
privileged internal routes require the shared service key header.
"""

from __future__ import annotations

import hmac
import logging
from http import HTTPStatus
from typing import Optional

from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from social_connect.core.config import SecuritySettings
from social_connect.dependencies.config import get_security_settings

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    security: SecuritySettings = Depends(get_security_settings),
) -> str:
    """Verify the bearer token and return the caller's user id (``sub``)."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail="Unauthorized")

    try:
        payload = jwt.decode(
            credentials.credentials,
            security.auth_jwt_secret,
            algorithms=["HS256"],
            audience=security.auth_jwt_audience,
        )
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED, detail="Unauthorized"
        ) from exc

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail="Unauthorized")
    return str(user_id)


def require_service_role(
    x_service_role_key: Optional[str] = Header(default=None),
    security: SecuritySettings = Depends(get_security_settings),
) -> None:
    """Reject privileged calls that do not present the configured service key."""
    expected = security.service_role_key
    if not expected or not x_service_role_key:
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail="Forbidden")
    if not hmac.compare_digest(x_service_role_key.encode(), expected.encode()):
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail="Forbidden")


__all__ = ["get_current_user_id", "require_service_role"]
