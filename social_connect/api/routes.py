"""
FastAPI routes for social account connection and token maintenance.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Union

from fastapi import APIRouter, Body, Depends, HTTPException

from social_connect.core.errors import SocialConnectError
from social_connect.dependencies import (
    get_current_user_id,
    get_social_oauth_service,
    get_token_cipher_service,
    get_token_refresh_service,
    get_token_store,
    require_service_role,
)
from social_connect.schemas import (
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

router = APIRouter()
logger = logging.getLogger(__name__)

SocialOAuthPayload = Annotated[
    Union[StartAuthorizationRequest, ExchangeCodeRequest],
    Body(discriminator="action"),
]


def _http_error(exc: SocialConnectError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/social-oauth", status_code=HTTPStatus.OK)
async def social_oauth(
    payload: SocialOAuthPayload,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[Any, Depends(get_social_oauth_service)],
) -> dict:
    """Start a provider authorization flow or exchange its returned code."""
    if isinstance(payload, StartAuthorizationRequest):
        try:
            started = service.start_authorization(
                payload.provider,
                redirect_uri=str(payload.redirect_uri) if payload.redirect_uri else None,
            )
        except SocialConnectError as exc:
            raise _http_error(exc) from exc
        return StartAuthorizationResponse(
            authorization_url=started.authorization_url,
            code_verifier=started.code_verifier,
            state=started.state,
            provider=started.provider,
        ).model_dump(mode="json")

    try:
        record = await service.exchange(
            user_id=user_id,
            provider=payload.provider,
            code=payload.code,
            code_verifier=payload.code_verifier,
            redirect_uri=str(payload.redirect_uri) if payload.redirect_uri else None,
        )
    except SocialConnectError as exc:
        logger.error("social-oauth exchange failed for %s", payload.provider.value)
        raise _http_error(exc) from exc

    return ExchangeCodeResponse(record=record.public_view()).model_dump(mode="json")


@router.get("/social-tokens", response_model=ConnectionListResponse)
async def list_connections(
    user_id: Annotated[str, Depends(get_current_user_id)],
    store: Annotated[Any, Depends(get_token_store)],
) -> ConnectionListResponse:
    """List the caller's stored connections without token material."""
    try:
        records = store.list_for_user(user_id)
    except SocialConnectError as exc:
        raise _http_error(exc) from exc
    return ConnectionListResponse(connections=[record.public_view() for record in records])


@router.post(
    "/token-refresh",
    response_model=RefreshSweepResponse,
    dependencies=[Depends(require_service_role)],
)
async def run_token_refresh(
    service: Annotated[Any, Depends(get_token_refresh_service)],
) -> RefreshSweepResponse:
    """Run one refresh sweep; invoked by the scheduler."""
    try:
        report = await service.run_sweep()
    except SocialConnectError as exc:
        logger.error("Refresh sweep could not load tokens: %s", exc)
        raise _http_error(exc) from exc

    return RefreshSweepResponse(
        results=[
            RefreshResult(id=outcome.id, status=outcome.status, expires_at=outcome.expires_at)
            for outcome in report.results
        ]
    )


@router.post("/tokens/encrypt", response_model=EncryptTokenResponse)
async def encrypt_tokens(
    payload: EncryptTokenRequest,
    _user_id: Annotated[str, Depends(get_current_user_id)],
    token_cipher: Annotated[Any, Depends(get_token_cipher_service)],
) -> EncryptTokenResponse:
    """Encrypt manually supplied tokens for storage by the caller."""
    try:
        encrypted_access = await token_cipher.encrypt(payload.access_token)
        encrypted_refresh = (
            await token_cipher.encrypt(payload.refresh_token)
            if payload.refresh_token
            else None
        )
    except SocialConnectError as exc:
        raise _http_error(exc) from exc
    return EncryptTokenResponse(
        encrypted_access_token=encrypted_access,
        encrypted_refresh_token=encrypted_refresh,
    )


@router.post(
    "/tokens/decrypt",
    response_model=DecryptTokenResponse,
    dependencies=[Depends(require_service_role)],
)
async def decrypt_token(
    payload: DecryptTokenRequest,
    token_cipher: Annotated[Any, Depends(get_token_cipher_service)],
) -> DecryptTokenResponse:
    """Decrypt a stored value for trusted internal callers."""
    try:
        value = await token_cipher.decrypt(payload.encrypted_value)
    except SocialConnectError as exc:
        raise _http_error(exc) from exc
    return DecryptTokenResponse(value=value)


__all__ = ["router"]
