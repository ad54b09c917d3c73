"""
FastAPI application entrypoint for the social connect service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from social_connect.api.routes import router as api_router
from social_connect.core.config import get_settings
from social_connect.core.errors import SocialConnectError
from social_connect.core.logging import configure_logging

logger = logging.getLogger(__name__)


async def _invalid_request_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def _service_error_handler(request: Request, exc: SocialConnectError) -> JSONResponse:
    logger.error("Unhandled service error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Social Connect Service",
        version="0.1.0",
        description="OAuth connection and token refresh for social publishing accounts.",
    )
    app.add_exception_handler(RequestValidationError, _invalid_request_handler)
    app.add_exception_handler(SocialConnectError, _service_error_handler)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
