"""FastAPI application entry point.

Creates and configures the FastAPI application:
- Exception handlers for API errors
- Service wiring on startup
- API v1 router mounting
- Health check endpoint
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from accountkit.api.v1.router import router as v1_router
from accountkit.core.clock import SystemClock
from accountkit.core.config import settings
from accountkit.core.database import async_session_factory, engine
from accountkit.core.email import create_certification_mailer
from accountkit.core.errors import APIError
from accountkit.core.keys import load_key_material
from accountkit.core.passwords import BcryptPasswordHasher
from accountkit.core.responses import ErrorDetail, ErrorResponse
from accountkit.services.registry import Services, build_services

logger = structlog.get_logger()


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Render an APIError as the standard error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ).model_dump(),
    )


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request shape errors from FastAPI.

    Converts pydantic's error list into field/reasons details, grouping
    multiple errors for the same field.

    Args:
        request: The incoming request.
        exc: The RequestValidationError from pydantic.

    Returns:
        JSONResponse with VALIDATION_ERROR code and field-level details.
    """
    reasons: dict[str, list[str]] = {}
    for error in exc.errors():
        # loc is e.g. ("body", "screenName") or ("query", "token")
        field = str(error["loc"][-1]) if error["loc"] else "request"
        reasons.setdefault(field, []).append(error["msg"])

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details=[
                    {"field": field, "reasons": messages}
                    for field, messages in reasons.items()
                ],
            )
        ).model_dump(),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    Returns 500 INTERNAL_ERROR without exposing stack traces; the exception
    is logged server side.
    """
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
            )
        ).model_dump(),
    )


def build_default_services() -> Services:
    """Wire services from process settings."""
    return build_services(
        async_session_factory,
        settings=settings,
        key_material=load_key_material(settings),
        mailer=create_certification_mailer(settings),
        hasher=BcryptPasswordHasher(),
        clock=SystemClock(),
    )


@asynccontextmanager
async def _default_lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.services = build_default_services()
    yield
    await engine.dispose()


def create_app(services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Pre-built services. When omitted, services are built from
            settings on startup and the database engine is disposed on
            shutdown.

    Returns:
        Configured FastAPI application instance.
    """
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="accountkit API",
        version="1.0.0",
        description="Account registration, email certification and access tokens",
        lifespan=None if services is not None else _default_lifespan,
    )
    if services is not None:
        app.state.services = services

    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    # Health check endpoint (outside versioned API)
    @app.get("/health")
    def health_check() -> dict:
        return {"status": "healthy"}

    return app


# Used by uvicorn: uvicorn accountkit.main:app
app = create_app()
