# src/justify_api/main.py
"""Main entry point for the Justify API application."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from justify_api.api.v1 import auth_router, justify_router, system_router
from justify_api.core.errors import ErrorKind
from justify_api.core.log import configure_logging
from justify_api.core.settings import Settings, settings
from justify_api.schemas.common import HealthResponse
from justify_api.services.justify_service import JustifyService

logger = logging.getLogger(__name__)

SERVICE_NAME = "justify-api"
DESCRIPTION = "Justify plain text to a fixed width under a daily per-token word quota"


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return messages or ["Invalid request"]


def create_app(
    service: JustifyService | None = None,
    config: Settings | None = None,
) -> FastAPI:
    """Build a FastAPI application wired to a ``JustifyService``.

    Args:
        service: Pre-built service, mainly for tests. A new one is built from
            ``config`` when omitted.
        config: Settings to use; defaults to the process-wide settings.

    Returns:
        The configured application. The service is reachable as
        ``app.state.justify_service``.
    """
    config = config or (service.config if service is not None else settings)
    app = FastAPI(title=config.app_name, description=DESCRIPTION, version=config.app_version)
    app.state.justify_service = service or JustifyService(config=config)
    app.state.started_at = time.monotonic()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        if config.enable_request_logging:
            logger.info(
                "[%s] %s %s -> %d (%.1fms)",
                request_id,
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
        return response

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = _validation_messages(exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": {
                    "error": messages[0],
                    "kind": ErrorKind.VALIDATION.value,
                    "errors": messages,
                }
            },
        )

    @app.exception_handler(Exception)
    async def on_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": {"error": "Internal server error", "kind": ErrorKind.INTERNAL.value}
            },
        )

    # Include API routers
    app.include_router(auth_router, prefix=config.api_prefix)
    app.include_router(justify_router, prefix=config.api_prefix)
    app.include_router(system_router, prefix=config.api_prefix)

    @app.on_event("startup")
    async def on_startup() -> None:
        await app.state.justify_service.start()
        logger.info("%s %s started", config.app_name, config.app_version)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await app.state.justify_service.stop()

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint to verify the service is running."""
        return HealthResponse(
            status="healthy",
            service=SERVICE_NAME,
            version=config.app_version,
            timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            uptime_seconds=round(time.monotonic() - app.state.started_at, 3),
        )

    @app.get("/")
    async def root() -> dict[str, object]:
        """Root endpoint with basic information about the API."""
        prefix = config.api_prefix
        return {
            "name": config.app_name,
            "version": config.app_version,
            "description": DESCRIPTION,
            "endpoints": [f"POST {prefix}/token", f"POST {prefix}/justify", "GET /health"],
            "docs": "/docs",
            "redoc": "/redoc",
        }

    return app


configure_logging(settings.log_level, debug=settings.debug)
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("justify_api.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
