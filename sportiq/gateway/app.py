"""FastAPI application factory.

- Query API: /api/v1/*
- Admin API: /api/v1/admin/* (cache and memory maintenance)
- healthz and Prometheus metrics
- Uniform {error, message} error bodies for domain and HTTP errors
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from sportiq.shared.errors import (
    ConfigurationMissingError,
    PortTimeoutError,
    PortUnavailableError,
    SportIQError,
    ValidationError,
)

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager

    from prometheus_client import CollectorRegistry


def create_app(
    *,
    cors_origins: list[str] | None = None,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
    registry: CollectorRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        cors_origins: Allowed CORS origins. Falls back to CORS_ORIGINS env var.
        lifespan: Async context manager factory for startup/shutdown lifecycle.
        registry: Prometheus registry served on /metrics (default: global).

    Returns:
        Configured FastAPI application (routers are mounted by the caller).
    """
    origins = cors_origins or [
        o.strip() for o in os.environ.get("CORS_ORIGINS", "").split(",") if o.strip()
    ]

    app = FastAPI(
        title="SportIQ Query API",
        description="Sports query understanding and data-source routing",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["Content-Type"],
        )

    # -- Error handlers --

    @app.exception_handler(ValidationError)
    async def _validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": exc.code, "message": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        return JSONResponse(
            status_code=422,
            content={"error": "VALIDATION", "message": str(first.get("msg", "Invalid request"))},
        )

    @app.exception_handler(PortUnavailableError)
    @app.exception_handler(PortTimeoutError)
    async def _port_error(_: Request, exc: SportIQError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"error": exc.code, "message": str(exc)},
        )

    @app.exception_handler(ConfigurationMissingError)
    async def _configuration_missing(_: Request, exc: ConfigurationMissingError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": exc.code, "message": str(exc)},
        )

    @app.exception_handler(SportIQError)
    async def _sportiq_error(_: Request, exc: SportIQError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": exc.code, "message": str(exc)},
        )

    # Override Starlette default HTTP errors for the uniform {error, message} schema
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        code_map = {
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
        }
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": code_map.get(exc.status_code, "HTTP_ERROR"),
                "message": exc.detail or f"HTTP {exc.status_code}",
            },
        )

    # -- System routes --

    @app.get("/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["system"], include_in_schema=False)
    async def metrics() -> Response:
        from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

        return Response(
            content=generate_latest(registry if registry is not None else REGISTRY),
            media_type=CONTENT_TYPE_LATEST,
        )

    return app
