"""
FastAPI application factory for the snapshot engine.

This module initializes the FastAPI application instance. It is responsible for:
1.  **Wiring**: attaching a :class:`SnapshotFacade` to ``app.state``.
2.  **Exception Handling**: mapping engine errors to structured JSON responses.
3.  **Routing**: mounting the period and maintenance routers.

Tests pass a pre-built façade (in-memory store, fixed clock); the server
entry point builds one from ``TERMSNAP_CALENDAR_FILE`` /
``TERMSNAP_ENTITIES_FILE`` / ``TERMSNAP_STORE_DIR``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from termsnap import __version__
from termsnap.api.routers import maintenance, periods
from termsnap.core.errors import ConflictError, NotFoundError, ProviderUnavailableError
from termsnap.core.facade import SnapshotFacade
from termsnap.core.loaders import build_facade
from termsnap.core.settings import get_logger, load_settings

log = get_logger("termsnap.api")


def _facade_from_settings() -> SnapshotFacade | None:
    cfg = load_settings()
    if cfg.calendar_file is None:
        log.warning("TERMSNAP_CALENDAR_FILE is not set; snapshot routes will return 503")
        return None
    return build_facade(cfg.calendar_file, cfg.entities_file, cfg.store_dir)


def _error(status_code: int, label: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": label, "code": getattr(exc, "code", "error"), "detail": str(exc)},
    )


def create_app(facade: SnapshotFacade | None = None) -> FastAPI:
    """
    Construct and configure the termsnap FastAPI application.

    Parameters
    ----------
    facade:
        Optional pre-built façade. When omitted, one is built from settings
        at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        app.state.facade = facade if facade is not None else _facade_from_settings()
        log.info("termsnap API started (environment=%s)", load_settings().environment)
        yield
        log.info("termsnap API shutting down")

    app = FastAPI(
        title="termsnap API",
        description="Temporal snapshot consistency engine",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.facade = facade

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, "Not Found", exc)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        return _error(409, "Conflict", exc)

    @app.exception_handler(ProviderUnavailableError)
    async def provider_handler(request: Request, exc: ProviderUnavailableError) -> JSONResponse:
        return _error(503, "Provider Unavailable", exc)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map ValueErrors (including malformed calendars) to HTTP 400."""
        return _error(400, "Bad Request", exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(periods.router)
    app.include_router(maintenance.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


__all__ = ["create_app"]
