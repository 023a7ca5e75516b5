"""
Songs API FastAPI Application

CRUD service over a single ``songs`` table in PostgreSQL, with paginated
listing and paginated access to the verses of a song's lyrics.

Architecture:
    - Database: PostgreSQL via an asyncpg pool created in the lifespan and
      kept on ``app.state``; each request gets its own StorageGateway
    - Layers: routers -> services -> repositories -> StorageGateway

Environment Configuration:
    All settings loaded from the environment / .env via pydantic-settings.
    See backend/app/config.py for available configuration options.

API Endpoints:
    - /songs: list (GET) and create (POST)
    - /songs/{id}: update (PUT) and delete (DELETE)
    - /songs/{id}/text: paginated verses (GET)
    - /healthz: Health check
    - /metrics: Prometheus metrics

Error Envelope:
    Every error response is ``{"detail": "<message>"}``. Malformed input is
    400, unknown songs are 404, store failures are 500.

Interactive Documentation:
    - Swagger UI: http://localhost:8080/docs
    - ReDoc: http://localhost:8080/redoc
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db.gateway import StorageError
from .db.postgres_async import close_pool, init_pool
from .middleware.request_logging import RequestLoggingMiddleware
from .routers import health, monitoring, songs
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Creates the PostgreSQL pool on startup and closes it on shutdown. A
    failure to connect aborts startup.

    Args:
        app: FastAPI application instance

    Yields:
        None (context manager pattern for startup/shutdown)
    """
    app.state.pg_pool = await init_pool(settings)

    try:
        yield
    finally:
        await close_pool(app.state.pg_pool)
        app.state.pg_pool = None


configure_logging(settings.LOG_LEVEL, service_name=settings.SERVICE_NAME)

app = FastAPI(
    title="Songs API",
    description="Song catalogue with paginated lyrics",
    version="0.1.0",
    lifespan=lifespan,
    default_response_class=JSONResponse,
)


def _format_validation_errors(errors: list[dict]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies, paths and query strings as 400."""
    return JSONResponse(
        status_code=400,
        content={"detail": _format_validation_errors(list(exc.errors()))},
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Log store failures and answer with an opaque 500."""
    logger.error(
        "storage_error",
        exc_info=exc,
        extra={
            "operation": getattr(request.scope.get("route"), "name", None),
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(songs.router, prefix=settings.API_PREFIX)
app.include_router(monitoring.router)  # No prefix - uses /metrics directly

exempt_paths = {
    "/healthz",
    "/metrics",
    f"{settings.API_PREFIX}/healthz",
}

app.add_middleware(
    RequestLoggingMiddleware,
    exempt_paths=exempt_paths,
    metrics_enabled=settings.METRICS_ENABLED,
)


def run() -> None:
    """Serve the API with uvicorn on ``API_HOST:API_PORT``."""
    uvicorn.run(
        "backend.app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
