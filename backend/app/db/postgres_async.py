"""
Async PostgreSQL connection pooling for FastAPI.

Provides asyncpg connection pool management with explicit initialization,
dependency injection for FastAPI routes, and automatic resource cleanup.

The pool is created once in the application lifespan and stored on
``app.state.pg_pool``; there is no module-level connection handle. Each
request borrows one connection through :func:`get_pg` and hands it to a
:class:`~backend.app.db.gateway.StorageGateway`.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import asyncpg
from fastapi import Depends, Request

from ..config import Settings
from ..utils.logging import get_logger
from .gateway import StorageConnectivityError, StorageGateway

logger = get_logger(__name__)


def _server_settings(settings: Settings) -> dict[str, str]:
    """Startup parameters for pooled connections; they survive ``RESET ALL`` on release."""
    return {
        "application_name": settings.SERVICE_NAME,
        "statement_timeout": str(settings.DB_STATEMENT_TIMEOUT_MS),
    }


async def init_pool(settings: Settings) -> asyncpg.Pool:
    """
    Create the asyncpg connection pool.

    Should be called once at application startup (in lifespan context).

    Args:
        settings: Application settings carrying DSN, pool bounds and timeouts

    Returns:
        Initialized asyncpg connection pool

    Raises:
        asyncpg.PostgresError: If database connection fails
        OSError: If the database host cannot be reached
    """
    pool = await asyncpg.create_pool(
        dsn=settings.dsn,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=settings.DB_COMMAND_TIMEOUT,
        max_inactive_connection_lifetime=60,  # Close idle connections after 60s
        server_settings=_server_settings(settings),
    )
    logger.info(
        "pg_pool_ready",
        extra={
            "db_host": settings.DB_HOST,
            "db_name": settings.DB_NAME,
            "min_size": settings.DB_POOL_MIN_SIZE,
            "max_size": settings.DB_POOL_MAX_SIZE,
        },
    )
    return pool


async def close_pool(pool: Any) -> None:
    """Close the pool created by :func:`init_pool`; ``None`` is ignored."""
    if pool is None:
        return None
    await pool.close()
    logger.info("pg_pool_closed")


async def get_pg(request: Request) -> AsyncIterator[asyncpg.Connection]:
    """
    FastAPI dependency for injecting PostgreSQL connections.

    Acquires a connection from the application's pool, yields it to the route
    handler, then returns it to the pool when the request completes.

    Yields:
        asyncpg.Connection: Database connection for the current request

    Raises:
        RuntimeError: If the pool has not been initialized
    """
    pool = getattr(request.app.state, "pg_pool", None)

    if pool is None:
        raise RuntimeError(
            "PostgreSQL connection pool not initialized. "
            "Call init_pool() in application lifespan."
        )

    try:
        conn = await pool.acquire()
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
        raise StorageConnectivityError("could not acquire a database connection") from exc

    try:
        yield conn
    finally:
        await pool.release(conn)


def get_gateway(conn: asyncpg.Connection = Depends(get_pg)) -> StorageGateway:
    """Dependency provider wrapping the request's connection in a gateway."""
    return StorageGateway(conn)
