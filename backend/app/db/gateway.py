"""Storage gateway: the only component that talks to PostgreSQL."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import asyncpg

from ..utils.metrics import QueryTimer

_CONNECTIVITY_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.QueryCanceledError,
)


class StorageError(RuntimeError):
    """Raised when a statement fails inside the store."""


class StorageConnectivityError(StorageError):
    """The store could not be reached, or a statement timed out."""


class StorageConstraintError(StorageError):
    """A statement violated an integrity constraint."""


class StorageInputError(StorageError):
    """The driver rejected a parameter before sending it, e.g. an out-of-range integer."""


def _query_label(sql: str) -> str:
    words = sql.split(None, 1)
    return words[0].lower() if words else "unknown"


def parse_rowcount(command_tag: str | None) -> int:
    """Return the affected-row count from a command tag such as ``UPDATE 3``."""
    if not command_tag:
        return 0
    try:
        return int(command_tag.rsplit(" ", 1)[-1])
    except ValueError:
        return 0


class StorageGateway:
    """Parameterized query helpers bound to a single connection.

    SQL parameter style follows asyncpg: positional ``$1, $2, ...``.
    Driver failures are translated into the :class:`StorageError` hierarchy
    so callers handle one family of exceptions.
    """

    def __init__(self, conn: asyncpg.Connection) -> None:
        self._conn = conn

    async def query(self, sql: str, *params: Any) -> list[dict[str, Any]]:
        """Run a query and return all rows as dicts."""
        with QueryTimer(_query_label(sql)), _translate_errors():
            rows = await self._conn.fetch(sql, *params)
        return [dict(row) for row in rows]

    async def query_one(self, sql: str, *params: Any) -> dict[str, Any] | None:
        """Run a query and return the first row as a dict, or ``None``."""
        with QueryTimer(_query_label(sql)), _translate_errors():
            row = await self._conn.fetchrow(sql, *params)
        return dict(row) if row is not None else None

    async def query_scalar(self, sql: str, *params: Any) -> Any:
        """Run a query and return the first column of the first row."""
        with QueryTimer(_query_label(sql)), _translate_errors():
            return await self._conn.fetchval(sql, *params)

    async def execute(self, sql: str, *params: Any) -> int:
        """Run a statement (INSERT/UPDATE/DELETE) and return the affected row count."""
        with QueryTimer(_query_label(sql)), _translate_errors():
            status = await self._conn.execute(sql, *params)
        return parse_rowcount(status)


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Map driver exceptions onto the :class:`StorageError` hierarchy."""
    try:
        yield
    except asyncpg.exceptions.IntegrityConstraintViolationError as exc:
        raise StorageConstraintError(str(exc)) from exc
    except _CONNECTIVITY_ERRORS as exc:
        raise StorageConnectivityError(str(exc) or type(exc).__name__) from exc
    except asyncpg.exceptions.InterfaceError as exc:
        # Client-side DataError and ClientConfigurationError are also ValueErrors.
        if isinstance(exc, ValueError):
            raise StorageInputError(str(exc)) from exc
        raise StorageConnectivityError(str(exc)) from exc
    except asyncpg.exceptions.PostgresError as exc:
        raise StorageError(str(exc)) from exc
