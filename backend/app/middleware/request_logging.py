"""Per-request access logging, request ids and HTTP metrics."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.logging import get_logger
from ..utils.metrics import observe_request

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assign a request id, log one ``request`` line and observe metrics.

    The id comes from the incoming ``X-Request-ID`` header when present and is
    echoed on the response. Paths in ``exempt_paths`` (probes, scrapes) are
    still measured but not logged.
    """

    def __init__(
        self,
        app,
        exempt_paths: Iterable[str] | None = None,
        metrics_enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.exempt_paths = frozenset(exempt_paths or ())
        self.metrics_enabled = metrics_enabled

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - started
            logger.exception("request_failed", extra=_fields(request, request_id, elapsed))
            self._observe(request, 500, elapsed)
            raise

        elapsed = time.perf_counter() - started
        self._observe(request, response.status_code, elapsed)

        if request.url.path not in self.exempt_paths:
            level = logging.ERROR if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "request",
                extra={
                    **_fields(request, request_id, elapsed),
                    "status_code": response.status_code,
                },
            )

        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response

    def _observe(self, request: Request, status_code: int, elapsed: float) -> None:
        if self.metrics_enabled:
            observe_request(request.method, _route_template(request), status_code, elapsed)


def _fields(request: Request, request_id: str, elapsed: float) -> dict[str, Any]:
    return {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query or None,
        "duration_ms": round(elapsed * 1000, 3),
        "client_ip": request.client.host if request.client else None,
    }


def _route_template(request: Request) -> str:
    # Unmatched paths share one label so scanners cannot grow the series set.
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


__all__ = ["REQUEST_ID_HEADER", "RequestLoggingMiddleware"]
