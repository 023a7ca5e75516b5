"""Prometheus metric definitions for the songs API."""

from __future__ import annotations

import time

from prometheus_client import (  # type: ignore
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    Summary,
    generate_latest,
)

from ..config import settings

NAMESPACE = settings.METRICS_NAMESPACE

HTTP_REQUESTS = Counter(
    "requests_total",
    "HTTP requests served, by route template and status",
    labelnames=("method", "route", "status"),
    namespace=NAMESPACE,
)

HTTP_LATENCY = Histogram(
    "request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=("method", "route"),
    namespace=NAMESPACE,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)

HTTP_SERVER_ERRORS = Counter(
    "request_errors_total",
    "HTTP requests answered with a 5xx status",
    labelnames=("method", "route", "status"),
    namespace=NAMESPACE,
)

DB_QUERY_DURATION = Summary(
    "db_query_duration_seconds",
    "Time spent in PostgreSQL per statement kind",
    labelnames=("statement",),
    namespace=NAMESPACE,
)

SONG_MUTATIONS = Counter(
    "song_mutations_total",
    "Songs created, updated or deleted",
    labelnames=("operation",),
    namespace=NAMESPACE,
)


def observe_request(method: str, route: str, status_code: int, duration: float) -> None:
    HTTP_REQUESTS.labels(method=method, route=route, status=status_code).inc()
    HTTP_LATENCY.labels(method=method, route=route).observe(duration)
    if status_code >= 500:
        HTTP_SERVER_ERRORS.labels(method=method, route=route, status=status_code).inc()


def record_mutation(operation: str) -> None:
    """Count a successful create/update/delete."""
    SONG_MUTATIONS.labels(operation=operation).inc()


def metrics_response() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST


class QueryTimer:
    """Time one statement into ``DB_QUERY_DURATION``, failures included."""

    def __init__(self, statement: str) -> None:
        self.statement = statement
        self._start = 0.0

    def __enter__(self) -> QueryTimer:
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        DB_QUERY_DURATION.labels(statement=self.statement).observe(
            time.perf_counter() - self._start
        )
