"""JSON logging for the songs API.

Every line is one JSON object on stderr. ``extra=`` fields land under
``"extra"``, except the correlation keys in ``_TOP_LEVEL_KEYS`` which are
lifted to the top so log queries can filter on them directly.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, date, datetime
from typing import Any

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "color_message",
}

_TOP_LEVEL_KEYS = ("request_id", "song_id")


class JsonFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def __init__(self, service_name: str | None = None) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self._service_name:
            payload["service"] = self._service_name

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        for key in _TOP_LEVEL_KEYS:
            if key in extra:
                payload[key] = extra.pop(key)
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def configure_logging(level: str = "INFO", service_name: str | None = None) -> None:
    """Install the JSON handler on the root logger.

    uvicorn's own loggers propagate to root so server messages share the
    format; its access log is silenced because the request middleware
    already logs each request.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(service_name=service_name))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
    logging.getLogger("uvicorn.access").disabled = True


def get_logger(name: str = "songs_api") -> logging.Logger:
    return logging.getLogger(name)
