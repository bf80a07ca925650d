"""
Logging for the relay.

Every record is stamped with the id of the request that produced it, so the
access line for POST /api/sos/alert and the per-contact delivery lines it
triggers can be joined. Production writes one JSON object per line; other
environments write a short text line.

Usage:
    from backend.lifeline.core.logging_config import setup_logging

    setup_logging(settings)
    logger.info("Alert dispatched", extra={"user_id": "u-42", "contact_count": 3})
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from backend.lifeline.core.config import Settings

NO_REQUEST = "-"

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Extra attributes copied into JSON records when present
STRUCTURED_FIELDS = (
    "user_id", "contact_count", "provider", "delivered", "failed",
    "duration_ms", "status_code", "endpoint",
)

# Libraries that log every call at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s"


def bind_request_id(request_id: str) -> Token:
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Set ``record.request_id`` from the request being served, or ``-``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or NO_REQUEST
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", NO_REQUEST)
        if request_id != NO_REQUEST:
            entry["request_id"] = request_id

        for key in STRUCTURED_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


def build_handler(config: Settings) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    if config.is_production:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S"))
    return handler


def setup_logging(config: Settings) -> None:
    """Route every logger through one stdout handler."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(build_handler(config))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
