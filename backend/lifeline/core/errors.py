"""
Centralised error handling — exception hierarchy + FastAPI handlers.

Provides:
    • Domain exceptions, each carrying its HTTP status and error code
    • Consistent JSON error response format
    • Request validation failures reported as 400
    • Automatic logging of unhandled errors

Usage:
    from backend.lifeline.core.errors import (
        LifelineError,
        InvalidArgumentError,
        NotFoundError,
        ConfigurationError,
        UpstreamError,
        UpstreamUnavailableError,
        StorageError,
        register_error_handlers,
    )

    raise NotFoundError("No emergency contacts found", user_id="u-42")
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.lifeline.core.config import settings

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Exception Hierarchy
# ═══════════════════════════════════════════════════════════════════════════

class LifelineError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details


class InvalidArgumentError(LifelineError):
    """Client input missing, malformed or out of range (400)."""

    def __init__(self, message: str, *, field: Optional[str] = None, **details: Any):
        d = {**details}
        if field:
            d["field"] = field
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_ARGUMENT",
            details=d or None,
        )


class NotFoundError(LifelineError):
    """No such record (404)."""

    def __init__(self, message: str, **identifiers: Any):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=identifiers or None,
        )


class ConfigurationError(LifelineError):
    """A provider credential or setting is missing (500)."""

    def __init__(self, setting: str, message: str = "Server configuration error"):
        super().__init__(
            message=message,
            status_code=500,
            error_code="CONFIGURATION_ERROR",
            details={"setting": setting},
        )


class UpstreamError(LifelineError):
    """A third-party provider answered with a failure."""

    def __init__(
        self,
        service: str,
        message: str,
        *,
        status_code: int = 502,
        details: Any = None,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code="UPSTREAM_ERROR",
            details=details,
        )
        self.service = service


class UpstreamUnavailableError(LifelineError):
    """A third-party provider could not be reached (503)."""

    def __init__(self, service: str, details: Any = None):
        super().__init__(
            message="Service unavailable",
            status_code=503,
            error_code="UPSTREAM_UNAVAILABLE",
            details=details or f"No response from {service}",
        )
        self.service = service


class StorageError(LifelineError):
    """The persistence layer failed (500)."""

    def __init__(self, operation: str, message: str = "Server error"):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORAGE_ERROR",
            details={"operation": operation},
        )
        self.operation = operation


class DeliveryError(LifelineError):
    """A single SMS could not be delivered."""

    def __init__(self, recipient: str, message: str = ""):
        super().__init__(
            message=f"SMS delivery to {recipient} failed: {message}",
            status_code=502,
            error_code="DELIVERY_ERROR",
            details={"recipient": recipient},
        )
        self.recipient = recipient
        self.reason = message


class InternalError(LifelineError):
    """Request could not be built or processed locally (500)."""

    def __init__(self, message: str = "Server error", details: Any = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="INTERNAL_ERROR",
            details=details,
        )


# ═══════════════════════════════════════════════════════════════════════════
# Error Response Builder
# ═══════════════════════════════════════════════════════════════════════════

def _build_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Any = None,
    request: Optional[Request] = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: Dict[str, Any] = {
        "error": {
            "code": error_code,
            "message": message,
            "status": status_code,
        }
    }

    if details:
        body["error"]["details"] = details

    if request and not settings.is_production:
        body["error"]["path"] = str(request.url.path)
        body["error"]["method"] = request.method

    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


# ═══════════════════════════════════════════════════════════════════════════
# FastAPI Exception Handlers
# ═══════════════════════════════════════════════════════════════════════════

def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(LifelineError)
    async def handle_lifeline_error(request: Request, exc: LifelineError):
        level = logging.WARNING if exc.status_code < 500 else logging.ERROR
        logger.log(
            level,
            "API Error [%s]: %s | details=%s",
            exc.error_code, exc.message, exc.details,
        )
        return _build_error_response(
            exc.status_code, exc.error_code, exc.message,
            exc.details, request,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("Request validation failed: %s", exc.errors())
        return _build_error_response(
            400, "INVALID_ARGUMENT", "Invalid request",
            exc.errors(), request,
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.critical(
            "Unhandled exception: %s\n%s",
            exc, traceback.format_exc(),
        )
        message = str(exc) if settings.DEBUG else "Internal server error"
        details = (
            {"traceback": traceback.format_exc().split("\n")}
            if settings.DEBUG else None
        )
        return _build_error_response(
            500, "INTERNAL_ERROR", message, details, request,
        )
