"""Global error hierarchy and FastAPI exception handlers.

All bridge-specific errors extend BridgeError. Gateway and relay errors are
normally recovered where they are raised; the FastAPI exception handlers
catch anything that escapes (plus Pydantic's RequestValidationError and
unhandled exceptions) and return a consistent JSON envelope:
{ success, data, error, meta }.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class BridgeError(Exception):
    """Base error for all bridge-specific errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class ValidationError(BridgeError):
    """Payload validation failures, includes field-level details."""

    status_code = 422
    message = "Validation error"


class AuthenticationError(BridgeError):
    """Missing or mismatched anti-forgery token."""

    status_code = 403
    message = "Invalid or missing CSRF token"


class InvalidMethodError(BridgeError):
    """HTTP verb outside GET/POST/PATCH/PUT/DELETE."""

    status_code = 400
    message = "Invalid HTTP method"


class MissingEndpointError(BridgeError):
    """Proxy call without an upstream endpoint."""

    status_code = 400
    message = "Endpoint is required"


class RateLimitExceededError(BridgeError):
    """Client exceeded its requests-per-window allowance."""

    status_code = 429
    message = "Rate limit exceeded"


class ApiKeyNotConfiguredError(BridgeError):
    """No upstream API key available."""

    status_code = 500
    message = "Mailchimp API key not configured"


class UpstreamClientError(BridgeError):
    """Upstream answered with a 4xx; ``error_body`` is passed through verbatim."""

    message = "Upstream request rejected"

    def __init__(self, status_code: int, error_body: object) -> None:
        super().__init__()
        self.status_code = status_code
        self.error_body = error_body


class UpstreamTransportError(BridgeError):
    """Network failure, timeout or upstream server error."""

    status_code = 500
    message = "Upstream request failed"


class InvalidSignatureError(BridgeError):
    """Webhook signature header does not match the shared secret."""

    status_code = 401
    message = "Invalid signature"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(
    status_code: int,
    error: str,
    meta: dict | None = None,
) -> JSONResponse:
    """Build a JSON envelope error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": error,
            "meta": meta,
        },
    )


async def _bridge_error_handler(_request: Request, exc: BridgeError) -> JSONResponse:
    """Handle BridgeError subclasses."""
    meta = exc.details if exc.details else None
    return _envelope(exc.status_code, exc.message, meta=meta)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return _envelope(
        status_code=422,
        error="Validation error",
        meta={"fields": field_errors},
    )


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: log traceback, return generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return _envelope(status_code=500, error="Internal server error")


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(BridgeError, _bridge_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
