"""Unified API response format and error codes."""

from typing import Any
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field
from starlette.requests import Request

from utils.timezone import now_utc


class APIError(BaseModel):
    """Error details in API response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class APIMeta(BaseModel):
    """Metadata included in every API response."""

    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Unique request identifier for tracing")


def request_id_of(request: Request | None) -> str | None:
    """Request ID assigned by RequestIDMiddleware, if any."""
    if request is None:
        return None
    return getattr(request.state, "request_id", None)


def _meta(request_id: str | None) -> dict:
    return APIMeta(
        timestamp=now_utc(),
        request_id=request_id or str(uuid4()),
    ).model_dump(mode="json")


def success_response(request_id: str | None = None, **payload: Any) -> dict:
    """
    Create a success body.

    Payload keys sit at the top level next to success and meta, e.g.
    success_response(invoice=..., source="database").
    """
    return {"success": True, **payload, "meta": _meta(request_id)}


def error_response(code: str, message: str, request_id: str | None = None) -> dict:
    """Create an error body."""
    return {
        "success": False,
        "error": APIError(code=code, message=message).model_dump(),
        "meta": _meta(request_id),
    }


class ErrorCodes:
    """Standard error codes for consistent error handling."""

    # Authentication & Authorization
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    RATE_LIMITED = "RATE_LIMITED"

    # Resource Errors
    NOT_FOUND = "NOT_FOUND"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"
