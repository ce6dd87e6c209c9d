"""API modules for HTTP interface."""

from api.base import (
    APIError,
    APIMeta,
    success_response,
    error_response,
    request_id_of,
    ErrorCodes,
)
