"""Security middleware for FastAPI - session validation and owner context."""

import logging

import redis
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.session import SessionManager
from auth.exceptions import SessionExpiredError
from api.base import error_response, request_id_of, ErrorCodes
from utils.user_context import clear_current_owner_id, set_current_owner_id

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"


def extract_token(request: Request) -> str | None:
    """Bearer token from Authorization, else the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE) or None


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates sessions and sets the owner context.

    For non-public routes:
    1. Extracts the token (bearer header or 'session_token' cookie)
    2. No token: request proceeds as the anonymous owner
    3. Token present: validated via SessionManager, 401 if invalid
    4. Sets user_id in request.state and the owner context
    5. Clears context after request completes
    """

    PUBLIC_PATHS = [
        "/api/auth/login",
        "/api/auth/logout",
        "/api/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    ]

    def __init__(self, app, session_manager: SessionManager):
        super().__init__(app)
        self._session_manager = session_manager

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in public paths list."""
        if path == "/":
            return True
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path + "/"):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if self._is_public_path(request.url.path):
            return await call_next(request)

        token = extract_token(request)
        if token is None:
            return await call_next(request)

        try:
            session = self._session_manager.validate_session(token)
        except SessionExpiredError:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.SESSION_EXPIRED,
                    "Session has expired",
                    request_id_of(request),
                ),
            )
        except redis.RedisError:
            logger.exception("Session store unavailable")
            return JSONResponse(
                status_code=500,
                content=error_response(
                    ErrorCodes.INTERNAL_ERROR,
                    "An internal error occurred",
                    request_id_of(request),
                ),
            )

        set_current_owner_id(session.user_id)
        request.state.user_id = session.user_id
        request.state.session = session

        try:
            return await call_next(request)
        finally:
            clear_current_owner_id()
