"""HTTP routes for authentication."""

import ipaddress

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from auth.security_middleware import SESSION_COOKIE, extract_token
from auth.service import AuthService
from auth.types import LoginRequest
from api.base import success_response, error_response, request_id_of, ErrorCodes
from utils.user_context import get_current_owner_id, is_anonymous


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def _not_authenticated(request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=error_response(
            ErrorCodes.NOT_AUTHENTICATED,
            "Authentication required",
            request_id_of(request),
        ),
    )


def create_auth_router(auth_service: AuthService, cookie_secure: bool = True) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["auth"])

    @router.post("/login")
    def login(request: Request, response: Response, body: LoginRequest):
        """Password login.

        Sets session_token cookie on success and also returns the token for
        clients that send it as a bearer token.
        """
        result = auth_service.login(
            email=body.email,
            password=body.password,
            ip_address=_get_client_ip(request),
        )

        response.set_cookie(
            key=SESSION_COOKIE,
            value=result.session.token,
            httponly=True,
            secure=cookie_secure,
            samesite="lax",
            max_age=int((result.session.expires_at - result.session.created_at).total_seconds()),
        )

        return success_response(
            request_id_of(request),
            token=result.session.token,
            expiresAt=result.session.expires_at.isoformat(),
            user=result.user.public(),
        )

    @router.get("/verify")
    def verify(request: Request):
        """Check the presented token. The middleware has already validated it."""
        if not hasattr(request.state, "user_id"):
            return _not_authenticated(request)

        user = auth_service.get_user(request.state.user_id)
        if user is None:
            return _not_authenticated(request)

        return success_response(request_id_of(request), user=user.public())

    @router.post("/logout")
    def logout(request: Request, response: Response):
        """Logout - revoke session and clear cookie."""
        token = extract_token(request)
        if token:
            auth_service.logout(token)

        response.delete_cookie(key=SESSION_COOKIE)

        return success_response(request_id_of(request), message="Logged out successfully")

    @router.get("/me")
    def me(request: Request):
        """Owner identity the invoice routes will use for this request."""
        return success_response(
            request_id_of(request),
            ownerId=str(get_current_owner_id()),
            anonymous=is_anonymous(),
        )

    return router
