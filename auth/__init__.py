"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    InvalidCredentialsError,
    RateLimitedError,
    SessionExpiredError,
    UserInactiveError,
)
from auth.types import (
    Role,
    User,
    Session,
    LoginRequest,
    AuthenticatedUser,
)
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.passwords import hash_password, verify_password
from auth.rate_limiter import RateLimiter
from auth.session import SessionManager
from auth.service import AuthService
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router
