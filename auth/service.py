"""Authentication service - password login and session lifecycle."""

import logging
from uuid import UUID

from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.passwords import hash_password, verify_password
from auth.rate_limiter import RateLimiter
from auth.session import SessionManager
from auth.types import AuthenticatedUser, Role, User
from auth.exceptions import InvalidCredentialsError, UserInactiveError

logger = logging.getLogger(__name__)


class AuthService:
    """Orchestrates password authentication.

    Handles:
    - Login (rate limited per email)
    - Logout
    - Admin account bootstrap
    """

    def __init__(
        self,
        config: AuthConfig,
        auth_db: AuthDatabase,
        session_manager: SessionManager,
        rate_limiter: RateLimiter,
    ):
        self._config = config
        self._auth_db = auth_db
        self._session_manager = session_manager
        self._rate_limiter = rate_limiter

    def login(self, email: str, password: str, ip_address: str | None = None) -> AuthenticatedUser:
        """Verify credentials and create a session.

        Flow:
        1. Count the attempt against the per-email rate limit
        2. Look up user and stored hash
        3. Verify password
        4. Check user is active
        5. Create session, update last_login, reset rate limit

        Raises:
            RateLimitedError: If too many attempts for this email.
            InvalidCredentialsError: If email unknown or password wrong.
            UserInactiveError: If user account is deactivated.
        """
        email = email.lower().strip()

        self._rate_limiter.check_rate_limit(email)

        credentials = self._auth_db.get_credentials(email)
        if credentials is None or not verify_password(password, credentials[1]):
            remaining = self._rate_limiter.get_remaining_attempts(email)
            logger.warning(f"Failed login for {email} from {ip_address} ({remaining} attempts left)")
            raise InvalidCredentialsError("Invalid email or password")

        user, _ = credentials
        if not user.is_active:
            logger.warning(f"Login refused for inactive user {user.id}")
            raise UserInactiveError("User account is deactivated")

        session = self._session_manager.create_session(user.id)
        self._auth_db.update_last_login(user.id)
        self._rate_limiter.reset_rate_limit(email)

        logger.info(f"User {user.id} logged in from {ip_address}")
        return AuthenticatedUser(user=user, session=session)

    def logout(self, session_token: str) -> None:
        """Revoke session (logout).

        Safe to call with invalid token.
        """
        self._session_manager.revoke_session(session_token)
        logger.info("Session revoked")

    def get_user(self, user_id: UUID) -> User | None:
        return self._auth_db.get_user_by_id(user_id)

    def ensure_admin(self, email: str, password: str) -> User:
        """Create the admin account if no user has this email yet.

        An existing account is left untouched, including its password.
        """
        existing = self._auth_db.get_user_by_email(email)
        if existing is not None:
            return existing

        user = self._auth_db.create_user(email, hash_password(password), role=Role.ADMIN)
        logger.info(f"Created admin user {user.id}")
        return user
