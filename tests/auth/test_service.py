"""Tests for AuthService - login, logout and admin bootstrap."""

from unittest.mock import Mock
from uuid import uuid4

import pytest

from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.exceptions import (
    InvalidCredentialsError,
    RateLimitedError,
    SessionExpiredError,
    UserInactiveError,
)
from auth.passwords import hash_password
from auth.rate_limiter import RateLimiter
from auth.service import AuthService
from auth.session import SessionManager
from auth.types import Role, User
from utils.timezone import now_utc


PASSWORD = "correct horse battery staple"


@pytest.fixture
def config():
    return AuthConfig(session_expiry_hours=1, rate_limit_attempts=3, rate_limit_window_minutes=5)


@pytest.fixture
def user():
    return User(id=uuid4(), email="owner@example.com", role=Role.USER, created_at=now_utc())


@pytest.fixture
def auth_db(user):
    """Mock AuthDatabase knowing exactly one user."""
    db = Mock(spec=AuthDatabase)
    hashed = hash_password(PASSWORD)
    db.get_credentials.side_effect = lambda email: (user, hashed) if email == user.email else None
    db.get_user_by_id.side_effect = lambda user_id: user if user_id == user.id else None
    return db


@pytest.fixture
def auth_service(config, auth_db, valkey):
    """AuthService with mocked DB and in-process Valkey."""
    return AuthService(
        config=config,
        auth_db=auth_db,
        session_manager=SessionManager(valkey, config),
        rate_limiter=RateLimiter(valkey, config),
    )


class TestLogin:

    def test_success_creates_session(self, auth_service, auth_db, user):
        result = auth_service.login("owner@example.com", PASSWORD)

        assert result.user.id == user.id
        assert result.session.user_id == user.id
        auth_db.update_last_login.assert_called_once_with(user.id)

    def test_email_normalized(self, auth_service, user):
        result = auth_service.login("  Owner@Example.com ", PASSWORD)

        assert result.user.id == user.id

    def test_wrong_password(self, auth_service):
        with pytest.raises(InvalidCredentialsError):
            auth_service.login("owner@example.com", "nope")

    def test_unknown_email(self, auth_service):
        with pytest.raises(InvalidCredentialsError):
            auth_service.login("ghost@example.com", PASSWORD)

    def test_inactive_user(self, auth_service, user):
        user.is_active = False

        with pytest.raises(UserInactiveError):
            auth_service.login("owner@example.com", PASSWORD)

    def test_rate_limited_after_failures(self, auth_service, config):
        for _ in range(config.rate_limit_attempts):
            with pytest.raises(InvalidCredentialsError):
                auth_service.login("owner@example.com", "nope")

        with pytest.raises(RateLimitedError):
            auth_service.login("owner@example.com", PASSWORD)

    def test_success_resets_rate_limit(self, auth_service, config):
        for _ in range(config.rate_limit_attempts - 1):
            with pytest.raises(InvalidCredentialsError):
                auth_service.login("owner@example.com", "nope")

        auth_service.login("owner@example.com", PASSWORD)

        for _ in range(config.rate_limit_attempts - 1):
            with pytest.raises(InvalidCredentialsError):
                auth_service.login("owner@example.com", "nope")


class TestSessions:

    @pytest.fixture
    def sessions(self, valkey, config):
        """Reads the same Valkey the service writes to."""
        return SessionManager(valkey, config)

    def test_login_session_is_valid(self, auth_service, sessions, user):
        token = auth_service.login("owner@example.com", PASSWORD).session.token

        assert sessions.validate_session(token).user_id == user.id

    def test_logout_revokes(self, auth_service, sessions):
        token = auth_service.login("owner@example.com", PASSWORD).session.token

        auth_service.logout(token)

        with pytest.raises(SessionExpiredError):
            sessions.validate_session(token)

    def test_logout_unknown_token_is_safe(self, auth_service):
        auth_service.logout("never-issued")


class TestEnsureAdmin:

    def test_creates_admin_when_missing(self, auth_service, auth_db):
        auth_db.get_user_by_email.return_value = None
        auth_db.create_user.return_value = User(
            id=uuid4(), email="admin@example.com", role=Role.ADMIN, created_at=now_utc()
        )

        admin = auth_service.ensure_admin("admin@example.com", "s3cret")

        assert admin.role == Role.ADMIN
        email, password_hash = auth_db.create_user.call_args.args
        assert email == "admin@example.com"
        assert password_hash != "s3cret"
        assert auth_db.create_user.call_args.kwargs["role"] == Role.ADMIN

    def test_existing_account_untouched(self, auth_service, auth_db, user):
        auth_db.get_user_by_email.return_value = user

        assert auth_service.ensure_admin(user.email, "whatever") == user
        auth_db.create_user.assert_not_called()
