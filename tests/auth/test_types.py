"""Tests for auth/types.py - Pydantic models for auth domain."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from auth.types import LoginRequest, Role, User


class TestUserValidation:
    """Tests that User model rejects invalid data."""

    def test_rejects_invalid_email(self):
        with pytest.raises(ValidationError):
            User(
                id=uuid4(),
                email="not-an-email",
                created_at=datetime.now(timezone.utc),
            )

    def test_rejects_missing_id(self):
        with pytest.raises(ValidationError):
            User(
                email="test@example.com",
                created_at=datetime.now(timezone.utc),
            )

    def test_defaults(self):
        user = User(
            id=uuid4(),
            email="test@example.com",
            created_at=datetime.now(timezone.utc),
        )
        assert user.role == Role.USER
        assert user.is_active is True
        assert user.last_login_at is None

    def test_public_fields(self):
        user_id = uuid4()
        user = User(id=user_id, email="test@example.com", role="admin", created_at=datetime.now(timezone.utc))

        assert user.public() == {"id": str(user_id), "email": "test@example.com", "role": "admin"}


class TestLoginRequestValidation:

    def test_valid(self):
        request = LoginRequest(email="test@example.com", password="pw")
        assert request.email == "test@example.com"

    def test_rejects_empty_password(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="test@example.com", password="")

    def test_rejects_bad_email(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="nope", password="pw")
