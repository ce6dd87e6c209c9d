"""Authentication configuration."""

import os

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    All durations are in their natural units (minutes for short durations,
    hours for longer ones) to make configuration intuitive.
    """

    # Session settings
    session_expiry_hours: int = Field(
        default=24,
        description="Session lifetime in hours",
        ge=1,
        le=2160,
    )
    session_extend_on_activity: bool = Field(
        default=True,
        description="Whether to extend session expiry on activity",
    )
    cookie_secure: bool = Field(
        default=True,
        description="Send the session cookie over HTTPS only",
    )

    # Rate limiting
    rate_limit_attempts: int = Field(
        default=5,
        description="Max failed login attempts per email per window",
        ge=1,
        le=20,
    )
    rate_limit_window_minutes: int = Field(
        default=15,
        description="Rate limit window duration",
        ge=1,
        le=60,
    )

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """Build config from INVOICING_AUTH_* environment variables."""
        values: dict = {}

        if hours := os.getenv("INVOICING_AUTH_SESSION_HOURS"):
            values["session_expiry_hours"] = int(hours)
        if secure := os.getenv("INVOICING_AUTH_COOKIE_SECURE"):
            values["cookie_secure"] = secure.lower() in ("1", "true", "yes")
        if attempts := os.getenv("INVOICING_AUTH_RATE_LIMIT_ATTEMPTS"):
            values["rate_limit_attempts"] = int(attempts)
        if window := os.getenv("INVOICING_AUTH_RATE_LIMIT_WINDOW_MINUTES"):
            values["rate_limit_window_minutes"] = int(window)

        return cls(**values)
