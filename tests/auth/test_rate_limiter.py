"""Tests for RateLimiter - login attempt throttling."""

import pytest

from auth.rate_limiter import RateLimiter
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


@pytest.fixture
def config():
    """Test config with low attempts for faster tests."""
    return AuthConfig(
        rate_limit_attempts=3,
        rate_limit_window_minutes=5,
    )


@pytest.fixture
def rate_limiter(valkey, config):
    return RateLimiter(valkey, config)


class TestCheckRateLimit:
    """Test rate limit checking and incrementing."""

    def test_within_limit_passes(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("allowed@example.com")

    def test_exceeding_limit_raises(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("blocked@example.com")

        with pytest.raises(RateLimitedError) as exc_info:
            rate_limiter.check_rate_limit("blocked@example.com")

        assert exc_info.value.retry_after_seconds == 300

    def test_email_is_case_insensitive(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("Mixed@Example.com")

        with pytest.raises(RateLimitedError):
            rate_limiter.check_rate_limit("mixed@example.com")

    def test_each_attempt_resets_window(self, rate_limiter, valkey):
        rate_limiter.check_rate_limit("slide@example.com")

        assert valkey.ttl("invoicing:ratelimit:login:slide@example.com") == 300

    def test_separate_emails_tracked_separately(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("one@example.com")

        rate_limiter.check_rate_limit("two@example.com")


class TestResetAndRemaining:

    def test_reset_clears_counter(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("reset@example.com")

        rate_limiter.reset_rate_limit("reset@example.com")

        rate_limiter.check_rate_limit("reset@example.com")

    def test_remaining_attempts(self, rate_limiter, config):
        assert rate_limiter.get_remaining_attempts("new@example.com") == 3

        rate_limiter.check_rate_limit("new@example.com")

        assert rate_limiter.get_remaining_attempts("new@example.com") == 2
