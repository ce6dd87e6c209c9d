"""Shared test fixtures for the invoicing test suite.

No live Postgres, Valkey or Vault is needed: the durable ledger runs against
a mocked PostgresClient and sessions against an in-process Valkey double.
"""

import json
from datetime import timedelta
from unittest.mock import Mock

import pytest
from decimal import Decimal
from uuid import UUID
from pathlib import Path

from dotenv import load_dotenv
from starlette.testclient import TestClient

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env")

# Reset vault client singleton to pick up env vars
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from api.app import AppServices, create_app
from auth.service import AuthService
from auth.session import SessionManager
from auth.types import Session
from core.config import LedgerConfig
from core.exceptions import LedgerUnavailableError
from core.ledger import MemoryLedger, PostgresLedger, Source
from core.models import InvoiceDraft, LineItem, Party
from core.services.invoice_service import InvoiceService
from utils.timezone import now_utc
from utils.user_context import owner_context, clear_current_owner_id


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

# Primary test owner - use for single-owner tests
TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "testuser@example.com"

# Secondary test owner - use for isolation tests
TEST_USER_B_ID = UUID("00000000-0000-0000-0000-000000000002")


# =============================================================================
# OWNER CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_owner_context():
    """Ensure clean owner context before and after each test."""
    clear_current_owner_id()
    yield
    clear_current_owner_id()


@pytest.fixture
def test_user_id() -> UUID:
    """The primary test owner's ID."""
    return TEST_USER_ID


@pytest.fixture
def test_user_b_id() -> UUID:
    """The secondary test owner's ID (for isolation tests)."""
    return TEST_USER_B_ID


@pytest.fixture
def as_test_user(test_user_id):
    """Act as the primary test owner."""
    with owner_context(test_user_id):
        yield test_user_id


# =============================================================================
# INVOICE FIXTURES
# =============================================================================


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig(seed_example_invoice=False)


@pytest.fixture
def make_draft():
    """Factory for InvoiceDraft with the reference two-line invoice by default."""

    def _make(**overrides) -> InvoiceDraft:
        values = {
            "recipient": Party(name="Acme Corp", city="Dhaka", email="billing@acme.example"),
            "items": [
                LineItem(description="Website Development", quantity=10, price=Decimal("100")),
                LineItem(description="Hosting", quantity=5, price=Decimal("150")),
            ],
            "tax_rate": Decimal("10"),
        }
        values.update(overrides)
        return InvoiceDraft(**values)

    return _make


@pytest.fixture
def draft_payload() -> dict:
    """Wire-format create body (camelCase, 'from'/'to')."""
    return {
        "to": {"name": "Acme Corp", "city": "Dhaka"},
        "items": [
            {"description": "Website Development", "quantity": 10, "price": 100},
            {"description": "Hosting", "quantity": 5, "price": 150},
        ],
        "taxRate": 10,
        "notes": "Net 30",
    }


# =============================================================================
# VALKEY DOUBLE
# =============================================================================


class InMemoryValkey:
    """Dict-backed stand-in for ValkeyClient. TTLs are recorded, not enforced."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def ping(self) -> bool:
        return True

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value, expire_seconds=None):
        self.values[key] = value
        if expire_seconds is not None:
            self.ttls[key] = expire_seconds

    def delete(self, key):
        self.ttls.pop(key, None)
        return self.values.pop(key, None) is not None

    def ttl(self, key):
        if key not in self.values:
            return -2
        return self.ttls.get(key, -1)

    def incr(self, key):
        self.values[key] = str(int(self.values.get(key, "0")) + 1)
        return int(self.values[key])

    def expire(self, key, seconds):
        if key not in self.values:
            return False
        self.ttls[key] = seconds
        return True

    def set_json(self, key, value, expire_seconds=None):
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key):
        value = self.get(key)
        return None if value is None else json.loads(value)


@pytest.fixture
def valkey():
    return InMemoryValkey()


# =============================================================================
# LEDGER & SERVICE FIXTURES
# =============================================================================


class DurableMemoryLedger(MemoryLedger):
    """In-memory store reporting itself as the database."""

    source = Source.DATABASE


@pytest.fixture
def durable():
    return DurableMemoryLedger()


@pytest.fixture
def fallback():
    return MemoryLedger()


@pytest.fixture
def invoice_service(durable, fallback, ledger_config):
    return InvoiceService(durable, fallback, ledger_config)


@pytest.fixture
def degraded_invoice_service(fallback, ledger_config):
    """Service whose database is unreachable."""
    unreachable = Mock(spec=PostgresLedger)
    unreachable.source = Source.DATABASE
    unreachable.ping.side_effect = LedgerUnavailableError("connection refused")
    return InvoiceService(unreachable, fallback, ledger_config)


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def mock_session_manager(test_user_id):
    now = now_utc()
    mock = Mock(spec=SessionManager)
    mock.validate_session.return_value = Session(
        token="test-token",
        user_id=test_user_id,
        created_at=now,
        expires_at=now + timedelta(hours=24),
        last_activity_at=now,
    )
    return mock


@pytest.fixture
def mock_auth_service():
    return Mock(spec=AuthService)


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(invoice_service):
    """App without login: every request is the anonymous owner."""
    return create_app(AppServices(invoice_service=invoice_service))


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def degraded_client(degraded_invoice_service):
    app = create_app(AppServices(invoice_service=degraded_invoice_service))
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_app(invoice_service, mock_session_manager, mock_auth_service):
    """App with login enabled and mocked session/auth services."""
    return create_app(AppServices(
        invoice_service=invoice_service,
        auth_service=mock_auth_service,
        session_manager=mock_session_manager,
    ))


@pytest.fixture
def authed_client(auth_app):
    """Client presenting a bearer token the mocked SessionManager accepts."""
    c = TestClient(auth_app, raise_server_exceptions=False)
    c.headers["Authorization"] = "Bearer test-token"
    return c


@pytest.fixture
def anon_client(auth_app):
    """Client with login enabled but no credentials."""
    return TestClient(auth_app, raise_server_exceptions=False)
