"""Tests for PostgresLedger against a mocked PostgresClient."""

from decimal import Decimal
from unittest.mock import Mock
from uuid import uuid4

import psycopg2
import pytest
from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from core.exceptions import InvoiceNotFoundError, LedgerUnavailableError
from core.ledger import PostgresLedger, Source, example_invoice
from core.models import InvoiceStatus


@pytest.fixture
def postgres():
    return Mock(spec=PostgresClient)


@pytest.fixture
def ledger(postgres):
    return PostgresLedger(postgres)


def row_for(invoice) -> dict:
    """What RealDictCursor + JSONB decoding hands back for an invoice."""
    row = invoice.model_dump()
    row["sender"] = invoice.sender.model_dump(mode="json")
    row["recipient"] = invoice.recipient.model_dump(mode="json")
    row["items"] = [item.model_dump(mode="json") for item in invoice.items]
    row["status"] = invoice.status.value
    return row


class TestReads:

    def test_source_is_database(self, ledger):
        assert ledger.source == Source.DATABASE

    def test_list_maps_rows(self, ledger, postgres, test_user_id):
        invoice = example_invoice(owner_id=test_user_id)
        postgres.execute.return_value = [row_for(invoice)]

        invoices = ledger.list(test_user_id)

        assert len(invoices) == 1
        assert invoices[0].id == invoice.id
        assert invoices[0].total == Decimal("1925.00")
        query, params = postgres.execute.call_args.args
        assert "ORDER BY created_at DESC" in query
        assert params == (test_user_id,)

    def test_get_scopes_by_owner(self, ledger, postgres, test_user_id):
        invoice = example_invoice(owner_id=test_user_id)
        postgres.execute_single.return_value = row_for(invoice)

        ledger.get(test_user_id, invoice.id)

        query, params = postgres.execute_single.call_args.args
        assert "created_by = %s" in query
        assert params == (invoice.id, test_user_id)

    def test_get_missing_raises_not_found(self, ledger, postgres, test_user_id):
        postgres.execute_single.return_value = None

        with pytest.raises(InvoiceNotFoundError):
            ledger.get(test_user_id, uuid4())

    def test_latest_none_when_empty(self, ledger, postgres, test_user_id):
        postgres.execute_single.return_value = None

        assert ledger.latest(test_user_id) is None


class TestWrites:

    def test_insert_adapts_json_columns(self, ledger, postgres, test_user_id):
        invoice = example_invoice(owner_id=test_user_id)
        postgres.execute_returning.return_value = [row_for(invoice)]

        stored = ledger.insert(invoice)

        assert stored.invoice_number == invoice.invoice_number
        query, params = postgres.execute_returning.call_args.args
        assert query.strip().startswith("INSERT INTO invoices")
        assert any(isinstance(p, Json) for p in params)
        assert "draft" in params

    def test_update_builds_set_clause(self, ledger, postgres, test_user_id):
        invoice = example_invoice(owner_id=test_user_id)
        postgres.execute_returning.return_value = [{**row_for(invoice), "status": "paid"}]

        updated = ledger.update(test_user_id, invoice.id, {"status": InvoiceStatus.PAID})

        assert updated.status == InvoiceStatus.PAID
        query, params = postgres.execute_returning.call_args.args
        assert "status = %s" in query
        assert params == ("paid", invoice.id, test_user_id)

    def test_update_rejects_fixed_columns(self, ledger, test_user_id):
        with pytest.raises(ValueError, match="invoice_number"):
            ledger.update(test_user_id, uuid4(), {"invoice_number": "INV-9"})

    def test_update_missing_raises_not_found(self, ledger, postgres, test_user_id):
        postgres.execute_returning.return_value = []

        with pytest.raises(InvoiceNotFoundError):
            ledger.update(test_user_id, uuid4(), {"notes": "x"})

    def test_delete_returns_deleted_row(self, ledger, postgres, test_user_id):
        invoice = example_invoice(owner_id=test_user_id)
        postgres.execute_returning.return_value = [row_for(invoice)]

        assert ledger.delete(test_user_id, invoice.id).id == invoice.id

    def test_delete_missing_raises_not_found(self, ledger, postgres, test_user_id):
        postgres.execute_returning.return_value = []

        with pytest.raises(InvoiceNotFoundError):
            ledger.delete(test_user_id, uuid4())


class TestDriverErrors:

    def test_ping_failure_is_unavailable(self, ledger, postgres):
        postgres.ping.side_effect = psycopg2.OperationalError("connection refused")

        with pytest.raises(LedgerUnavailableError):
            ledger.ping()

    def test_query_failure_is_unavailable(self, ledger, postgres, test_user_id):
        postgres.execute.side_effect = psycopg2.InterfaceError("connection already closed")

        with pytest.raises(LedgerUnavailableError):
            ledger.list(test_user_id)
