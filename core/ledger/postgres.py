"""
Durable invoice ledger backed by PostgreSQL.

Parties and line items live in JSONB columns; money in NUMERIC(12,2).
Every driver error is reported as LedgerUnavailableError so the invoice
service can fail over to the in-memory ledger. See schema.sql.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any
from uuid import UUID

import psycopg2
from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from core.exceptions import InvoiceNotFoundError, LedgerUnavailableError
from core.ledger.base import Source
from core.models import Invoice, WireModel

logger = logging.getLogger(__name__)

COLUMNS = (
    "id", "invoice_number", "sender", "recipient", "date", "due_date",
    "items", "subtotal", "tax_rate", "tax_amount", "total", "status",
    "notes", "created_by", "created_at", "updated_at",
)

# Columns an update may touch. id, number and ownership are fixed at creation.
UPDATABLE_COLUMNS = frozenset(COLUMNS) - {"id", "invoice_number", "created_by", "created_at"}


def _to_db(value: Any) -> Any:
    """Adapt model values to psycopg2 parameters."""
    if isinstance(value, WireModel):
        return Json(value.model_dump(mode="json"))
    if isinstance(value, list):
        return Json([v.model_dump(mode="json") if isinstance(v, WireModel) else v for v in value])
    if isinstance(value, Enum):
        return value.value
    return value


@contextmanager
def _translate_errors(operation: str):
    try:
        yield
    except psycopg2.Error as exc:
        logger.warning(f"Database {operation} failed: {exc}")
        raise LedgerUnavailableError(f"Database {operation} failed") from exc


class PostgresLedger:
    """LedgerStore over the invoices table."""

    source = Source.DATABASE

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def ping(self) -> None:
        with _translate_errors("ping"):
            self.postgres.ping()

    def list(self, owner_id: UUID) -> list[Invoice]:
        with _translate_errors("list"):
            rows = self.postgres.execute(
                """
                SELECT * FROM invoices
                WHERE created_by = %s
                ORDER BY created_at DESC
                """,
                (owner_id,)
            )

        return [Invoice.model_validate(row) for row in rows]

    def latest(self, owner_id: UUID) -> Invoice | None:
        with _translate_errors("latest"):
            row = self.postgres.execute_single(
                """
                SELECT * FROM invoices
                WHERE created_by = %s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (owner_id,)
            )

        if row is None:
            return None

        return Invoice.model_validate(row)

    def get(self, owner_id: UUID, invoice_id: UUID) -> Invoice:
        with _translate_errors("get"):
            row = self.postgres.execute_single(
                "SELECT * FROM invoices WHERE id = %s AND created_by = %s",
                (invoice_id, owner_id)
            )

        if row is None:
            raise InvoiceNotFoundError(invoice_id)

        return Invoice.model_validate(row)

    def insert(self, invoice: Invoice) -> Invoice:
        placeholders = ", ".join(["%s"] * len(COLUMNS))
        params = tuple(_to_db(getattr(invoice, column)) for column in COLUMNS)

        with _translate_errors("insert"):
            row = self.postgres.execute_returning(
                f"""
                INSERT INTO invoices ({", ".join(COLUMNS)})
                VALUES ({placeholders})
                RETURNING *
                """,
                params
            )[0]

        return Invoice.model_validate(row)

    def update(self, owner_id: UUID, invoice_id: UUID, changes: dict[str, Any]) -> Invoice:
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update invoice fields: {', '.join(sorted(unknown))}")

        if not changes:
            return self.get(owner_id, invoice_id)

        assignments = ", ".join(f"{column} = %s" for column in changes)
        params = tuple(_to_db(value) for value in changes.values()) + (invoice_id, owner_id)

        with _translate_errors("update"):
            rows = self.postgres.execute_returning(
                f"""
                UPDATE invoices
                SET {assignments}
                WHERE id = %s AND created_by = %s
                RETURNING *
                """,
                params
            )

        if not rows:
            raise InvoiceNotFoundError(invoice_id)

        return Invoice.model_validate(rows[0])

    def delete(self, owner_id: UUID, invoice_id: UUID) -> Invoice:
        with _translate_errors("delete"):
            rows = self.postgres.execute_returning(
                "DELETE FROM invoices WHERE id = %s AND created_by = %s RETURNING *",
                (invoice_id, owner_id)
            )

        if not rows:
            raise InvoiceNotFoundError(invoice_id)

        return Invoice.model_validate(rows[0])
