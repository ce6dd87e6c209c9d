"""Ledger store contract shared by the durable and in-memory backends."""

from enum import Enum
from typing import Any, Protocol
from uuid import UUID

from core.models import Invoice


class Source(str, Enum):
    """Which backend satisfied a request. Reported to API callers."""

    DATABASE = "database"
    MOCK = "mock"


class LedgerStore(Protocol):
    """
    Persistence for invoices, scoped by owner.

    Implementations raise InvoiceNotFoundError for ids the owner does not
    have and LedgerUnavailableError when the backend itself fails.
    """

    source: Source

    def ping(self) -> None:
        """Raise LedgerUnavailableError if the backend cannot serve requests."""
        ...

    def list(self, owner_id: UUID) -> list[Invoice]:
        """Owner's invoices, newest created_at first."""
        ...

    def latest(self, owner_id: UUID) -> Invoice | None:
        """Owner's most recently created invoice, if any."""
        ...

    def get(self, owner_id: UUID, invoice_id: UUID) -> Invoice:
        ...

    def insert(self, invoice: Invoice) -> Invoice:
        ...

    def update(self, owner_id: UUID, invoice_id: UUID, changes: dict[str, Any]) -> Invoice:
        """Apply field-name keyed changes, return the stored result."""
        ...

    def delete(self, owner_id: UUID, invoice_id: UUID) -> Invoice:
        """Hard delete, return the record as it was."""
        ...
