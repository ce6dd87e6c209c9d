"""
In-process invoice ledger.

Used when the database is unreachable. Volatile: contents are lost on
restart. Records are copied on the way in and out so callers never hold a
reference into the store.
"""

import logging
import threading
from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID, uuid4

from core.computation import compute_totals, format_invoice_number
from core.exceptions import InvoiceNotFoundError
from core.ledger.base import Source
from core.models import Invoice, InvoiceStatus, LineItem, Party
from utils.timezone import now_utc
from utils.user_context import ANONYMOUS_OWNER_ID

logger = logging.getLogger(__name__)


class MemoryLedger:
    """Thread-safe list of invoices implementing LedgerStore."""

    source = Source.MOCK

    def __init__(self, invoices: Iterable[Invoice] = ()):
        self._lock = threading.RLock()
        self._invoices: list[Invoice] = [inv.model_copy(deep=True) for inv in invoices]

    def ping(self) -> None:
        return None

    def _index_of(self, owner_id: UUID, invoice_id: UUID) -> int:
        for index, invoice in enumerate(self._invoices):
            if invoice.id == invoice_id and invoice.created_by == owner_id:
                return index
        raise InvoiceNotFoundError(invoice_id)

    def list(self, owner_id: UUID) -> list[Invoice]:
        with self._lock:
            owned = [inv for inv in reversed(self._invoices) if inv.created_by == owner_id]
            # Stable sort: ties keep the later insert first
            owned.sort(key=lambda inv: inv.created_at, reverse=True)
            return [inv.model_copy(deep=True) for inv in owned]

    def latest(self, owner_id: UUID) -> Invoice | None:
        invoices = self.list(owner_id)
        return invoices[0] if invoices else None

    def get(self, owner_id: UUID, invoice_id: UUID) -> Invoice:
        with self._lock:
            return self._invoices[self._index_of(owner_id, invoice_id)].model_copy(deep=True)

    def insert(self, invoice: Invoice) -> Invoice:
        with self._lock:
            self._invoices.append(invoice.model_copy(deep=True))
        return invoice.model_copy(deep=True)

    def update(self, owner_id: UUID, invoice_id: UUID, changes: dict[str, Any]) -> Invoice:
        with self._lock:
            index = self._index_of(owner_id, invoice_id)
            current = self._invoices[index]
            updated = Invoice.model_validate({**current.model_dump(), **changes})
            self._invoices[index] = updated
            return updated.model_copy(deep=True)

    def delete(self, owner_id: UUID, invoice_id: UUID) -> Invoice:
        with self._lock:
            return self._invoices.pop(self._index_of(owner_id, invoice_id))

    def __len__(self) -> int:
        with self._lock:
            return len(self._invoices)


def example_invoice(owner_id: UUID = ANONYMOUS_OWNER_ID, sender: Party | None = None) -> Invoice:
    """The demo invoice the fallback ledger starts with."""
    tax_rate = Decimal("10")
    totals = compute_totals(
        [
            LineItem(description="Website Development", quantity=10, price=Decimal("100")),
            LineItem(description="Hosting (monthly)", quantity=5, price=Decimal("150")),
        ],
        tax_rate,
    )
    now = now_utc()

    return Invoice(
        id=uuid4(),
        invoice_number=format_invoice_number(1),
        sender=sender or Party(name="VQS"),
        recipient=Party(
            name="Example Client",
            address="12 Sample Road",
            city="Dhaka",
            email="client@example.com",
        ),
        date=now,
        due_date=None,
        items=totals.items,
        subtotal=totals.subtotal,
        tax_rate=tax_rate,
        tax_amount=totals.tax_amount,
        total=totals.total,
        status=InvoiceStatus.DRAFT,
        notes="Example invoice served while the database is unavailable.",
        created_by=owner_id,
        created_at=now,
        updated_at=now,
    )


def seeded_memory_ledger(sender: Party | None = None) -> MemoryLedger:
    ledger = MemoryLedger([example_invoice(sender=sender)])
    logger.info("In-memory ledger seeded with example invoice")
    return ledger
