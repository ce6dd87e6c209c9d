"""
Invoice service: create, read, update, delete, status changes, statistics
and PDF rendering.

Every operation runs against the durable ledger first. If the durable ledger
is unreachable, fails, or does not have the invoice, the same operation is
retried once against the in-memory ledger. Results carry the source that
served them.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Generic, TypeVar
from uuid import UUID, uuid4

from core.computation import Totals, compute_totals, next_invoice_number
from core.config import LedgerConfig
from core.exceptions import (
    InvoiceNotFoundError,
    InvoiceValidationError,
    LedgerUnavailableError,
)
from core.ledger.base import LedgerStore, Source
from core.models import (
    MAX_AMOUNT,
    Invoice,
    InvoiceDraft,
    InvoiceStats,
    InvoiceStatus,
    InvoiceUpdate,
    LineItem,
)
from core.rendering import render_invoice_pdf as render_pdf
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Sourced(Generic[T]):
    """An operation result tagged with the backend that produced it."""

    value: T
    source: Source


class InvoiceService:
    """Service for invoice operations."""

    def __init__(
        self,
        durable: LedgerStore | None,
        fallback: LedgerStore,
        config: LedgerConfig | None = None,
    ):
        self.durable = durable
        self.fallback = fallback
        self.config = config or LedgerConfig()

    def _run(self, operation: str, action: Callable[[LedgerStore], T]) -> Sourced[T]:
        """
        Run action on the durable ledger, or on the fallback if that fails.

        Only one hop: errors raised by the fallback propagate.
        """
        if self.durable is not None:
            try:
                self.durable.ping()
                return Sourced(action(self.durable), self.durable.source)
            except LedgerUnavailableError as exc:
                logger.warning(f"{operation}: durable ledger unavailable ({exc}), using fallback")
            except InvoiceNotFoundError as exc:
                logger.info(f"{operation}: {exc} in durable ledger, checking fallback")

        return Sourced(action(self.fallback), self.fallback.source)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_invoices(self, owner_id: UUID) -> Sourced[list[Invoice]]:
        """Owner's invoices, newest first."""
        return self._run("list", lambda store: store.list(owner_id))

    def get_invoice(self, owner_id: UUID, invoice_id: UUID) -> Sourced[Invoice]:
        """
        Get invoice by ID.

        Raises:
            InvoiceNotFoundError: If neither ledger has it for this owner
        """
        return self._run("get", lambda store: store.get(owner_id, invoice_id))

    def get_stats(self, owner_id: UUID) -> Sourced[InvoiceStats]:
        """Counts by status plus revenue over all of the owner's invoices."""
        listed = self.list_invoices(owner_id)
        invoices = listed.value

        counts = {status: 0 for status in InvoiceStatus}
        for invoice in invoices:
            counts[invoice.status] += 1

        stats = InvoiceStats(
            total_invoices=len(invoices),
            total_revenue=sum((invoice.total for invoice in invoices), Decimal("0")),
            paid_invoices=counts[InvoiceStatus.PAID],
            draft_invoices=counts[InvoiceStatus.DRAFT],
            sent_invoices=counts[InvoiceStatus.SENT],
            overdue_invoices=counts[InvoiceStatus.OVERDUE],
            pending_invoices=counts[InvoiceStatus.DRAFT] + counts[InvoiceStatus.SENT],
        )
        return Sourced(stats, listed.source)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _validate_items(self, items: list[LineItem]) -> None:
        if not items:
            raise InvoiceValidationError("Invoice must contain at least one item")
        for position, item in enumerate(items, start=1):
            if not item.description.strip():
                raise InvoiceValidationError(f"Item {position} is missing a description")

    def _compute_totals(self, items: list[LineItem], tax_rate: Decimal) -> Totals:
        totals = compute_totals(items, tax_rate)
        if totals.total > MAX_AMOUNT:
            raise InvoiceValidationError(f"Invoice total {totals.total} exceeds the maximum of {MAX_AMOUNT}")
        return totals

    def create_invoice(self, owner_id: UUID, draft: InvoiceDraft) -> Sourced[Invoice]:
        """
        Create an invoice with computed totals and the next invoice number.

        Args:
            owner_id: Owning identity
            draft: Parties, items, tax rate and optional fields

        Returns:
            The stored invoice

        Raises:
            InvoiceValidationError: If items are missing or incomplete, or the
                total exceeds what the ledger can store
        """
        self._validate_items(draft.items)

        tax_rate = draft.tax_rate if draft.tax_rate is not None else self.config.default_tax_rate
        totals = self._compute_totals(draft.items, tax_rate)

        def insert(store: LedgerStore) -> Invoice:
            latest = store.latest(owner_id)
            now = now_utc()
            invoice = Invoice(
                id=uuid4(),
                invoice_number=next_invoice_number(
                    latest.invoice_number if latest else None,
                    self.config.invoice_number_width,
                ),
                sender=draft.sender or self.config.company,
                recipient=draft.recipient,
                date=draft.date or now,
                due_date=draft.due_date,
                items=totals.items,
                subtotal=totals.subtotal,
                tax_rate=tax_rate,
                tax_amount=totals.tax_amount,
                total=totals.total,
                status=draft.status,
                notes=draft.notes,
                created_by=owner_id,
                created_at=now,
                updated_at=now,
            )
            return store.insert(invoice)

        created = self._run("create", insert)
        logger.info(f"Invoice {created.value.invoice_number} created ({created.source.value})")
        return created

    def update_invoice(self, owner_id: UUID, invoice_id: UUID, patch: InvoiceUpdate) -> Sourced[Invoice]:
        """
        Update an invoice.

        Totals are recomputed when the patch carries items or a tax rate;
        otherwise they are left as stored. updated_at always moves.

        Raises:
            InvoiceNotFoundError: If the invoice does not exist for this owner
            InvoiceValidationError: If the patch carries an empty item list or
                pushes the total past MAX_AMOUNT
        """
        fields = patch.model_dump(exclude_unset=True)
        if "items" in fields:
            self._validate_items(patch.items or [])

        changes = {name: getattr(patch, name) for name in fields}
        # Explicit nulls are only meaningful for optional fields
        for required in ("sender", "recipient", "date", "status", "tax_rate"):
            if required in changes and changes[required] is None:
                raise InvoiceValidationError(f"'{required}' cannot be null")

        def apply(store: LedgerStore) -> Invoice:
            current = store.get(owner_id, invoice_id)
            values = dict(changes)
            if "items" in values or "tax_rate" in values:
                tax_rate = values.get("tax_rate", current.tax_rate)
                totals = self._compute_totals(values.get("items", current.items), tax_rate)
                values.update(
                    items=totals.items,
                    subtotal=totals.subtotal,
                    tax_amount=totals.tax_amount,
                    total=totals.total,
                )
            values["updated_at"] = now_utc()
            return store.update(owner_id, invoice_id, values)

        return self._run("update", apply)

    def set_status(self, owner_id: UUID, invoice_id: UUID, status: str | InvoiceStatus) -> Sourced[Invoice]:
        """
        Change only the status (and updated_at).

        Raises:
            InvoiceValidationError: If status is not draft/sent/paid/overdue
            InvoiceNotFoundError: If the invoice does not exist for this owner
        """
        try:
            new_status = InvoiceStatus(status)
        except ValueError:
            valid = ", ".join(s.value for s in InvoiceStatus)
            raise InvoiceValidationError(f"Invalid status '{status}'. Valid statuses: {valid}")

        return self._run(
            "set_status",
            lambda store: store.update(
                owner_id, invoice_id, {"status": new_status, "updated_at": now_utc()}
            ),
        )

    def delete_invoice(self, owner_id: UUID, invoice_id: UUID) -> Sourced[Invoice]:
        """
        Hard delete.

        Returns:
            The invoice as it was before deletion

        Raises:
            InvoiceNotFoundError: If the invoice does not exist for this owner
        """
        deleted = self._run("delete", lambda store: store.delete(owner_id, invoice_id))
        logger.info(f"Invoice {deleted.value.invoice_number} deleted ({deleted.source.value})")
        return deleted

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def render_invoice_pdf(self, owner_id: UUID, invoice_id: UUID) -> tuple[Invoice, Sourced[bytes]]:
        """
        Locate and fully render an invoice PDF.

        The invoice is looked up first so a missing id fails before any
        rendering; the document is complete in memory before it is returned.

        Raises:
            InvoiceNotFoundError: If the invoice does not exist for this owner
            DocumentRenderError: If layout or PDF output fails
        """
        found = self.get_invoice(owner_id, invoice_id)
        document = render_pdf(found.value, self.config.currency_symbol)
        return found.value, Sourced(document, found.source)
