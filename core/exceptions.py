"""Typed exceptions for invoice operations.

Validation and not-found errors subclass ValueError so the generic
ValueError handler in api.errors still classifies them correctly.
"""

from uuid import UUID


class InvoiceValidationError(ValueError):
    """Invoice payload violates a business rule (empty items, bad status, ...)."""


class InvoiceNotFoundError(ValueError):
    """Invoice does not exist for this owner."""

    def __init__(self, invoice_id: UUID | str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} not found")


class LedgerUnavailableError(Exception):
    """
    Durable ledger is unreachable or failed mid-operation.

    Never surfaced to HTTP callers on its own: the invoice service
    recovers by retrying against the in-memory ledger.
    """


class DocumentRenderError(Exception):
    """PDF rendering failed before any output was produced."""
