"""Core domain models."""

from core.models.money import MAX_AMOUNT, Money, TaxRate, to_currency, to_tax_rate
from core.models.invoice import (
    Invoice,
    InvoiceDraft,
    InvoiceStats,
    InvoiceStatus,
    InvoiceUpdate,
    LineItem,
    Party,
    StatusUpdate,
    WireModel,
)

__all__ = [
    # Money
    "MAX_AMOUNT", "Money", "TaxRate", "to_currency", "to_tax_rate",
    # Invoice
    "Invoice", "InvoiceDraft", "InvoiceUpdate", "InvoiceStatus", "InvoiceStats",
    "StatusUpdate", "LineItem", "Party", "WireModel",
]
