"""
Invoice computation engine.

Pure functions: line totals, subtotal, tax and grand total, plus invoice
number sequencing. Nothing here touches storage.
"""

from dataclasses import dataclass
from decimal import Decimal

from core.models import LineItem, to_currency

INVOICE_NUMBER_PREFIX = "INV-"
DEFAULT_NUMBER_WIDTH = 4


@dataclass(frozen=True)
class Totals:
    """Result of compute_totals. items carry their recomputed totals."""

    items: list[LineItem]
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_totals(items: list[LineItem], tax_rate: Decimal) -> Totals:
    """
    Recompute every money field from quantities, prices and the tax rate.

    Caller-supplied item totals are ignored. Each line total and the tax
    amount are rounded to cents (banker's rounding); the subtotal and grand
    total are exact sums of already-rounded values.

    Args:
        items: Line items (their total field is overwritten)
        tax_rate: Percentage, 10 = 10%

    Returns:
        Totals with new LineItem instances
    """
    computed = [
        item.model_copy(update={"total": to_currency(item.quantity * item.price)})
        for item in items
    ]

    subtotal = to_currency(sum((item.total for item in computed), Decimal("0")))
    tax_amount = to_currency(subtotal * Decimal(tax_rate) / Decimal(100))

    return Totals(
        items=computed,
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def parse_invoice_sequence(invoice_number: str | None) -> int | None:
    """
    Extract the integer sequence from an invoice number.

    "INV-0042" -> 42. Returns None for missing or unparsable numbers.
    """
    if not invoice_number:
        return None
    try:
        return int(invoice_number.rsplit("-", 1)[-1])
    except ValueError:
        return None


def format_invoice_number(sequence: int, width: int = DEFAULT_NUMBER_WIDTH) -> str:
    return f"{INVOICE_NUMBER_PREFIX}{sequence:0{width}d}"


def next_invoice_number(latest_number: str | None, width: int = DEFAULT_NUMBER_WIDTH) -> str:
    """
    Next number after the owner's most recent invoice.

    Starts at 1 when there is no prior invoice or its number cannot be
    parsed. Not safe against concurrent creates for the same owner.
    """
    sequence = parse_invoice_sequence(latest_number)
    if sequence is None:
        return format_invoice_number(1, width)
    return format_invoice_number(sequence + 1, width)
