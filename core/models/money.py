"""Fixed-point money types.

All amounts are Decimal quantized to cents. Rounding is banker's rounding
(ROUND_HALF_EVEN). JSON output renders amounts as plain numbers.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Annotated, Any

from pydantic import AfterValidator, Field, PlainSerializer

CENT = Decimal("0.01")

# Tax rates are stored as NUMERIC(7, 4).
RATE_STEP = Decimal("0.0001")

# Largest value a NUMERIC(12, 2) column holds.
MAX_AMOUNT = Decimal("9999999999.99")


def to_currency(value: Any) -> Decimal:
    """Quantize a number to cents using banker's rounding."""
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)
    except InvalidOperation:
        raise ValueError(f"Invalid monetary amount: {value!r}")


def to_tax_rate(value: Decimal) -> Decimal:
    """Quantize a percentage to the four decimal places the ledger keeps."""
    return value.quantize(RATE_STEP, rounding=ROUND_HALF_EVEN)


def _as_number(value: Decimal) -> float:
    return float(value)


Money = Annotated[
    Decimal,
    AfterValidator(to_currency),
    PlainSerializer(_as_number, return_type=float, when_used="json"),
]

# Percentage, 10 = 10%.
TaxRate = Annotated[
    Decimal,
    Field(ge=0, le=100),
    AfterValidator(to_tax_rate),
    PlainSerializer(_as_number, return_type=float, when_used="json"),
]
