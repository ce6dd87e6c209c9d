"""Invoice domain models.

Money fields are Decimal cents (see core.models.money). Field names are
snake_case in Python and camelCase on the wire; the parties use the wire
names "from" and "to".
"""

from datetime import datetime
from enum import Enum
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.models.money import Money, TaxRate
from utils.timezone import to_utc


class InvoiceStatus(str, Enum):
    """Invoice status. Any status may be set from any other."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class WireModel(BaseModel):
    """Base model accepting either field names or camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict:
        """JSON-ready dict using wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)


class Party(WireModel):
    """Sender or recipient of an invoice."""

    name: str = Field(..., min_length=1, max_length=200)
    address: str | None = Field(None, max_length=500)
    city: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=254)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class LineItem(WireModel):
    """
    One row of an invoice.

    total is always recomputed server side; whatever the caller sends is
    discarded by the computation engine.
    """

    description: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(..., ge=1)
    price: Annotated[Money, Field(ge=0)]
    total: Money | None = None

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("description must not be blank")
        return value


# Datetimes are normalized to UTC; naive input is taken as UTC.
UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]


class InvoiceDraft(WireModel):
    """
    Data accepted when creating an invoice.

    subtotal/taxAmount/total and the invoice number are never taken from
    here; unknown keys (including those) are ignored.
    """

    sender: Party | None = Field(None, alias="from")
    recipient: Party = Field(..., alias="to")
    date: UtcDatetime | None = None
    due_date: UtcDatetime | None = None
    items: list[LineItem] = Field(default_factory=list)
    tax_rate: TaxRate | None = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: str | None = Field(None, max_length=2000)


class InvoiceUpdate(WireModel):
    """Fields that can be changed on an invoice. All optional."""

    sender: Party | None = Field(None, alias="from")
    recipient: Party | None = Field(None, alias="to")
    date: UtcDatetime | None = None
    due_date: UtcDatetime | None = None
    items: list[LineItem] | None = None
    tax_rate: TaxRate | None = None
    status: InvoiceStatus | None = None
    notes: str | None = Field(None, max_length=2000)


class StatusUpdate(BaseModel):
    """Body of a status patch. Validated against InvoiceStatus by the service."""

    status: str


class Invoice(WireModel):
    """Full invoice entity as stored."""

    id: UUID
    invoice_number: str
    sender: Party = Field(..., alias="from")
    recipient: Party = Field(..., alias="to")
    date: datetime
    due_date: datetime | None = None
    items: list[LineItem]
    subtotal: Money
    tax_rate: TaxRate
    tax_amount: Money
    total: Money
    status: InvoiceStatus
    notes: str | None = None
    created_by: UUID
    created_at: datetime
    updated_at: datetime


class InvoiceStats(WireModel):
    """Aggregates over one owner's invoices."""

    total_invoices: int
    total_revenue: Money
    paid_invoices: int
    draft_invoices: int
    sent_invoices: int
    overdue_invoices: int
    pending_invoices: int
