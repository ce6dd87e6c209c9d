"""Invoicing configuration."""

import os
from decimal import Decimal

from pydantic import BaseModel, Field

from core.models import Party, TaxRate


def _default_company() -> Party:
    return Party(
        name="VQS",
        address="256 Old Police Quarter",
        city="Feni 3900, Bangladesh",
    )


class LedgerConfig(BaseModel):
    """
    Invoicing behavior settings.

    Secrets (database URL, Valkey URL, admin credentials) are not here;
    they come from clients.vault_client.
    """

    default_tax_rate: TaxRate = Field(
        default=Decimal("0"),
        description="Tax percentage applied when a new invoice omits taxRate",
        ge=0,
        le=100,
    )
    invoice_number_width: int = Field(
        default=4,
        description="Zero padding of the INV-NNNN sequence",
        ge=1,
        le=12,
    )
    currency_symbol: str = Field(
        default="$",
        description="Prefix for amounts in rendered PDFs",
        max_length=5,
    )
    company: Party = Field(
        default_factory=_default_company,
        description="Sender used when an invoice is created without 'from'",
    )
    seed_example_invoice: bool = Field(
        default=True,
        description="Seed the in-memory ledger with one example invoice",
    )
    database_connect_timeout: int = Field(
        default=5,
        description="Seconds before a database connection attempt counts as unreachable",
        ge=1,
        le=60,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins",
    )

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Build config from INVOICING_* environment variables."""
        values: dict = {}

        if tax_rate := os.getenv("INVOICING_DEFAULT_TAX_RATE"):
            values["default_tax_rate"] = Decimal(tax_rate)
        if width := os.getenv("INVOICING_NUMBER_WIDTH"):
            values["invoice_number_width"] = int(width)
        if symbol := os.getenv("INVOICING_CURRENCY_SYMBOL"):
            values["currency_symbol"] = symbol
        if company_name := os.getenv("INVOICING_COMPANY_NAME"):
            values["company"] = Party(
                name=company_name,
                address=os.getenv("INVOICING_COMPANY_ADDRESS"),
                city=os.getenv("INVOICING_COMPANY_CITY"),
                phone=os.getenv("INVOICING_COMPANY_PHONE"),
                email=os.getenv("INVOICING_COMPANY_EMAIL"),
            )
        if seed := os.getenv("INVOICING_SEED_EXAMPLE"):
            values["seed_example_invoice"] = seed.lower() in ("1", "true", "yes")
        if timeout := os.getenv("INVOICING_DB_CONNECT_TIMEOUT"):
            values["database_connect_timeout"] = int(timeout)
        if origins := os.getenv("INVOICING_CORS_ORIGINS"):
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

        return cls(**values)
