"""Invoice PDF rendering: layout as draw commands, then fpdf2 output."""

from core.rendering.layout import (
    BandCommand,
    DocumentLayout,
    LayoutCursor,
    TextCommand,
    layout_invoice,
)
from core.rendering.pdf_writer import PdfWriter, iter_chunks


def render_invoice_pdf(invoice, currency_symbol: str = "$") -> bytes:
    """Layout then write; returns the complete PDF."""
    return PdfWriter(author=invoice.sender.name).write(layout_invoice(invoice, currency_symbol))
