"""
Invoice page layout.

Lays an invoice out as a flat list of draw commands against a cursor
(x, y, page). Nothing here touches the PDF library; pdf_writer replays the
commands. Coordinates are PDF points from the top-left of an A4 page.
"""

import textwrap
from dataclasses import dataclass, field
from decimal import Decimal

from core.exceptions import DocumentRenderError
from core.models import Invoice, Party
from utils.timezone import format_short_date

PAGE_W = 595.28
PAGE_H = 841.89
MARGIN = 50.0
CONTENT_W = PAGE_W - 2 * MARGIN

# Space kept free above the bottom margin for the footer line
FOOTER_RESERVE = 30.0
FOOTER_Y = PAGE_H - MARGIN - 12.0

LINE_H = 14.0
ROW_PADDING = 6.0
SECTION_GAP = 20.0
PARTY_COLUMN_OFFSET = 280.0

FONT_SIZE_TITLE = 24
FONT_SIZE_HEADING = 12
FONT_SIZE_NORMAL = 10
FONT_SIZE_SMALL = 9

COLOR_TEXT = (33, 33, 33)
COLOR_MUTED = (110, 110, 110)
COLOR_HEADER_BAND = (44, 62, 80)
COLOR_HEADER_TEXT = (255, 255, 255)
COLOR_ROW_SHADE = (242, 244, 247)

# (title, x offset from margin, width, alignment)
TABLE_COLUMNS = (
    ("Description", 0.0, 250.0, "L"),
    ("Qty", 250.0, 60.0, "C"),
    ("Price", 310.0, 90.0, "R"),
    ("Total", 400.0, CONTENT_W - 400.0, "R"),
)
DESCRIPTION_WRAP_CHARS = 48
NOTES_WRAP_CHARS = 95

TOTALS_LABEL_X = MARGIN + 300.0
TOTALS_LABEL_W = 100.0
TOTALS_VALUE_X = MARGIN + 400.0
TOTALS_VALUE_W = CONTENT_W - 400.0


@dataclass(frozen=True)
class TextCommand:
    """Draw one line of text in a box starting at (x, y)."""

    page: int
    x: float
    y: float
    width: float
    text: str
    size: int = FONT_SIZE_NORMAL
    bold: bool = False
    align: str = "L"
    color: tuple[int, int, int] = COLOR_TEXT

    @property
    def height(self) -> float:
        return self.size * 1.4


@dataclass(frozen=True)
class BandCommand:
    """Filled rectangle behind table rows."""

    page: int
    x: float
    y: float
    width: float
    height: float
    color: tuple[int, int, int]


DrawCommand = TextCommand | BandCommand


@dataclass
class LayoutCursor:
    """
    Vertical write position.

    ensure_room() is the only pagination rule: when a block would pass the
    usable bottom, a new page starts and y resets to the top margin.
    """

    top: float = MARGIN
    bottom: float = PAGE_H - MARGIN - FOOTER_RESERVE
    x: float = MARGIN
    y: float = MARGIN
    page: int = 0

    def advance(self, dy: float) -> None:
        self.y += dy

    def new_page(self) -> None:
        self.page += 1
        self.y = self.top

    def ensure_room(self, height: float) -> bool:
        """Start a new page if height does not fit. Returns True if it did."""
        if self.y + height > self.bottom:
            self.new_page()
            return True
        return False


@dataclass
class DocumentLayout:
    """Ordered draw commands for a whole document."""

    title: str
    commands: list[DrawCommand] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        if not self.commands:
            return 1
        return max(command.page for command in self.commands) + 1

    def texts(self, page: int | None = None) -> list[str]:
        """Text of every TextCommand, optionally limited to one page."""
        return [
            command.text for command in self.commands
            if isinstance(command, TextCommand) and (page is None or command.page == page)
        ]


def fmt_money(amount: Decimal, symbol: str) -> str:
    return f"{symbol}{amount:,.2f}"


def fmt_rate(rate: Decimal) -> str:
    """10 -> "10", 8.25 -> "8.25"."""
    return format(Decimal(rate).normalize(), "f")


def party_lines(party: Party) -> list[str]:
    """Name, then whichever of address, city, phone, email are present."""
    optional = (party.address, party.city, party.phone, party.email)
    return [party.name] + [value.strip() for value in optional if value and value.strip()]


class InvoiceLayout:
    """Builds the DocumentLayout for one invoice."""

    def __init__(self, invoice: Invoice, currency_symbol: str = "$") -> None:
        if any(item.total is None for item in invoice.items):
            raise DocumentRenderError(f"Invoice {invoice.id} has items without computed totals")
        self.invoice = invoice
        self.symbol = currency_symbol
        self.cursor = LayoutCursor()
        self.layout = DocumentLayout(title=f"Invoice {invoice.invoice_number}")

    def _text(
        self,
        x: float,
        width: float,
        text: str,
        size: int = FONT_SIZE_NORMAL,
        bold: bool = False,
        align: str = "L",
        color: tuple[int, int, int] = COLOR_TEXT,
        y: float | None = None,
    ) -> None:
        self.layout.commands.append(
            TextCommand(
                page=self.cursor.page,
                x=x,
                y=self.cursor.y if y is None else y,
                width=width,
                text=text,
                size=size,
                bold=bold,
                align=align,
                color=color,
            )
        )

    def _band(self, height: float, color: tuple[int, int, int]) -> None:
        self.layout.commands.append(
            BandCommand(
                page=self.cursor.page,
                x=MARGIN,
                y=self.cursor.y,
                width=CONTENT_W,
                height=height,
                color=color,
            )
        )

    def _draw_title(self) -> None:
        self._text(MARGIN, CONTENT_W, "INVOICE", FONT_SIZE_TITLE, bold=True, align="C")
        self.cursor.advance(FONT_SIZE_TITLE * 1.4 + SECTION_GAP / 2)

    def _draw_metadata(self) -> None:
        lines = (
            f"Invoice Number: {self.invoice.invoice_number}",
            f"Date: {format_short_date(self.invoice.date)}",
            f"Status: {self.invoice.status.value.upper()}",
        )
        for line in lines:
            self.cursor.ensure_room(LINE_H)
            self._text(MARGIN, CONTENT_W, line)
            self.cursor.advance(LINE_H)
        self.cursor.advance(SECTION_GAP)

    def _draw_parties(self) -> None:
        left = party_lines(self.invoice.sender)
        right = party_lines(self.invoice.recipient)
        block_h = (1 + max(len(left), len(right))) * LINE_H

        self.cursor.ensure_room(block_h)
        top = self.cursor.y
        column_w = PARTY_COLUMN_OFFSET - 10.0

        for x, label, lines in (
            (MARGIN, "FROM:", left),
            (MARGIN + PARTY_COLUMN_OFFSET, "TO:", right),
        ):
            self._text(x, column_w, label, FONT_SIZE_HEADING, bold=True, y=top)
            for i, line in enumerate(lines, start=1):
                self._text(x, column_w, line, bold=(i == 1), y=top + i * LINE_H)

        self.cursor.advance(block_h + SECTION_GAP / 2)

    def _draw_due_date(self) -> None:
        if self.invoice.due_date is None:
            return
        self.cursor.ensure_room(LINE_H)
        self._text(
            MARGIN,
            CONTENT_W,
            f"Due Date: {format_short_date(self.invoice.due_date)}",
            bold=True,
            align="R",
        )
        self.cursor.advance(LINE_H)

    def _draw_table_header(self) -> None:
        row_h = LINE_H + ROW_PADDING
        self.cursor.ensure_room(row_h)
        self._band(row_h, COLOR_HEADER_BAND)

        text_y = self.cursor.y + ROW_PADDING / 2
        for title, offset, width, align in TABLE_COLUMNS:
            self._text(
                MARGIN + offset,
                width,
                title,
                bold=True,
                align=align,
                color=COLOR_HEADER_TEXT,
                y=text_y,
            )
        self.cursor.advance(row_h)

    def _draw_items(self) -> None:
        columns = TABLE_COLUMNS

        for index, item in enumerate(self.invoice.items):
            description = textwrap.wrap(item.description, DESCRIPTION_WRAP_CHARS) or [""]
            row_h = len(description) * LINE_H + ROW_PADDING

            self.cursor.ensure_room(row_h)
            if index % 2 == 1:
                self._band(row_h, COLOR_ROW_SHADE)

            text_y = self.cursor.y + ROW_PADDING / 2
            _, desc_offset, desc_w, desc_align = columns[0]
            for i, line in enumerate(description):
                self._text(MARGIN + desc_offset, desc_w, line, align=desc_align, y=text_y + i * LINE_H)

            values = (
                str(item.quantity),
                fmt_money(item.price, self.symbol),
                fmt_money(item.total, self.symbol),
            )
            for (_, offset, width, align), value in zip(columns[1:], values):
                self._text(MARGIN + offset, width, value, align=align, y=text_y)

            self.cursor.advance(row_h)

        self.cursor.advance(SECTION_GAP)

    def _draw_totals(self) -> None:
        rows = (
            ("Subtotal:", self.invoice.subtotal, False),
            (f"Tax ({fmt_rate(self.invoice.tax_rate)}%):", self.invoice.tax_amount, False),
            ("Total:", self.invoice.total, True),
        )
        for label, amount, bold in rows:
            size = FONT_SIZE_HEADING if bold else FONT_SIZE_NORMAL
            self.cursor.ensure_room(LINE_H + 4)
            self._text(TOTALS_LABEL_X, TOTALS_LABEL_W, label, size, bold=bold, align="R")
            self._text(TOTALS_VALUE_X, TOTALS_VALUE_W, fmt_money(amount, self.symbol), size, bold=bold, align="R")
            self.cursor.advance(LINE_H + 4)
        self.cursor.advance(SECTION_GAP)

    def _draw_notes(self) -> None:
        notes = (self.invoice.notes or "").strip()
        if not notes:
            return

        self.cursor.ensure_room(LINE_H * 2)
        self._text(MARGIN, CONTENT_W, "Notes:", FONT_SIZE_HEADING, bold=True)
        self.cursor.advance(LINE_H + 2)

        for paragraph in notes.splitlines():
            for line in textwrap.wrap(paragraph, NOTES_WRAP_CHARS) or [""]:
                self.cursor.ensure_room(LINE_H)
                self._text(MARGIN, CONTENT_W, line, FONT_SIZE_SMALL, color=COLOR_MUTED)
                self.cursor.advance(LINE_H)

    def _draw_footer(self) -> None:
        self._text(
            MARGIN,
            CONTENT_W,
            "Thank you for your business!",
            FONT_SIZE_NORMAL,
            align="C",
            color=COLOR_MUTED,
            y=FOOTER_Y,
        )

    def build(self) -> DocumentLayout:
        self._draw_title()
        self._draw_metadata()
        self._draw_parties()
        self._draw_due_date()
        self._draw_table_header()
        self._draw_items()
        self._draw_totals()
        self._draw_notes()
        self._draw_footer()
        return self.layout


def layout_invoice(invoice: Invoice, currency_symbol: str = "$") -> DocumentLayout:
    return InvoiceLayout(invoice, currency_symbol).build()
