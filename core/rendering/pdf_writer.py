"""Replays a DocumentLayout onto an fpdf2 document."""

from typing import Iterator

from fpdf import FPDF
from fpdf.errors import FPDFException

from core.exceptions import DocumentRenderError
from core.rendering.layout import PAGE_H, PAGE_W, BandCommand, DocumentLayout, TextCommand

FONT_FAMILY = "Helvetica"
STREAM_CHUNK_SIZE = 64 * 1024


def latin1(text: str) -> str:
    """Core PDF fonts are Latin-1 only; anything else becomes '?'."""
    return text.encode("latin-1", "replace").decode("latin-1")


class PdfWriter:
    """Turns draw commands into PDF bytes."""

    def __init__(self, author: str | None = None) -> None:
        self.author = author

    def _new_document(self, layout: DocumentLayout) -> FPDF:
        pdf = FPDF(unit="pt", format=(PAGE_W, PAGE_H))
        pdf.set_auto_page_break(False)
        pdf.set_margin(0)
        pdf.set_title(latin1(layout.title))
        if self.author:
            pdf.set_author(latin1(self.author))
        return pdf

    def _draw_text(self, pdf: FPDF, command: TextCommand) -> None:
        pdf.set_font(FONT_FAMILY, style="B" if command.bold else "", size=command.size)
        pdf.set_text_color(*command.color)
        pdf.set_xy(command.x, command.y)
        pdf.cell(command.width, command.height, latin1(command.text), align=command.align)

    def _draw_band(self, pdf: FPDF, command: BandCommand) -> None:
        pdf.set_fill_color(*command.color)
        pdf.rect(command.x, command.y, command.width, command.height, style="F")

    def write(self, layout: DocumentLayout) -> bytes:
        """
        Render the whole document in memory.

        Raises:
            DocumentRenderError: If fpdf2 rejects a command
        """
        pdf = self._new_document(layout)

        try:
            pdf.add_page()
            for command in layout.commands:
                # Commands arrive in page order; open pages as they are reached
                while pdf.page < command.page + 1:
                    pdf.add_page()

                if isinstance(command, BandCommand):
                    self._draw_band(pdf, command)
                else:
                    self._draw_text(pdf, command)

            return bytes(pdf.output())
        except FPDFException as exc:
            raise DocumentRenderError(f"PDF rendering failed: {exc}") from exc


def iter_chunks(document: bytes, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    """Split a finished document for a streaming response."""
    for start in range(0, len(document), chunk_size):
        yield document[start:start + chunk_size]
