"""Invoice routes under /api/billing."""

from uuid import UUID

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from api.base import request_id_of, success_response
from core.exceptions import InvoiceNotFoundError
from core.models import InvoiceDraft, InvoiceUpdate, StatusUpdate
from core.rendering import iter_chunks
from core.services.invoice_service import InvoiceService
from utils.user_context import get_current_owner_id


def _parse_invoice_id(invoice_id: str) -> UUID:
    """A malformed id can't exist, so it is reported as not found."""
    try:
        return UUID(invoice_id)
    except ValueError:
        raise InvoiceNotFoundError(invoice_id)


def create_invoice_router(invoice_service: InvoiceService) -> APIRouter:
    """Create invoice router with injected service."""
    router = APIRouter(tags=["invoices"])

    @router.get("/invoices")
    def list_invoices(request: Request):
        result = invoice_service.list_invoices(get_current_owner_id())
        return success_response(
            request_id_of(request),
            invoices=[invoice.to_wire() for invoice in result.value],
            totalInvoices=len(result.value),
            source=result.source.value,
        )

    @router.get("/invoices/{invoice_id}")
    def get_invoice(request: Request, invoice_id: str):
        result = invoice_service.get_invoice(get_current_owner_id(), _parse_invoice_id(invoice_id))
        return success_response(
            request_id_of(request),
            invoice=result.value.to_wire(),
            source=result.source.value,
        )

    @router.post("/invoices", status_code=201)
    def create_invoice(request: Request, body: InvoiceDraft):
        result = invoice_service.create_invoice(get_current_owner_id(), body)
        return JSONResponse(
            status_code=201,
            content=success_response(
                request_id_of(request),
                message="Invoice created successfully",
                invoice=result.value.to_wire(),
                source=result.source.value,
            ),
        )

    @router.put("/invoices/{invoice_id}")
    def update_invoice(request: Request, invoice_id: str, body: InvoiceUpdate):
        result = invoice_service.update_invoice(
            get_current_owner_id(), _parse_invoice_id(invoice_id), body
        )
        return success_response(
            request_id_of(request),
            invoice=result.value.to_wire(),
            source=result.source.value,
        )

    @router.patch("/invoices/{invoice_id}/status")
    def set_invoice_status(request: Request, invoice_id: str, body: StatusUpdate):
        result = invoice_service.set_status(
            get_current_owner_id(), _parse_invoice_id(invoice_id), body.status
        )
        return success_response(
            request_id_of(request),
            invoice=result.value.to_wire(),
            source=result.source.value,
        )

    @router.delete("/invoices/{invoice_id}")
    def delete_invoice(request: Request, invoice_id: str):
        result = invoice_service.delete_invoice(get_current_owner_id(), _parse_invoice_id(invoice_id))
        return success_response(
            request_id_of(request),
            deletedInvoice=result.value.to_wire(),
            source=result.source.value,
        )

    @router.get("/invoices/{invoice_id}/pdf")
    def download_invoice_pdf(invoice_id: str):
        # Rendered completely before the response starts
        invoice, document = invoice_service.render_invoice_pdf(
            get_current_owner_id(), _parse_invoice_id(invoice_id)
        )
        filename = f"invoice-{invoice.invoice_number}.pdf"
        return StreamingResponse(
            iter_chunks(document.value),
            media_type="application/pdf",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Content-Length": str(len(document.value)),
                "X-Invoice-Source": document.source.value,
            },
        )

    @router.get("/stats")
    def get_stats(request: Request):
        result = invoice_service.get_stats(get_current_owner_id())
        return success_response(
            request_id_of(request),
            stats=result.value.to_wire(),
            source=result.source.value,
        )

    return router
