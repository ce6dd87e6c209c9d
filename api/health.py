"""Service banner and health check."""

import logging

from fastapi import APIRouter, Request

from api.base import request_id_of, success_response
from core.exceptions import LedgerUnavailableError
from core.ledger import LedgerStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "Invoice Management API"


def create_health_router(durable: LedgerStore | None, version: str) -> APIRouter:
    """Create health router. durable is None when no database is configured."""
    router = APIRouter(tags=["health"])

    @router.get("/")
    def banner(request: Request):
        return success_response(
            request_id_of(request),
            message=f"{SERVICE_NAME} is running",
            version=version,
        )

    @router.get("/api/health")
    def health(request: Request):
        database = "disconnected"
        if durable is not None:
            try:
                durable.ping()
                database = "connected"
            except LedgerUnavailableError:
                logger.warning("Health check: database unreachable")

        return success_response(request_id_of(request), status="ok", database=database)

    return router
