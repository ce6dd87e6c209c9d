"""
Application factory.

create_app() wires already-built services into a FastAPI app and is what
tests use. build_services() resolves infrastructure from the environment
(and Vault): no database URL means the in-memory ledger only; no Valkey
URL or no database means no login, so every caller is the anonymous owner.
"""

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

import psycopg2
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_error_handlers
from api.health import create_health_router
from api.invoices import create_invoice_router
from api.middleware import RequestIDMiddleware
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.rate_limiter import RateLimiter
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.session import SessionManager
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_admin_credentials, get_database_url, get_valkey_url
from core.config import LedgerConfig
from core.ledger import MemoryLedger, PostgresLedger, seeded_memory_ledger
from core.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@dataclass
class AppServices:
    """Everything create_app needs. Auth fields are None when login is disabled."""

    invoice_service: InvoiceService
    auth_service: AuthService | None = None
    session_manager: SessionManager | None = None
    admin_credentials: tuple[str, str] | None = None
    auth_config: AuthConfig = field(default_factory=AuthConfig)
    postgres: PostgresClient | None = None
    valkey: ValkeyClient | None = None


def build_services(
    config: LedgerConfig | None = None,
    auth_config: AuthConfig | None = None,
) -> AppServices:
    """
    Build services from environment and Vault.

    Raises:
        redis.ConnectionError: If a Valkey URL is configured but unreachable
    """
    config = config or LedgerConfig.from_env()
    auth_config = auth_config or AuthConfig.from_env()

    fallback = seeded_memory_ledger(config.company) if config.seed_example_invoice else MemoryLedger()

    database_url = get_database_url()
    postgres = None
    durable = None
    if database_url:
        postgres = PostgresClient(database_url, connect_timeout=config.database_connect_timeout)
        durable = PostgresLedger(postgres)
    else:
        logger.warning("No database configured; invoices are kept in memory only")

    services = AppServices(
        invoice_service=InvoiceService(durable, fallback, config),
        auth_config=auth_config,
        postgres=postgres,
    )

    valkey_url = get_valkey_url()
    if postgres is not None and valkey_url:
        valkey = ValkeyClient(valkey_url)
        services.valkey = valkey
        session_manager = SessionManager(valkey, auth_config)
        services.session_manager = session_manager
        services.auth_service = AuthService(
            config=auth_config,
            auth_db=AuthDatabase(postgres),
            session_manager=session_manager,
            rate_limiter=RateLimiter(valkey, auth_config),
        )
        services.admin_credentials = get_admin_credentials()
    else:
        logger.warning("Login disabled (needs both database and Valkey); all requests use the anonymous owner")

    return services


def create_app(services: AppServices) -> FastAPI:
    """Assemble middleware, error handlers and routers."""
    config = services.invoice_service.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services.auth_service is not None and services.admin_credentials is not None:
            email, password = services.admin_credentials
            try:
                services.auth_service.ensure_admin(email, password)
            except psycopg2.Error as e:
                logger.warning(f"Admin bootstrap skipped, database unavailable: {e}")
        yield

        if services.valkey is not None:
            services.valkey.close()
        if services.postgres is not None:
            services.postgres.close()
        logger.info("Connections closed")

    app = FastAPI(title="Invoice Management API", version=VERSION, lifespan=lifespan)

    # Last added runs first: CORS, then request IDs, then auth
    if services.session_manager is not None:
        app.add_middleware(AuthMiddleware, session_manager=services.session_manager)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Invoice-Source", "X-Request-ID"],
    )

    register_error_handlers(app)

    app.include_router(create_health_router(services.invoice_service.durable, VERSION))
    app.include_router(create_invoice_router(services.invoice_service), prefix="/api/billing")
    if services.auth_service is not None:
        app.include_router(
            create_auth_router(services.auth_service, cookie_secure=services.auth_config.cookie_secure),
            prefix="/api/auth",
        )

    return app


def run() -> None:
    """Console entry point: load .env, build, serve."""
    load_dotenv(Path.cwd() / ".env")
    logging.basicConfig(
        level=os.getenv("INVOICING_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(build_services())
    uvicorn.run(
        app,
        host=os.getenv("INVOICING_HOST", "0.0.0.0"),
        port=int(os.getenv("INVOICING_PORT", "5000")),
    )


if __name__ == "__main__":
    run()
