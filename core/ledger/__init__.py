"""Invoice persistence: durable PostgreSQL ledger and in-memory fallback."""

from core.ledger.base import LedgerStore, Source
from core.ledger.memory import MemoryLedger, example_invoice, seeded_memory_ledger
from core.ledger.postgres import PostgresLedger
