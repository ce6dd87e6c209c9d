"""Propagate the invoice owner's identity through the call stack using contextvars."""

from contextvars import ContextVar
from contextlib import contextmanager
from uuid import UUID

# Owner used when a request carries no credentials.
ANONYMOUS_OWNER_ID = UUID("00000000-0000-0000-0000-000000000000")

_current_owner_id: ContextVar[UUID | None] = ContextVar("current_owner_id", default=None)


def get_current_owner_id() -> UUID:
    """
    Get current owner ID from context.

    Falls back to ANONYMOUS_OWNER_ID when nothing was set, so unauthenticated
    callers all share one placeholder ledger.
    """
    owner_id = _current_owner_id.get()
    if owner_id is None:
        return ANONYMOUS_OWNER_ID
    return owner_id


def is_anonymous() -> bool:
    return _current_owner_id.get() is None


def set_current_owner_id(owner_id: UUID) -> None:
    """
    Set current owner ID in context.

    Called by the owner middleware after validating a session.
    """
    _current_owner_id.set(owner_id)


def clear_current_owner_id() -> None:
    """
    Clear owner context.

    Must be called in a finally block to prevent context leakage.
    """
    _current_owner_id.set(None)


@contextmanager
def owner_context(owner_id: UUID):
    """
    Context manager for temporarily acting as an owner.

    Example:
        with owner_context(user.id):
            invoices = invoice_service.list_invoices(get_current_owner_id())
    """
    previous = _current_owner_id.get()
    set_current_owner_id(owner_id)
    try:
        yield
    finally:
        if previous is None:
            clear_current_owner_id()
        else:
            set_current_owner_id(previous)
