"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, parse_iso, format_short_date
from utils.user_context import (
    ANONYMOUS_OWNER_ID,
    get_current_owner_id,
    set_current_owner_id,
    clear_current_owner_id,
    owner_context,
)
