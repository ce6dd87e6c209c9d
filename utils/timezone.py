"""UTC-everywhere time handling for invoice timestamps."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Every created_at/updated_at in the ledger comes from here.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Naive datetimes are assumed to already be UTC (JSON payloads often
    carry plain dates like "2026-01-31").
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    Raises ValueError if the string is not ISO 8601.
    """
    return to_utc(datetime.fromisoformat(iso_string))


def format_short_date(dt: datetime) -> str:
    """Short display date, e.g. 3/7/2026 (no zero padding)."""
    return f"{dt.month}/{dt.day}/{dt.year}"
