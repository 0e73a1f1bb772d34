"""Front-matter date coercion"""

from datetime import date, datetime, timezone
from typing import Any


def parse_date(value: Any) -> datetime | None:
    """Coerce a YAML date, datetime or ISO string to an aware UTC datetime, else None.

    Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_past(value: Any, now: datetime | None = None) -> bool:
    """True when value parses to a moment that is not in the future."""
    dt = parse_date(value)
    if dt is None:
        return False
    return dt <= (now or datetime.now(timezone.utc))
