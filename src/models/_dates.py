"""Date coercion shared by the read models."""

from datetime import date, datetime
from typing import Any


def coerce_calendar_date(value: Any) -> Any:
    """Drop any time-of-day component; Supabase may return timestamps for date columns."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T")[0]
    return value
