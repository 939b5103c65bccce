"""Vacancy search - nearest date around a preferred date with no booking conflict."""

from datetime import date, timedelta
from typing import Iterator, Optional

from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

DEFAULT_SEARCH_DAYS = 7


def candidate_dates(preferred_date: date, max_days_each_direction: int) -> Iterator[date]:
    """
    Probe order: the preferred date and the following days first, then earlier days.

    Forward offsets are 0..N-1, backward offsets 1..N. Later dates defer work less,
    so every forward date is tried before any backward one.
    """
    for offset in range(max_days_each_direction):
        yield preferred_date + timedelta(days=offset)
    for offset in range(1, max_days_each_direction + 1):
        yield preferred_date - timedelta(days=offset)


async def find_vacant_date(
    calendar,
    property_id: str,
    preferred_date: date,
    max_days_each_direction: int = DEFAULT_SEARCH_DAYS,
) -> Optional[date]:
    """
    Return the first date without a booking conflict, or None if the window is fully booked.

    ``calendar`` must provide ``async has_conflict(property_id, date)``; its errors propagate.
    """
    if max_days_each_direction < 1:
        raise ValueError("max_days_each_direction must be at least 1")

    probes = 0
    for candidate in candidate_dates(preferred_date, max_days_each_direction):
        probes += 1
        if not await calendar.has_conflict(property_id, candidate):
            logger.debug(
                "Vacant date found",
                property_id=property_id,
                preferred_date=preferred_date.isoformat(),
                vacant_date=candidate.isoformat(),
                probes=probes
            )
            return candidate

    logger.info(
        "No vacant date in search window",
        property_id=property_id,
        preferred_date=preferred_date.isoformat(),
        window_days=max_days_each_direction,
        probes=probes
    )
    return None
