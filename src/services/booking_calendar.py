"""Booking calendar reader - answers whether a guest occupies a property on a date."""

from datetime import date
from typing import Optional

from src.models.booking import OCCUPYING_STATUSES
from src.services.supabase_client import SupabaseClient, execute_read
from src.utils.config import EngineConfig
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

BOOKINGS_TABLE = "ownerrez_bookings"


class BookingCalendar:
    """Reads guest bookings from Supabase."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    async def has_conflict(self, property_id: str, day: date) -> bool:
        """
        True iff a confirmed/arrived booking covers ``day`` (arrival and departure inclusive).

        Lookup failures raise TransientLookupError; they are never read as "vacant".
        """
        target = day.isoformat()
        async with SupabaseClient() as client:
            query = (
                client.table(BOOKINGS_TABLE)
                .select("id")
                .eq("property_id", property_id)
                .lte("arrival_date", target)
                .gte("departure_date", target)
                .in_("status", list(OCCUPYING_STATUSES))
                .limit(1)
            )
            result = await execute_read(
                query,
                operation="booking conflict lookup",
                timeout_seconds=self.config.lookup_timeout_seconds,
                max_attempts=self.config.lookup_max_attempts,
                backoff_seconds=self.config.lookup_retry_backoff_seconds,
            )

        conflict = bool(result.data)
        logger.debug(
            "Checked booking conflict",
            property_id=property_id,
            date=target,
            has_conflict=conflict
        )
        return conflict
