"""Vendor directory reader."""

from typing import Optional

from src.models.vendor import ELIGIBLE_VENDOR_STATUSES, Vendor
from src.services.supabase_client import SupabaseClient, execute_read
from src.utils.config import EngineConfig
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

VENDORS_TABLE = "vendors"
VENDOR_COLUMNS = (
    "id, name, status, specialty, average_rating, average_response_time_hours, "
    "total_jobs_completed, insurance_verified"
)


def candidate_sort_key(vendor: Vendor) -> tuple:
    """Rating descending (unrated last), then id ascending."""
    rating = vendor.average_rating
    return (rating is None, -(rating or 0.0), vendor.id)


class VendorDirectory:
    """Reads eligible vendors from Supabase."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    async def _read(self, query, operation: str):
        return await execute_read(
            query,
            operation=operation,
            timeout_seconds=self.config.lookup_timeout_seconds,
            max_attempts=self.config.lookup_max_attempts,
            backoff_seconds=self.config.lookup_retry_backoff_seconds,
        )

    async def get_eligible_vendor(self, vendor_id: str) -> Optional[Vendor]:
        """Return the vendor if it exists and is active or preferred."""
        async with SupabaseClient() as client:
            query = (
                client.table(VENDORS_TABLE)
                .select(VENDOR_COLUMNS)
                .eq("id", vendor_id)
                .in_("status", list(ELIGIBLE_VENDOR_STATUSES))
                .limit(1)
            )
            result = await self._read(query, "preferred vendor lookup")

        if not result.data:
            return None
        return Vendor(**result.data[0])

    async def list_candidates(self, category: str, limit: int) -> list[Vendor]:
        """Up to ``limit`` eligible vendors whose specialty includes ``category``, best rated first."""
        async with SupabaseClient() as client:
            query = (
                client.table(VENDORS_TABLE)
                .select(VENDOR_COLUMNS)
                .in_("status", list(ELIGIBLE_VENDOR_STATUSES))
                .contains("specialty", [category])
                .order("average_rating", desc=True, nullsfirst=False)
                .order("id")
                .limit(limit)
            )
            result = await self._read(query, "vendor candidate lookup")

        vendors = [Vendor(**row) for row in (result.data or [])]
        # Re-sort in memory so the tie-break holds even if the query ordering is ignored
        vendors.sort(key=candidate_sort_key)

        logger.debug(
            "Loaded vendor candidates",
            category=category,
            candidates=len(vendors),
            limit=limit
        )
        return vendors[:limit]
