"""Schedule store - due-schedule query and next-due updates."""

from datetime import date, datetime, timezone
from pydantic import ValidationError

from src.models.schedule import DueSchedules, MaintenanceSchedule, RejectedScheduleRow
from src.services.supabase_client import SupabaseClient, execute_write
from src.utils.errors import PersistenceError, ScheduleQueryError
from src.utils.logging import get_structured_logger, timed

logger = get_structured_logger(__name__)

SCHEDULES_TABLE = "property_maintenance_schedules"
SCHEDULE_SELECT = """
    *,
    property:properties(id, name),
    template:preventive_maintenance_templates(*)
"""


class ScheduleStore:
    """Reads and advances property maintenance schedules."""

    @timed("fetch_due_schedules")
    async def fetch_due_schedules(self, start: date, end: date) -> DueSchedules:
        """
        Enabled schedules with ``start <= next_due_at <= end``, joined with template and property.

        A failed query is fatal to the pass and raised as ScheduleQueryError. Rows that
        fail validation come back in ``rejected`` so the pass can report them per schedule.
        """
        try:
            async with SupabaseClient() as client:
                result = (
                    client.table(SCHEDULES_TABLE)
                    .select(SCHEDULE_SELECT)
                    .eq("is_enabled", True)
                    .gte("next_due_at", start.isoformat())
                    .lte("next_due_at", end.isoformat())
                    .order("next_due_at")
                    .order("id")
                    .execute()
                )
        except Exception as e:
            raise ScheduleQueryError(f"Failed to fetch due schedules: {e}") from e

        due = DueSchedules()
        for row in result.data or []:
            try:
                due.schedules.append(MaintenanceSchedule.model_validate(row))
            except ValidationError as e:
                rejected = RejectedScheduleRow(
                    schedule_id=str(row.get("id") or "unknown"),
                    error=f"Malformed schedule row: {_summarize(e)}",
                )
                logger.warning(
                    "Rejected malformed schedule row",
                    schedule_id=rejected.schedule_id,
                    error=rejected.error
                )
                due.rejected.append(rejected)

        logger.info(
            "Fetched due schedules",
            start=start.isoformat(),
            end=end.isoformat(),
            count=len(due.schedules),
            rejected=len(due.rejected)
        )
        return due

    async def advance_schedule(self, schedule_id: str, next_due_at: date) -> None:
        """Persist the rolled-forward due date."""
        async with SupabaseClient() as client:
            query = (
                client.table(SCHEDULES_TABLE)
                .update({
                    "next_due_at": next_due_at.isoformat(),
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })
                .eq("id", schedule_id)
            )
            result = await execute_write(query, "advance schedule")

        if not result.data:
            raise PersistenceError(f"Failed to advance schedule: {schedule_id} not found")

        logger.debug(
            "Advanced schedule",
            schedule_id=schedule_id,
            next_due_at=next_due_at.isoformat()
        )



def _summarize(error: ValidationError) -> str:
    """One line per invalid field, e.g. ``custom_frequency_months: Input should be ...``."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'row'}: {err['msg']}"
        for err in error.errors()
    )
