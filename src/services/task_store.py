"""Task store - idempotence check and task persistence."""

from datetime import date
from typing import Optional

from src.models.task import ScheduledMaintenanceTask
from src.services.supabase_client import SupabaseClient, execute_read, execute_write
from src.utils.config import EngineConfig
from src.utils.errors import PersistenceError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

TASKS_TABLE = "scheduled_maintenance_tasks"


class TaskStore:
    """Reads and writes scheduled_maintenance_tasks."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    async def task_exists(self, schedule_id: str, scheduled_date: date) -> bool:
        """
        Whether a task was already generated for (schedule, date).

        Read with the lookup timeout and retries; exhausted retries raise TransientLookupError.
        """
        async with SupabaseClient() as client:
            query = (
                client.table(TASKS_TABLE)
                .select("id")
                .eq("schedule_id", schedule_id)
                .eq("scheduled_date", scheduled_date.isoformat())
                .limit(1)
            )
            result = await execute_read(
                query,
                operation="existing task lookup",
                timeout_seconds=self.config.lookup_timeout_seconds,
                max_attempts=self.config.lookup_max_attempts,
                backoff_seconds=self.config.lookup_retry_backoff_seconds,
            )
        return bool(result.data)

    async def insert_task(self, task: ScheduledMaintenanceTask) -> ScheduledMaintenanceTask:
        """
        Insert a generated task.

        A unique violation on (schedule_id, scheduled_date) surfaces as DuplicateTaskError.
        """
        async with SupabaseClient() as client:
            query = client.table(TASKS_TABLE).insert(task.to_row())
            result = await execute_write(query, "insert maintenance task")

        if not result.data:
            raise PersistenceError("Failed to insert maintenance task: no data returned")
        return ScheduledMaintenanceTask.model_validate(result.data[0])

    async def delete_task(self, task_id: str) -> None:
        """Compensating delete used when the schedule could not be advanced."""
        async with SupabaseClient() as client:
            query = client.table(TASKS_TABLE).delete().eq("id", task_id)
            await execute_write(query, "delete maintenance task")
        logger.info("Deleted maintenance task", task_id=task_id)
