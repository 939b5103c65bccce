"""Preventive maintenance task generator - the batch pass over due schedules."""

import asyncio
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta

from src.models.generation import GenerationSummary, ScheduleFailure
from src.models.schedule import MaintenanceSchedule
from src.models.task import ScheduledMaintenanceTask, TaskStatus
from src.services.booking_calendar import BookingCalendar
from src.services.schedule_rollforward import next_due_date
from src.services.schedule_store import ScheduleStore
from src.services.task_store import TaskStore
from src.services.vacancy_search import find_vacant_date
from src.services.vendor_directory import VendorDirectory
from src.services.vendor_scorer import VendorScorer
from src.utils.config import EngineConfig
from src.utils.errors import DuplicateTaskError, MaintenanceEngineError
from src.utils.logging import StructuredLogger, get_structured_logger, log_timing

logger = get_structured_logger(__name__)


class Outcome(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class TaskGenerator:
    """
    Generates scheduled maintenance tasks for every enabled schedule due within the horizon.

    Per schedule: idempotence check, date resolution (vacancy search when the template
    requires it), vendor selection, task insert, schedule advance. Failures are recorded
    per schedule and never abort the pass.
    """

    def __init__(
        self,
        schedule_store,
        task_store,
        calendar,
        scorer,
        config: Optional[EngineConfig] = None,
    ):
        self.schedule_store = schedule_store
        self.task_store = task_store
        self.calendar = calendar
        self.scorer = scorer
        self.config = config or EngineConfig()

    async def run_generation_pass(
        self,
        horizon_months: Optional[int] = None,
        today: Optional[date] = None,
    ) -> GenerationSummary:
        horizon = self.config.horizon_months if horizon_months is None else horizon_months
        if horizon < 1:
            raise ValueError(f"horizon_months must be >= 1, got {horizon}")

        today = today or datetime.now(timezone.utc).date()
        horizon_end = today + relativedelta(months=horizon)

        logger.info(
            "Generating preventive maintenance tasks",
            start=today.isoformat(),
            end=horizon_end.isoformat(),
            horizon_months=horizon
        )

        try:
            due = await self.schedule_store.fetch_due_schedules(today, horizon_end)
        except Exception as e:
            logger.error("Failed to enumerate due schedules", error=str(e), exc_info=True)
            return GenerationSummary(success=False, error=str(e))

        schedules = due.schedules
        summary = GenerationSummary(schedules_processed=due.count)
        # Rows that failed validation fail at load, like rows missing their joins
        summary.errors.extend(
            ScheduleFailure(schedule_id=row.schedule_id, stage="load", error=row.error, retryable=False)
            for row in due.rejected
        )
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def bounded(schedule: MaintenanceSchedule):
            async with semaphore:
                return await self._process_schedule(schedule)

        with log_timing("generation_pass", logger=logger, schedules=len(schedules)):
            results = await asyncio.gather(*(bounded(s) for s in schedules))

        for outcome, failure in results:
            if outcome is Outcome.CREATED:
                summary.tasks_created += 1
            elif outcome is Outcome.SKIPPED:
                summary.tasks_skipped += 1
            elif failure is not None:
                summary.errors.append(failure)

        logger.info(
            "Generation complete",
            tasks_created=summary.tasks_created,
            tasks_skipped=summary.tasks_skipped,
            schedules_processed=summary.schedules_processed,
            errors=len(summary.errors)
        )
        return summary

    async def _process_schedule(
        self, schedule: MaintenanceSchedule
    ) -> tuple[Outcome, Optional[ScheduleFailure]]:
        log = logger.bind(schedule_id=schedule.id)
        stage = "load"
        try:
            if schedule.template is None or schedule.property_ref is None:
                raise MaintenanceEngineError("Schedule is missing its template or property")
            template = schedule.template
            due = schedule.next_due_at

            stage = "idempotence_check"
            if await self.task_store.task_exists(schedule.id, due):
                log.info(
                    "Task already exists for schedule",
                    scheduled_date=due.isoformat()
                )
                return Outcome.SKIPPED, None

            stage = "date_resolution"
            scheduled_date, note = await self._resolve_date(schedule, log)

            stage = "vendor_selection"
            selection = await self.scorer.select_vendor(
                schedule.property_id,
                template.category,
                schedule.preferred_vendor_id,
            )

            stage = "persist"
            task = ScheduledMaintenanceTask(
                schedule_id=schedule.id,
                property_id=schedule.property_id,
                template_id=schedule.template_id,
                assigned_vendor_id=selection.vendor_id,
                scheduled_date=scheduled_date,
                status=TaskStatus.SCHEDULED,
                auto_assigned=True,
                assignment_reason=selection.reason,
                needs_manual_assignment=selection.needs_manual_assignment,
                notes=note,
            )
            try:
                created = await self.task_store.insert_task(task)
            except DuplicateTaskError:
                # Another run inserted it between our check and insert
                log.warning(
                    "Task inserted concurrently, skipping schedule",
                    scheduled_date=scheduled_date.isoformat()
                )
                return Outcome.SKIPPED, None

            stage = "advance_schedule"
            # Anchor on the original due date, never the vacancy-adjusted one
            new_due = next_due_date(due, schedule.effective_frequency_months)
            try:
                await self.schedule_store.advance_schedule(schedule.id, new_due)
            except Exception:
                await self._undo_insert(created, log)
                raise

            log.info(
                "Created maintenance task",
                template=template.name,
                property=schedule.property_name,
                scheduled_date=scheduled_date.isoformat(),
                vendor_id=selection.vendor_id,
                next_due_at=new_due.isoformat()
            )
            return Outcome.CREATED, None

        except Exception as e:
            log.error(
                "Failed to process schedule",
                stage=stage,
                error=str(e),
                exc_info=True
            )
            return Outcome.FAILED, ScheduleFailure(
                schedule_id=schedule.id,
                stage=stage,
                error=str(e),
                retryable=getattr(e, "retryable", False),
            )

    async def _resolve_date(
        self, schedule: MaintenanceSchedule, log: StructuredLogger
    ) -> tuple[date, Optional[str]]:
        """Return the date to schedule on and an optional note explaining any override."""
        due = schedule.next_due_at
        if not schedule.template.requires_vacancy:
            return due, None

        window = self.config.vacancy_search_days
        vacant = await find_vacant_date(self.calendar, schedule.property_id, due, window)

        if vacant == due:
            return due, None
        if vacant is not None:
            log.info(
                "Rescheduled around booking conflict",
                property=schedule.property_name,
                due_date=due.isoformat(),
                scheduled_date=vacant.isoformat()
            )
            return vacant, f"Rescheduled from {due.isoformat()} to {vacant.isoformat()} due to booking conflict"

        log.warning(
            "No vacant date found, using original date anyway",
            property=schedule.property_name,
            due_date=due.isoformat(),
            window_days=window
        )
        return due, (
            f"No vacant date within ±{window} days of {due.isoformat()}; "
            "scheduled on original date despite booking conflict"
        )

    async def _undo_insert(self, task: ScheduledMaintenanceTask, log: StructuredLogger) -> None:
        """Remove a task whose schedule could not be advanced so a rerun regenerates it."""
        if task.id is None:
            log.error(
                "Cannot roll back task without an id",
                scheduled_date=task.scheduled_date.isoformat()
            )
            return
        try:
            await self.task_store.delete_task(task.id)
        except Exception as e:
            log.error(
                "Failed to roll back task after schedule advance failure",
                task_id=task.id,
                error=str(e),
                exc_info=True
            )


def build_task_generator(config: Optional[EngineConfig] = None) -> TaskGenerator:
    """Wire the Supabase-backed stores into a generator."""
    config = config or EngineConfig.from_env()
    return TaskGenerator(
        schedule_store=ScheduleStore(),
        task_store=TaskStore(config),
        calendar=BookingCalendar(config),
        scorer=VendorScorer(
            VendorDirectory(config),
            weights=config.scoring,
            candidate_limit=config.vendor_candidate_limit,
        ),
        config=config,
    )
