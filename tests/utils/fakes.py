"""In-memory stand-ins for the Supabase-backed stores."""

import itertools
from datetime import date
from typing import Optional

from src.models.booking import Booking
from src.models.schedule import DueSchedules, MaintenanceSchedule, RejectedScheduleRow
from src.models.task import ScheduledMaintenanceTask
from src.models.vendor import Vendor
from src.services.vendor_directory import candidate_sort_key
from src.utils.errors import DuplicateTaskError, PersistenceError, TransientLookupError


class InMemoryScheduleStore:
    def __init__(self, schedules: list[MaintenanceSchedule]):
        self.schedules = {s.id: s for s in schedules}
        self.fail_advance_for: set[str] = set()
        self.fetch_error: Optional[Exception] = None
        self.rejected: list[RejectedScheduleRow] = []

    async def fetch_due_schedules(self, start: date, end: date) -> DueSchedules:
        if self.fetch_error:
            raise self.fetch_error
        due = [
            s for s in self.schedules.values()
            if s.is_enabled and start <= s.next_due_at <= end
        ]
        return DueSchedules(
            schedules=sorted(due, key=lambda s: (s.next_due_at, s.id)),
            rejected=list(self.rejected),
        )

    async def advance_schedule(self, schedule_id: str, next_due_at: date) -> None:
        if schedule_id in self.fail_advance_for:
            raise PersistenceError(f"Failed to advance schedule: {schedule_id}")
        schedule = self.schedules[schedule_id]
        self.schedules[schedule_id] = schedule.model_copy(update={"next_due_at": next_due_at})


class InMemoryTaskStore:
    """Enforces the (schedule_id, scheduled_date) uniqueness the database provides."""

    def __init__(self):
        self.tasks: dict[str, ScheduledMaintenanceTask] = {}
        self.fail_insert_for: set[str] = set()
        self._ids = itertools.count(1)

    def _has(self, schedule_id: str, scheduled_date: date) -> bool:
        return any(
            t.schedule_id == schedule_id and t.scheduled_date == scheduled_date
            for t in self.tasks.values()
        )

    async def task_exists(self, schedule_id: str, scheduled_date: date) -> bool:
        return self._has(schedule_id, scheduled_date)

    async def insert_task(self, task: ScheduledMaintenanceTask) -> ScheduledMaintenanceTask:
        if task.schedule_id in self.fail_insert_for:
            raise PersistenceError("Failed to insert maintenance task: connection reset")
        if self._has(task.schedule_id, task.scheduled_date):
            raise DuplicateTaskError("duplicate key value violates unique constraint")
        created = task.model_copy(update={"id": f"task-{next(self._ids)}"})
        self.tasks[created.id] = created
        return created

    async def delete_task(self, task_id: str) -> None:
        self.tasks.pop(task_id, None)

    def for_schedule(self, schedule_id: str) -> list[ScheduledMaintenanceTask]:
        return [t for t in self.tasks.values() if t.schedule_id == schedule_id]


class FakeBookingCalendar:
    def __init__(self, bookings: Optional[list[Booking]] = None):
        self.bookings = list(bookings or [])
        self.failing_properties: set[str] = set()
        self.calls: list[tuple[str, date]] = []

    async def has_conflict(self, property_id: str, day: date) -> bool:
        self.calls.append((property_id, day))
        if property_id in self.failing_properties:
            raise TransientLookupError("booking conflict lookup failed after 3 attempts: timed out")
        return any(b.property_id == property_id and b.occupies(day) for b in self.bookings)


class FakeVendorDirectory:
    def __init__(self, vendors: Optional[list[Vendor]] = None):
        self.vendors = list(vendors or [])

    async def get_eligible_vendor(self, vendor_id: str) -> Optional[Vendor]:
        for vendor in self.vendors:
            if vendor.id == vendor_id and vendor.is_eligible:
                return vendor
        return None

    async def list_candidates(self, category: str, limit: int) -> list[Vendor]:
        matching = [v for v in self.vendors if v.is_eligible and category in v.specialty]
        return sorted(matching, key=candidate_sort_key)[:limit]
