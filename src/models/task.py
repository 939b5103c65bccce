"""Scheduled maintenance task model."""

from enum import Enum
from typing import Optional
from datetime import date
from pydantic import BaseModel, Field, field_validator

from src.models._dates import coerce_calendar_date


class TaskStatus(str, Enum):
    """Lifecycle states; this engine only creates SCHEDULED tasks."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


class ScheduledMaintenanceTask(BaseModel):
    """One generated occurrence of a maintenance schedule."""
    id: Optional[str] = Field(None, description="Task ID (assigned by the database)")
    schedule_id: str = Field(..., description="Owning schedule ID")
    property_id: str = Field(..., description="Property ID")
    template_id: str = Field(..., description="Template ID")
    assigned_vendor_id: Optional[str] = Field(None, description="Assigned vendor, null when nobody qualified")
    scheduled_date: date = Field(..., description="Date the work is planned for")
    status: TaskStatus = Field(default=TaskStatus.SCHEDULED)
    auto_assigned: bool = Field(default=True, description="Vendor chosen without human input")
    assignment_reason: str = Field(..., description="Why this vendor (or none) was assigned")
    needs_manual_assignment: bool = Field(default=False, description="An operator must pick a vendor")
    notes: Optional[str] = Field(None, description="Reschedule/override note")
    created_at: Optional[str] = None

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def normalize_scheduled_date(cls, value):
        return coerce_calendar_date(value)

    def to_row(self) -> dict:
        """Serialize for insertion into scheduled_maintenance_tasks."""
        return self.model_dump(mode="json", exclude={"id", "created_at"})
