"""Maintenance schedule and template read models."""

from typing import Optional
from datetime import date
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models._dates import coerce_calendar_date


class PropertyRef(BaseModel):
    """Minimal property projection joined onto a schedule."""
    id: str = Field(..., description="Property ID")
    name: Optional[str] = Field(None, description="Property display name")


class MaintenanceTemplate(BaseModel):
    """Work definition a schedule is an instance of."""
    id: str = Field(..., description="Template ID")
    name: str = Field(..., description="Template name, e.g. 'HVAC filter change'")
    category: str = Field(..., description="Category used for vendor specialty matching")
    frequency_months: int = Field(..., ge=1, description="Default recurrence in months")
    preferred_months: Optional[list[int]] = Field(None, description="Preferred calendar months (1-12)")
    requires_vacancy: bool = Field(default=False, description="Work cannot happen while a guest occupies the unit")
    description: Optional[str] = None
    estimated_cost: Optional[float] = None
    is_active: Optional[bool] = None

    @field_validator("preferred_months")
    @classmethod
    def check_months(cls, months: Optional[list[int]]) -> Optional[list[int]]:
        if months and any(m < 1 or m > 12 for m in months):
            raise ValueError("preferred_months must contain values between 1 and 12")
        return months


class MaintenanceSchedule(BaseModel):
    """A property's recurring maintenance obligation, joined with its template and property."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Schedule ID")
    property_id: str = Field(..., description="Property ID")
    template_id: str = Field(..., description="Template ID")
    is_enabled: bool = Field(default=True, description="Disabled schedules are never generated")
    preferred_vendor_id: Optional[str] = Field(None, description="Vendor pinned by an operator")
    next_due_at: date = Field(..., description="Calendar date of the next occurrence")
    custom_frequency_months: Optional[int] = Field(None, ge=1, description="Overrides template frequency")
    last_completed_at: Optional[str] = None
    updated_at: Optional[str] = None
    property_ref: Optional[PropertyRef] = Field(None, alias="property", description="Joined property row")
    template: Optional[MaintenanceTemplate] = None

    @field_validator("custom_frequency_months", mode="before")
    @classmethod
    def blank_frequency_to_template(cls, value):
        # 0 and "" mean no override; the template frequency applies
        return value or None

    @field_validator("next_due_at", mode="before")
    @classmethod
    def normalize_due_date(cls, value):
        return coerce_calendar_date(value)

    @property
    def effective_frequency_months(self) -> int:
        """Custom frequency when set, otherwise the template default."""
        if self.custom_frequency_months:
            return self.custom_frequency_months
        if self.template is None:
            raise ValueError(f"Schedule {self.id} has no template to take a frequency from")
        return self.template.frequency_months

    @property
    def property_name(self) -> str:
        if self.property_ref and self.property_ref.name:
            return self.property_ref.name
        return self.property_id


class RejectedScheduleRow(BaseModel):
    """A due schedule row that could not be read into a MaintenanceSchedule."""
    schedule_id: str = Field(..., description="Schedule ID, or 'unknown' when the row has none")
    error: str


class DueSchedules(BaseModel):
    """Result of the due-schedules query: rows that validated and rows that did not."""
    schedules: list[MaintenanceSchedule] = Field(default_factory=list)
    rejected: list[RejectedScheduleRow] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.schedules) + len(self.rejected)
