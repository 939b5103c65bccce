"""Vendor models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class VendorStatus(str, Enum):
    ACTIVE = "active"
    PREFERRED = "preferred"
    INACTIVE = "inactive"
    BLOCKED = "blocked"


ELIGIBLE_VENDOR_STATUSES = (VendorStatus.ACTIVE.value, VendorStatus.PREFERRED.value)


class Vendor(BaseModel):
    """Service provider with its track record."""
    id: str = Field(..., description="Vendor ID")
    name: Optional[str] = Field(None, description="Company or contact name")
    status: VendorStatus = Field(default=VendorStatus.ACTIVE)
    specialty: list[str] = Field(default_factory=list, description="Specialty categories")
    average_rating: Optional[float] = Field(None, ge=0, le=5)
    average_response_time_hours: Optional[float] = Field(None, ge=0)
    total_jobs_completed: Optional[int] = Field(None, ge=0)
    insurance_verified: bool = Field(default=False)

    @property
    def is_eligible(self) -> bool:
        return self.status.value in ELIGIBLE_VENDOR_STATUSES


class VendorSelection(BaseModel):
    """Outcome of vendor auto-assignment."""
    vendor_id: Optional[str] = None
    reason: str
    score: Optional[float] = None

    @property
    def needs_manual_assignment(self) -> bool:
        return self.vendor_id is None
