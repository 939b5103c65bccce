"""Guest booking model (read-only)."""

from enum import Enum
from typing import Optional
from datetime import date
from pydantic import BaseModel, Field, field_validator

from src.models._dates import coerce_calendar_date


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"
    INQUIRY = "inquiry"


# Only these statuses block a maintenance visit
OCCUPYING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.ARRIVED.value)


class Booking(BaseModel):
    """A guest stay. Arrival and departure are both inclusive."""
    id: Optional[str] = None
    property_id: str
    arrival_date: date
    departure_date: date
    status: str = Field(default=BookingStatus.CONFIRMED.value)

    @field_validator("arrival_date", "departure_date", mode="before")
    @classmethod
    def normalize_dates(cls, value):
        return coerce_calendar_date(value)

    def occupies(self, day: date) -> bool:
        """True if this booking blocks maintenance on ``day``."""
        return self.status in OCCUPYING_STATUSES and self.arrival_date <= day <= self.departure_date
