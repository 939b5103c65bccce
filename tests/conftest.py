"""Shared pytest fixtures and configuration."""

import os
import pytest
from datetime import date
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOOKUP_RETRY_BACKOFF_SECONDS", "0")

from src.models.booking import Booking
from src.models.vendor import Vendor
from src.services.task_generator import TaskGenerator
from src.services.vendor_scorer import VendorScorer
from src.utils.config import EngineConfig
from tests.utils.fakes import (
    FakeBookingCalendar,
    FakeVendorDirectory,
    InMemoryScheduleStore,
    InMemoryTaskStore,
)
from tests.utils.factories import create_booking_data, create_vendor_data

TODAY = date(2025, 1, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def engine_config() -> EngineConfig:
    """Default config with retries made instant."""
    return EngineConfig(lookup_retry_backoff_seconds=0, lookup_timeout_seconds=1)


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def booking_calendar() -> FakeBookingCalendar:
    return FakeBookingCalendar()


@pytest.fixture
def vendor_directory() -> FakeVendorDirectory:
    return FakeVendorDirectory([
        Vendor(**create_vendor_data(vendor_id="vendor-hvac", specialty=["hvac"])),
        Vendor(**create_vendor_data(vendor_id="vendor-pool", specialty=["pool"])),
    ])


@pytest.fixture
def make_generator(task_store, booking_calendar, vendor_directory, engine_config):
    """Factory: build a TaskGenerator over the given schedules and the shared fakes."""
    def _make(schedules, config: EngineConfig = None):
        config = config or engine_config
        schedule_store = InMemoryScheduleStore(schedules)
        generator = TaskGenerator(
            schedule_store=schedule_store,
            task_store=task_store,
            calendar=booking_calendar,
            scorer=VendorScorer(vendor_directory, weights=config.scoring, candidate_limit=config.vendor_candidate_limit),
            config=config,
        )
        return generator, schedule_store
    return _make


@pytest.fixture
def book(booking_calendar):
    """Add a confirmed booking to the fake calendar."""
    def _book(property_id: str, arrival: date, departure: date, status: str = "confirmed") -> Booking:
        booking = Booking(**create_booking_data(property_id, arrival, departure, status))
        booking_calendar.bookings.append(booking)
        return booking
    return _book


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2025-01-15 12:00:00") as frozen_time:
        yield frozen_time
