"""Error handling utilities."""


class MaintenanceEngineError(Exception):
    """Base exception for the preventive maintenance engine."""
    pass


class ConfigurationError(MaintenanceEngineError):
    """Invalid or missing configuration."""
    pass


class SupabaseError(MaintenanceEngineError):
    """Supabase operation error."""
    retryable = False


class TransientLookupError(SupabaseError):
    """Booking or vendor read failed after all retry attempts."""
    retryable = True


class PersistenceError(SupabaseError):
    """Task insert/delete or schedule update failed."""
    pass


class DuplicateTaskError(PersistenceError):
    """A task already exists for the (schedule, scheduled date) pair."""
    pass


class ScheduleQueryError(SupabaseError):
    """Due schedules could not be enumerated."""
    retryable = True
