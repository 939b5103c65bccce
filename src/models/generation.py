"""Generation pass summary models."""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ScheduleFailure(BaseModel):
    """A schedule whose processing failed during a pass."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    schedule_id: str
    stage: str = Field(..., description="load, idempotence_check, date_resolution, vendor_selection, persist, advance_schedule")
    error: str
    retryable: bool = False


class GenerationSummary(BaseModel):
    """Result of one generation pass, serialized camelCase for the trigger endpoint."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    tasks_created: int = 0
    tasks_skipped: int = 0
    schedules_processed: int = 0
    errors: list[ScheduleFailure] = Field(default_factory=list)
    error: Optional[str] = None

    def to_response(self) -> dict[str, Any]:
        """JSON body for the trigger endpoint; ``errors`` only appears when non-empty."""
        body = self.model_dump(by_alias=True, exclude_none=True)
        if not self.errors:
            body.pop("errors", None)
        if not self.success:
            return {"success": False, "error": self.error or "generation failed"}
        return body
