"""Engine configuration loaded from environment variables."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from src.utils.errors import ConfigurationError


class ScoringWeights(BaseModel):
    """Vendor scoring weights. Injected into the scorer so tests and deployments can override them."""
    rating_multiplier: float = Field(default=8.0, ge=0, description="Points per rating star (0-5)")
    default_rating: float = Field(default=3.0, ge=0, le=5, description="Rating assumed when a vendor has none")
    response_cap_hours: float = Field(default=48.0, gt=0, description="Response times above this earn nothing")
    response_multiplier: float = Field(default=0.625, ge=0, description="Points per hour under the cap")
    unknown_response_score: float = Field(default=15.0, ge=0, description="Score when response time is unknown")
    experience_cap_jobs: int = Field(default=100, ge=0, description="Completed jobs counted at most")
    experience_multiplier: float = Field(default=0.2, ge=0, description="Points per completed job")
    insurance_score: float = Field(default=10.0, ge=0)
    preferred_status_bonus: float = Field(default=15.0, ge=0)


class EngineConfig(BaseModel):
    """Tunables for a generation pass."""
    horizon_months: int = Field(default=1, ge=1, description="Look-ahead window for due schedules")
    vacancy_search_days: int = Field(default=7, ge=1, description="Days probed each direction around a conflict")
    vendor_candidate_limit: int = Field(default=5, ge=1, description="Vendors considered for scoring")
    lookup_timeout_seconds: float = Field(default=10.0, gt=0, description="Per-read timeout for booking/vendor lookups")
    lookup_max_attempts: int = Field(default=3, ge=1)
    lookup_retry_backoff_seconds: float = Field(default=0.5, ge=0)
    max_concurrency: int = Field(default=1, ge=1, description="Schedules processed concurrently")
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ

        values = {
            key: env[name]
            for key, name in _ENV_FIELDS.items()
            if env.get(name) not in (None, "")
        }
        weights = {
            field: env[f"VENDOR_SCORE_{field.upper()}"]
            for field in ScoringWeights.model_fields
            if env.get(f"VENDOR_SCORE_{field.upper()}") not in (None, "")
        }

        try:
            return cls(scoring=ScoringWeights(**weights), **values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid maintenance engine configuration: {e}") from e


_ENV_FIELDS = {
    "horizon_months": "MAINTENANCE_HORIZON_MONTHS",
    "vacancy_search_days": "VACANCY_SEARCH_DAYS",
    "vendor_candidate_limit": "VENDOR_CANDIDATE_LIMIT",
    "lookup_timeout_seconds": "LOOKUP_TIMEOUT_SECONDS",
    "lookup_max_attempts": "LOOKUP_MAX_ATTEMPTS",
    "lookup_retry_backoff_seconds": "LOOKUP_RETRY_BACKOFF_SECONDS",
    "max_concurrency": "GENERATION_MAX_CONCURRENCY",
}
