"""Observability models: performance metrics, cache and rate-limit statistics."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PerformanceMetric(BaseModel):
    """One engine invocation."""

    model_config = ConfigDict(frozen=True)

    function_name: str
    execution_time_ms: float = Field(..., ge=0)
    timestamp: datetime = Field(default_factory=_utcnow)
    cache_hit: bool = False
    input_size: int = Field(
        default=0,
        ge=0,
        description="Size of the serialized parameters in bytes"
    )
    complexity: Optional[float] = Field(
        default=None,
        description="Rough amount of work (periods, paths x months, debts x months)"
    )
    succeeded: bool = True
    error_type: Optional[str] = None


class FunctionSummary(BaseModel):
    function_name: str
    calls: int
    failures: int
    cache_hits: int
    average_time_ms: float
    max_time_ms: float


class CacheStats(BaseModel):
    size: int
    max_entries: int
    hits: int
    misses: int
    hit_rate: float = Field(..., ge=0, le=1)
    evictions: int


class RateLimitStats(BaseModel):
    tracked_callers: int
    requests_in_window: int
    average_requests_per_caller: float
    max_requests: int
    window_seconds: float


class SecurityStats(BaseModel):
    """Snapshot returned by the engine's security statistics call."""

    rate_limit: RateLimitStats
    events_recorded: int
    events_by_type: dict[str, int]
