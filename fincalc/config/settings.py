"""
Configuration Management for the Calculation Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable limits are centralized here.
Security ceilings, cache sizing and computation budgets can be tightened per
deployment without touching the calculators, and everything is validated at
startup.
"""

from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecuritySettings(BaseSettings):
    """Input bounds, overflow ceilings and rate limiting."""

    model_config = SettingsConfigDict(
        env_prefix="FINCALC_SECURITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Numeric bounds
    max_principal: float = Field(
        default=1e9,
        gt=0,
        description="Largest principal / initial value accepted"
    )
    min_interest_rate: float = Field(
        default=-0.5,
        description="Lowest annual rate accepted (as a decimal)"
    )
    max_interest_rate: float = Field(
        default=2.0,
        description="Highest annual rate accepted (as a decimal)"
    )
    max_projection_years: int = Field(
        default=100,
        ge=1,
        description="Longest projection horizon in years"
    )
    min_frequency: int = Field(default=1, ge=1)
    max_frequency: int = Field(default=365, ge=1)
    max_iterations: int = Field(
        default=10000,
        ge=1,
        description="Most Monte Carlo paths per simulation"
    )

    # Overflow / denial-of-service guards
    overflow_ceiling: float = Field(
        default=1e15,
        gt=0,
        description="Ceiling for |rate| * years * principal"
    )
    max_simulation_operations: float = Field(
        default=1e8,
        gt=0,
        description="Ceiling for iterations * years * 12"
    )

    # String sanitization
    max_string_length: int = Field(
        default=1000,
        ge=1,
        description="Strings are truncated to this length"
    )

    # Rate limiting
    rate_limit_max_requests: int = Field(
        default=100,
        ge=1,
        description="Requests allowed per caller per window"
    )
    rate_limit_window_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Sliding window length in seconds"
    )

    # Security event history kept in memory
    event_history_size: int = Field(default=500, ge=0)

    @model_validator(mode="after")
    def validate_ranges(self) -> "SecuritySettings":
        if self.min_interest_rate >= self.max_interest_rate:
            raise ValueError("min_interest_rate must be below max_interest_rate")
        if self.min_frequency > self.max_frequency:
            raise ValueError("min_frequency cannot exceed max_frequency")
        return self


class CacheSettings(BaseSettings):
    """Result cache sizing."""

    model_config = SettingsConfigDict(
        env_prefix="FINCALC_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    enabled: bool = Field(default=True)
    max_entries: int = Field(
        default=1000,
        ge=1,
        description="Oldest entries are evicted past this size"
    )
    ttl_seconds: Optional[float] = Field(
        default=None,
        description="Entry lifetime; None keeps entries until cleared or evicted"
    )

    @field_validator("ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("ttl_seconds must be positive when set")
        return v


class ComputationSettings(BaseSettings):
    """Budgets for the numeric core."""

    model_config = SettingsConfigDict(
        env_prefix="FINCALC_COMPUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    monte_carlo_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Hard wall-clock limit for one Monte Carlo run"
    )
    max_payoff_months: int = Field(
        default=1200,
        ge=1,
        description="A debt plan still running after this many months is non-convergent"
    )
    max_metrics: Optional[int] = Field(
        default=None,
        description="Bound on the metrics log; None leaves truncation to the caller"
    )
    default_inflation_rate: float = Field(
        default=0.03,
        ge=-0.5,
        le=2.0,
        description="Inflation used for Monte Carlo real values when none is given"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    security: SecuritySettings = Field(default_factory=SecuritySettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    computation: ComputationSettings = Field(default_factory=ComputationSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get engine settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, Any]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error with the message for each invalid group.
    Useful for startup checks.
    """
    results = {}

    for name, factory in (
        ("security", SecuritySettings),
        ("cache", CacheSettings),
        ("computation", ComputationSettings),
    ):
        try:
            factory()
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
