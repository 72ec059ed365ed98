"""
Calculation Result Models

Results are frozen and use tuples for every collection. The same instance may
be handed to many callers from the result cache, so nothing a caller does to
its copy can leak into another caller's result.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fincalc.models.params import DebtStrategy


class ResultModel(BaseModel):
    """Base for all calculator outputs."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# COMPOUND INTEREST
# =============================================================================

class CompoundInterestBreakdown(ResultModel):
    """How the future value splits between the principal and the contributions."""

    principal_growth: float = Field(
        ...,
        description="Future value of the starting principal alone"
    )
    contribution_growth: float = Field(
        ...,
        description="Future value of the contribution stream alone"
    )
    compound_interest: float = Field(
        ...,
        description="Total interest earned on principal and contributions"
    )


class DetailedCompoundInterestResult(ResultModel):
    future_value: float
    total_contributions: float
    total_interest_earned: float
    effective_annual_rate: float
    breakdown: CompoundInterestBreakdown


# =============================================================================
# MONTE CARLO
# =============================================================================

PERCENTILES: tuple[int, ...] = (5, 10, 25, 50, 75, 90, 95)

# band name -> (lower percentile, upper percentile)
CONFIDENCE_BANDS: dict[str, tuple[int, int]] = {
    "p90": (5, 95),
    "p80": (10, 90),
    "p50": (25, 75),
}


class PercentileProjection(ResultModel):
    """Final portfolio value at one percentile of the simulated paths."""

    percentile: int = Field(..., ge=0, le=100)
    final_value: float
    real_value: float = Field(
        ...,
        description="Final value deflated to today's money"
    )


class PercentileValue(ResultModel):
    percentile: int = Field(..., ge=0, le=100)
    value: float


class ConfidenceBand(ResultModel):
    """Range of final values between two percentiles, named e.g. p90."""

    name: str
    lower_percentile: int = Field(..., ge=0, le=100)
    upper_percentile: int = Field(..., ge=0, le=100)
    min: float
    max: float


class MonteCarloStatistics(ResultModel):
    mean: float
    median: float
    standard_deviation: float
    skewness: float
    kurtosis: float = Field(..., description="Excess kurtosis")
    probability_of_loss: float = Field(..., ge=0, le=1)
    probability_of_target: float = Field(..., ge=0, le=1)


class YearlyProjection(ResultModel):
    year: int = Field(..., ge=1)
    median: float
    mean: float
    percentiles: tuple[PercentileValue, ...] = Field(
        ...,
        description="Value at each reported percentile for this year"
    )

    def value_at(self, percentile: int) -> float:
        for point in self.percentiles:
            if point.percentile == percentile:
                return point.value
        raise KeyError(f"No value for percentile {percentile}")


class MonteCarloResult(ResultModel):
    """Distribution of outcomes across all simulated paths."""

    iterations: int
    projections: tuple[PercentileProjection, ...]
    statistics: MonteCarloStatistics
    confidence_intervals: tuple[ConfidenceBand, ...]
    yearly_projections: tuple[YearlyProjection, ...]

    def projection_at(self, percentile: int) -> PercentileProjection:
        for projection in self.projections:
            if projection.percentile == percentile:
                return projection
        raise KeyError(f"No projection for percentile {percentile}")

    def band(self, name: str) -> ConfidenceBand:
        for band in self.confidence_intervals:
            if band.name == name:
                return band
        raise KeyError(f"No confidence band named {name}")


# =============================================================================
# DEBT PAYOFF
# =============================================================================

class PayoffScheduleEntry(ResultModel):
    """
    One debt's activity in one month.

    payment == minimum_applied + extra_applied
    payment == principal_payment + interest_payment
    """

    month: int = Field(..., ge=0)
    debt_id: str
    debt_name: str
    payment: float = Field(..., ge=0)
    principal_payment: float
    interest_payment: float = Field(..., ge=0)
    minimum_applied: float = Field(..., ge=0)
    extra_applied: float = Field(..., ge=0)
    remaining_balance: float = Field(..., ge=0)
    is_paid_off: bool


class DebtPayoffOrder(ResultModel):
    debt_id: str
    debt_name: str
    order: int = Field(..., ge=1)
    payoff_month: int = Field(..., ge=0)
    total_interest: float = Field(..., ge=0)


class DebtPayoffResult(ResultModel):
    """Full month-by-month payoff plan."""

    strategy: DebtStrategy
    debt_order: tuple[DebtPayoffOrder, ...]
    total_time: int = Field(..., ge=0, description="Months until the last debt is paid")
    total_interest: float = Field(..., ge=0)
    monthly_savings: float = Field(
        ...,
        ge=0,
        description="Extra payment applied on top of the minimums"
    )
    payoff_schedule: tuple[PayoffScheduleEntry, ...]
    warnings: tuple[str, ...] = ()

    def schedule_for(self, debt_id: str) -> list[PayoffScheduleEntry]:
        return [e for e in self.payoff_schedule if e.debt_id == debt_id]


class StrategySummary(ResultModel):
    strategy: DebtStrategy
    total_interest: float
    total_time: int
    debt_order: tuple[str, ...]


class DebtStrategyComparison(ResultModel):
    """Snowball and avalanche run on the same debts."""

    snowball: StrategySummary
    avalanche: StrategySummary
    interest_savings: float = Field(
        ...,
        description="Interest the avalanche plan saves over the snowball plan"
    )
    time_savings: int = Field(
        ...,
        description="Months the avalanche plan saves over the snowball plan"
    )
    recommended_strategy: DebtStrategy


# =============================================================================
# FIRE NUMBER
# =============================================================================

class FireVariants(ResultModel):
    lean: float
    standard: float
    fat: float
    coast: float
    barista: float


class StressTestResult(ResultModel):
    scenario: str
    adjusted_fire_number: float
    percentage_increase: float = Field(
        ...,
        description="Percent change from the base FIRE number"
    )
    risk_level: str = Field(..., pattern="^(low|medium|high)$")


class FireNumberResult(ResultModel):
    """Savings target for financial independence."""

    annual_expenses: float
    withdrawal_rate: float
    base_fire_number: float
    fire_number: float = Field(
        ...,
        description="Base number adjusted for cost of living and safety margin"
    )
    variants: FireVariants
    stress_tests: tuple[StressTestResult, ...]
    recommendations: tuple[str, ...]
    highest_risk_scenario: Optional[str] = None


class CategoryFireBreakdown(ResultModel):
    category: str
    current_annual: float
    projected_annual: float
    fire_contribution: float = Field(
        ...,
        description="Share of the FIRE number funding this category"
    )
    essential: bool
    geographic_adjustment: float


class GeographicAdjustment(ResultModel):
    location: str
    cost_of_living_index: float
    total_adjustment: float
    adjusted_fire_number: float


class InflationImpact(ResultModel):
    current_total: float
    projected_total: float
    inflation_increase: float
    fire_number_increase: float


class SavingsSuggestion(ResultModel):
    category: str
    suggestion: str
    potential_savings: float = Field(
        ...,
        description="Reduction in the FIRE number if the suggestion is followed"
    )
    difficulty: str = Field(..., pattern="^(easy|medium|hard)$")


class ExpenseBasedFireResult(ResultModel):
    """FIRE number summed over expense categories."""

    total_fire_number: float
    category_breakdown: tuple[CategoryFireBreakdown, ...]
    geographic_adjustments: GeographicAdjustment
    inflation_impact: InflationImpact
    optimization_suggestions: tuple[SavingsSuggestion, ...]
