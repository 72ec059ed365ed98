"""
Calculation Parameter Models

These models define the strict input schemas for every calculator.
They are designed to:
1. Enforce the data-model invariants at the boundary (non-negative balances,
   frequency ranges, iteration counts)
2. Accept both snake_case names and the camelCase names used on the wire
3. Be immutable once validated, so the pure calculators can trust them
4. Dump to a canonical form for cache keys

DESIGN DECISION: Deployment-specific security ceilings (maximum principal,
rate range, overflow guards) are NOT encoded here. They live in the
validator, driven by settings, so they can be tightened without changing
the data contract.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class ParamsModel(BaseModel):
    """Base for all calculator inputs."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        loc_by_alias=False,
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        allow_inf_nan=False,
    )


# =============================================================================
# COMPOUND INTEREST
# =============================================================================

class CompoundInterestParams(ParamsModel):
    """Inputs for a discrete compound-interest projection."""

    principal: float = Field(
        ...,
        ge=0,
        description="Starting balance"
    )
    annual_rate: float = Field(
        ...,
        description="Nominal annual rate as a decimal (0.07 for 7%)"
    )
    compounding_frequency: int = Field(
        ...,
        ge=1,
        le=365,
        description="Compounding periods per year (1=annual, 12=monthly, 365=daily)"
    )
    time_in_years: float = Field(
        ...,
        ge=0,
        le=100,
        description="Projection horizon in years"
    )
    additional_contributions: float = Field(
        default=0.0,
        ge=0,
        description="Amount contributed every contribution period"
    )
    contribution_frequency: int = Field(
        default=12,
        ge=1,
        le=365,
        description="Contributions per year"
    )
    contribution_timing: Literal["begin", "end"] = Field(
        default="end",
        description="Whether a contribution earns interest in its own period"
    )

    @field_validator("contribution_timing", mode="before")
    @classmethod
    def normalize_timing(cls, v: Any) -> Any:
        """Accept the legacy 'beginning' spelling."""
        if isinstance(v, str) and v.strip().lower() == "beginning":
            return "begin"
        return v


# =============================================================================
# MONTE CARLO
# =============================================================================

class MonteCarloParams(ParamsModel):
    """Inputs for a Monte Carlo portfolio projection."""

    initial_value: float = Field(..., ge=0)
    monthly_contribution: float = Field(..., ge=0)
    years_to_project: int = Field(..., ge=1, le=100)
    expected_return: float = Field(
        ...,
        description="Expected annual return as a decimal"
    )
    volatility: float = Field(
        ...,
        ge=0,
        description="Annual standard deviation of returns"
    )
    iterations: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Number of simulated paths"
    )
    inflation_rate: Optional[float] = Field(
        default=None,
        description="Inflation used for real values; engine default when omitted"
    )
    target_value: Optional[float] = Field(
        default=None,
        ge=0,
        description="Goal amount for probability-of-target"
    )
    seed: Optional[int] = Field(
        default=None,
        ge=0,
        description="Random seed for reproducible runs"
    )

    @property
    def total_months(self) -> int:
        return self.years_to_project * 12

    @property
    def total_invested(self) -> float:
        return self.initial_value + self.monthly_contribution * self.total_months


# =============================================================================
# DEBT PAYOFF
# =============================================================================

class DebtStrategy(str, Enum):
    """
    Order in which debts receive the extra payment.

    SNOWBALL: smallest balance first
    AVALANCHE: highest interest rate first
    CUSTOM: caller-supplied order
    """
    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"
    CUSTOM = "custom"


class Debt(ParamsModel):
    """A single liability in a payoff plan."""

    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(default="", max_length=200)
    balance: float = Field(..., ge=0)
    interest_rate: float = Field(
        ...,
        ge=0,
        description="Annual rate as a decimal"
    )
    minimum_payment: float = Field(..., ge=0)

    @property
    def monthly_interest(self) -> float:
        return self.balance * self.interest_rate / 12


class DebtPayoffParams(ParamsModel):
    """
    Inputs for a multi-debt payoff plan.

    Cross-field rules (unique ids, custom order is a permutation of the ids)
    are checked by the validator so that every violation is reported at once.
    """

    debts: tuple[Debt, ...] = Field(..., min_length=1)
    extra_payment: float = Field(default=0.0, ge=0)
    strategy: DebtStrategy = Field(default=DebtStrategy.AVALANCHE)
    custom_order: Optional[tuple[str, ...]] = None

    @property
    def debt_ids(self) -> list[str]:
        return [debt.id for debt in self.debts]


# =============================================================================
# FIRE NUMBER
# =============================================================================

class StressScenario(ParamsModel):
    """An adverse scenario applied to a FIRE number."""

    name: str = Field(..., min_length=1, max_length=100)
    market_return_adjustment: float = Field(default=0.0, ge=-1, le=1)
    expense_adjustment: float = Field(default=0.0, ge=-1, le=5)


class FireNumberParams(ParamsModel):
    """Inputs for an expense-based FIRE number."""

    monthly_expenses: float = Field(default=0.0, ge=0)
    annual_expenses: Optional[float] = Field(default=None, ge=0)
    withdrawal_rate: float = Field(
        default=0.04,
        gt=0,
        le=1,
        description="Safe withdrawal rate (the 4% rule by default)"
    )
    safety_margin: float = Field(default=0.0, ge=0, le=1)
    cost_of_living_multiplier: float = Field(default=1.0, gt=0, le=10)
    stress_scenarios: Optional[tuple[StressScenario, ...]] = None

    @model_validator(mode="after")
    def require_expenses(self) -> "FireNumberParams":
        if self.monthly_expenses <= 0 and not self.annual_expenses:
            raise ValueError(
                "Monthly or annual expenses must be provided and greater than 0"
            )
        return self

    @property
    def yearly_expenses(self) -> float:
        return self.annual_expenses or self.monthly_expenses * 12


class ExpenseCategory(ParamsModel):
    """One line of a household budget."""

    category: str = Field(..., min_length=1, max_length=100)
    monthly_amount: float = Field(..., ge=0)
    inflation_rate: float = Field(
        default=0.0,
        ge=-0.5,
        le=2.0,
        description="Annual inflation expected for this category"
    )
    essential: bool = True
    geographic_sensitive: bool = Field(
        default=False,
        description="Whether local cost of living changes this expense"
    )


class ExpenseBasedFireParams(ParamsModel):
    """Inputs for a FIRE number built up from expense categories."""

    expense_categories: tuple[ExpenseCategory, ...] = Field(..., min_length=1)
    geographic_location: Optional[str] = Field(default=None, max_length=100)
    cost_of_living_index: float = Field(
        default=1.0,
        gt=0,
        le=10,
        description="Local cost of living relative to the baseline (1.0)"
    )
    withdrawal_rate: float = Field(default=0.04, gt=0, le=1)
    projection_years: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Years of category inflation applied before retirement"
    )
