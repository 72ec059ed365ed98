"""
Compound-Interest Calculator

Discrete compounding of a starting principal plus a recurring contribution
stream. Contributions are valued as an annuity over contribution periods,
using the rate per contribution period that is equivalent to the
compounding rate. This keeps the result correct when contributions are more
or less frequent than compounding (monthly deposits into an annually
compounded account, for example).
"""

from fincalc.models.params import CompoundInterestParams
from fincalc.models.results import (
    CompoundInterestBreakdown,
    DetailedCompoundInterestResult,
)


def _annuity_future_value(
    payment: float,
    rate: float,
    periods: float,
    at_beginning: bool,
) -> float:
    """Future value of `periods` equal payments growing at `rate` per period."""
    if payment == 0 or periods == 0:
        return 0.0
    if rate == 0:
        return payment * periods

    value = payment * ((1 + rate) ** periods - 1) / rate
    if at_beginning:
        value *= 1 + rate
    return value


def calculate_compound_interest(
    params: CompoundInterestParams,
) -> DetailedCompoundInterestResult:
    """
    Project a balance forward under discrete compounding.

    With a zero rate the projection degrades to plain addition, so
    future_value == principal + total_contributions exactly.
    """
    principal = params.principal
    years = params.time_in_years
    frequency = params.compounding_frequency
    contribution = params.additional_contributions
    contribution_periods = params.contribution_frequency * years

    total_contributions = contribution * contribution_periods

    if params.annual_rate == 0:
        principal_growth = principal
        contribution_growth = total_contributions
        effective_annual_rate = 0.0
    else:
        period_rate = params.annual_rate / frequency
        growth = 1 + period_rate

        principal_growth = principal * growth ** (frequency * years)

        contribution_rate = growth ** (frequency / params.contribution_frequency) - 1
        contribution_growth = _annuity_future_value(
            contribution,
            contribution_rate,
            contribution_periods,
            at_beginning=params.contribution_timing == "begin",
        )
        effective_annual_rate = growth ** frequency - 1

    future_value = principal_growth + contribution_growth
    total_interest = future_value - principal - total_contributions

    return DetailedCompoundInterestResult(
        future_value=future_value,
        total_contributions=total_contributions,
        total_interest_earned=total_interest,
        effective_annual_rate=effective_annual_rate,
        breakdown=CompoundInterestBreakdown(
            principal_growth=principal_growth,
            contribution_growth=contribution_growth,
            compound_interest=total_interest,
        ),
    )
