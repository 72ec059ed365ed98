"""
Monte Carlo Portfolio Simulator

All paths are simulated together: each month draws one normally distributed
return per path, applies it to every balance, then adds the monthly
contribution. Balances cannot go below zero.

Cost is O(iterations x months). The month loop checks a cancellation event
so a caller enforcing a wall-clock limit can stop a long run.
"""

import threading
from typing import Optional

import numpy as np

from fincalc.calculators.stats import moments, percentiles, share_at_or_above, share_below
from fincalc.errors import ComputationTimeoutError
from fincalc.models.params import MonteCarloParams
from fincalc.models.results import (
    CONFIDENCE_BANDS,
    PERCENTILES,
    ConfidenceBand,
    MonteCarloResult,
    MonteCarloStatistics,
    PercentileProjection,
    PercentileValue,
    YearlyProjection,
)


DEFAULT_INFLATION_RATE = 0.03


def _simulate_paths(
    params: MonteCarloParams,
    cancel_event: Optional[threading.Event],
) -> np.ndarray:
    """
    Walk every path month by month.

    Returns:
        Year-end balances, shape (years_to_project, iterations).
    """
    rng = np.random.default_rng(params.seed)
    n = params.iterations
    monthly_return = params.expected_return / 12
    monthly_volatility = params.volatility / np.sqrt(12)

    balances = np.full(n, params.initial_value, dtype=float)
    year_end = np.empty((params.years_to_project, n))

    for month in range(1, params.total_months + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise ComputationTimeoutError("run_monte_carlo")

        if monthly_volatility > 0:
            returns = rng.normal(monthly_return, monthly_volatility, n)
        else:
            returns = monthly_return

        balances = balances * (1 + returns) + params.monthly_contribution
        np.maximum(balances, 0.0, out=balances)

        if month % 12 == 0:
            year_end[month // 12 - 1] = balances

    return year_end


def run_monte_carlo(
    params: MonteCarloParams,
    cancel_event: Optional[threading.Event] = None,
    default_inflation_rate: float = DEFAULT_INFLATION_RATE,
) -> MonteCarloResult:
    """
    Simulate the distribution of final portfolio values.

    Args:
        params: Validated simulation parameters
        cancel_event: When set, the run stops with ComputationTimeoutError
        default_inflation_rate: Used for real values when params has none

    Returns:
        MonteCarloResult with percentiles, statistics, confidence bands and
        one yearly projection per simulated year.
    """
    year_end = _simulate_paths(params, cancel_event)
    final = year_end[-1]

    inflation = (
        params.inflation_rate
        if params.inflation_rate is not None
        else default_inflation_rate
    )
    deflator = (1 + inflation) ** params.years_to_project

    final_percentiles = percentiles(final, PERCENTILES)
    projections = tuple(
        PercentileProjection(
            percentile=p,
            final_value=value,
            real_value=value / deflator,
        )
        for p, value in final_percentiles.items()
    )

    mean, std, skewness, kurtosis = moments(final)
    statistics = MonteCarloStatistics(
        mean=mean,
        median=float(np.median(final)),
        standard_deviation=std,
        skewness=skewness,
        kurtosis=kurtosis,
        probability_of_loss=share_below(final, params.total_invested),
        probability_of_target=(
            share_at_or_above(final, params.target_value)
            if params.target_value is not None
            else 0.0
        ),
    )

    confidence_intervals = tuple(
        ConfidenceBand(
            name=name,
            lower_percentile=low,
            upper_percentile=high,
            min=final_percentiles[low],
            max=final_percentiles[high],
        )
        for name, (low, high) in CONFIDENCE_BANDS.items()
    )

    yearly_projections = []
    for index, balances in enumerate(year_end):
        yearly_projections.append(YearlyProjection(
            year=index + 1,
            median=float(np.median(balances)),
            mean=float(np.mean(balances)),
            percentiles=tuple(
                PercentileValue(percentile=p, value=value)
                for p, value in percentiles(balances, PERCENTILES).items()
            ),
        ))

    return MonteCarloResult(
        iterations=params.iterations,
        projections=projections,
        statistics=statistics,
        confidence_intervals=confidence_intervals,
        yearly_projections=tuple(yearly_projections),
    )
