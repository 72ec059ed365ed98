"""
Numeric core.

Pure, synchronous calculators. None of them share state, touch the cache or
log metrics; the engine does that around them.
"""

from fincalc.calculators.compound_interest import calculate_compound_interest
from fincalc.calculators.debt_payoff import (
    calculate_debt_payoff,
    compare_strategies,
    order_debts,
)
from fincalc.calculators.fire import (
    DEFAULT_STRESS_SCENARIOS,
    calculate_expense_based_fire,
    calculate_fire_number,
)
from fincalc.calculators.monte_carlo import run_monte_carlo

__all__ = [
    "DEFAULT_STRESS_SCENARIOS",
    "calculate_compound_interest",
    "calculate_debt_payoff",
    "calculate_expense_based_fire",
    "calculate_fire_number",
    "compare_strategies",
    "order_debts",
    "run_monte_carlo",
]
