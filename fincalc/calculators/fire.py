"""
FIRE Number Calculator

The savings target at which investment withdrawals cover annual expenses:
annual_expenses / withdrawal_rate, adjusted for local cost of living and a
safety margin. Variants and stress scenarios are reported against the
unadjusted base number.

The expense-based variant builds the number up category by category: each
budget line is scaled by local cost of living (where it is sensitive to it),
inflated over the projection horizon, then divided by the withdrawal rate.
"""

from fincalc.models.params import (
    ExpenseBasedFireParams,
    ExpenseCategory,
    FireNumberParams,
    StressScenario,
)
from fincalc.models.results import (
    CategoryFireBreakdown,
    ExpenseBasedFireResult,
    FireNumberResult,
    FireVariants,
    GeographicAdjustment,
    InflationImpact,
    SavingsSuggestion,
    StressTestResult,
)


DEFAULT_STRESS_SCENARIOS: tuple[StressScenario, ...] = (
    StressScenario(
        name="Market Downturn",
        market_return_adjustment=-0.02,
        expense_adjustment=0.1,
    ),
    StressScenario(
        name="High Inflation",
        market_return_adjustment=0.0,
        expense_adjustment=0.15,
    ),
    StressScenario(
        name="Economic Recession",
        market_return_adjustment=-0.03,
        expense_adjustment=0.2,
    ),
)

# stressed withdrawal rates never drop below this
MIN_WITHDRAWAL_RATE = 0.025

LEAN_EXPENSE_FACTOR = 0.7
FAT_EXPENSE_FACTOR = 2.0
COAST_FACTOR = 0.6
BARISTA_FACTOR = 0.5


def _risk_level(percentage_increase: float) -> str:
    if percentage_increase > 50:
        return "high"
    if percentage_increase > 25:
        return "medium"
    return "low"


def _stress_test(
    scenario: StressScenario,
    annual_expenses: float,
    withdrawal_rate: float,
    base_fire_number: float,
) -> StressTestResult:
    stressed_rate = max(
        MIN_WITHDRAWAL_RATE,
        withdrawal_rate + scenario.market_return_adjustment,
    )
    stressed_number = annual_expenses * (1 + scenario.expense_adjustment) / stressed_rate
    increase = (stressed_number - base_fire_number) / base_fire_number * 100

    return StressTestResult(
        scenario=scenario.name,
        adjusted_fire_number=stressed_number,
        percentage_increase=increase,
        risk_level=_risk_level(increase),
    )


def _recommendations(params: FireNumberParams) -> list[str]:
    recommendations = []
    if params.withdrawal_rate > 0.04:
        recommendations.append(
            "Withdrawal Rate: consider reducing the withdrawal rate to 4% or lower "
            "for increased safety"
        )
    if params.safety_margin < 0.1:
        recommendations.append(
            "Safety Margin: consider adding a 10-20% safety margin for unexpected expenses"
        )
    return recommendations


def calculate_fire_number(params: FireNumberParams) -> FireNumberResult:
    annual_expenses = params.yearly_expenses
    withdrawal_rate = params.withdrawal_rate

    base = annual_expenses / withdrawal_rate
    adjusted = base * params.cost_of_living_multiplier * (1 + params.safety_margin)

    scenarios = (
        params.stress_scenarios
        if params.stress_scenarios is not None
        else DEFAULT_STRESS_SCENARIOS
    )
    stress_tests = tuple(
        _stress_test(scenario, annual_expenses, withdrawal_rate, base)
        for scenario in scenarios
    )
    worst = max(stress_tests, key=lambda t: t.percentage_increase, default=None)

    return FireNumberResult(
        annual_expenses=annual_expenses,
        withdrawal_rate=withdrawal_rate,
        base_fire_number=base,
        fire_number=adjusted,
        variants=FireVariants(
            lean=annual_expenses * LEAN_EXPENSE_FACTOR / withdrawal_rate,
            standard=base,
            fat=annual_expenses * FAT_EXPENSE_FACTOR / withdrawal_rate,
            coast=base * COAST_FACTOR,
            barista=base * BARISTA_FACTOR,
        ),
        stress_tests=stress_tests,
        recommendations=tuple(_recommendations(params)),
        highest_risk_scenario=worst.scenario if worst is not None else None,
    )


# =============================================================================
# EXPENSE-BASED FIRE
# =============================================================================

# how strongly each category follows the local cost-of-living index
GEOGRAPHIC_SENSITIVITY: dict[str, float] = {
    "housing": 1.2,
    "food": 0.8,
    "transportation": 0.9,
    "healthcare": 1.1,
    "utilities": 0.95,
    "entertainment": 0.85,
}

# category -> (suggestion, share of the category's FIRE contribution saved, difficulty)
SAVINGS_PLAYBOOK: dict[str, tuple[str, float, str]] = {
    "housing": (
        "Consider house hacking, downsizing, or relocating to a lower cost area",
        0.3,
        "hard",
    ),
    "transportation": (
        "Optimize transportation costs with public transit, biking, or car sharing",
        0.4,
        "medium",
    ),
    "food": (
        "Meal planning, cooking at home, and bulk buying can reduce food costs",
        0.25,
        "easy",
    ),
    "entertainment": (
        "Find free or low-cost entertainment alternatives",
        0.5,
        "easy",
    ),
    "utilities": (
        "Energy efficiency improvements and usage optimization",
        0.2,
        "medium",
    ),
}

DEFAULT_SAVINGS_SHARE = 0.15

# essential categories are only worth optimizing above this FIRE contribution
HIGH_IMPACT_CONTRIBUTION = 100_000


def _geographic_multiplier(category: ExpenseCategory, cost_of_living_index: float) -> float:
    if not category.geographic_sensitive:
        return 1.0
    return cost_of_living_index * GEOGRAPHIC_SENSITIVITY.get(category.category.lower(), 1.0)


def _category_breakdown(
    category: ExpenseCategory,
    params: ExpenseBasedFireParams,
) -> CategoryFireBreakdown:
    multiplier = _geographic_multiplier(category, params.cost_of_living_index)
    current_annual = category.monthly_amount * multiplier * 12
    projected_annual = current_annual * (1 + category.inflation_rate) ** params.projection_years

    return CategoryFireBreakdown(
        category=category.category,
        current_annual=current_annual,
        projected_annual=projected_annual,
        fire_contribution=projected_annual / params.withdrawal_rate,
        essential=category.essential,
        geographic_adjustment=multiplier,
    )


def _savings_suggestion(line: CategoryFireBreakdown) -> SavingsSuggestion:
    suggestion, share, difficulty = SAVINGS_PLAYBOOK.get(
        line.category.lower(),
        (
            f"Review {line.category} expenses for optimization opportunities",
            DEFAULT_SAVINGS_SHARE,
            "medium",
        ),
    )
    return SavingsSuggestion(
        category=line.category,
        suggestion=suggestion,
        potential_savings=line.fire_contribution * share,
        difficulty=difficulty,
    )


def calculate_expense_based_fire(params: ExpenseBasedFireParams) -> ExpenseBasedFireResult:
    """
    FIRE number as the sum of per-category contributions.

    Suggestions cover discretionary categories and any essential category
    whose contribution exceeds HIGH_IMPACT_CONTRIBUTION, largest savings first.
    """
    breakdown = tuple(
        _category_breakdown(category, params)
        for category in params.expense_categories
    )

    current_total = sum(line.current_annual for line in breakdown)
    projected_total = sum(line.projected_annual for line in breakdown)
    total_fire_number = sum(line.fire_contribution for line in breakdown)

    suggestions = sorted(
        (
            _savings_suggestion(line)
            for line in breakdown
            if not line.essential or line.fire_contribution > HIGH_IMPACT_CONTRIBUTION
        ),
        key=lambda s: s.potential_savings,
        reverse=True,
    )

    return ExpenseBasedFireResult(
        total_fire_number=total_fire_number,
        category_breakdown=breakdown,
        geographic_adjustments=GeographicAdjustment(
            location=params.geographic_location or "Unknown",
            cost_of_living_index=params.cost_of_living_index,
            total_adjustment=params.cost_of_living_index,
            adjusted_fire_number=total_fire_number,
        ),
        inflation_impact=InflationImpact(
            current_total=current_total,
            projected_total=projected_total,
            inflation_increase=projected_total - current_total,
            fire_number_increase=(projected_total - current_total) / params.withdrawal_rate,
        ),
        optimization_suggestions=tuple(suggestions),
    )
