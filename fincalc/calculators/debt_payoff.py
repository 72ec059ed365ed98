"""
Debt Payoff Optimizer

Simulates paying down several debts month by month under an ordering policy:

SNOWBALL: smallest balance first
AVALANCHE: highest interest rate first
CUSTOM: caller-supplied order

Every month each unpaid debt accrues interest and receives its own minimum
payment. A single pool (the extra payment, the minimums of debts already
paid off, and any minimum a debt did not need this month) goes to the first
unpaid debt in order, with the remainder rolling on to the next one.
"""

from collections import Counter

import structlog

from fincalc.errors import NonConvergenceError, ValidationError
from fincalc.models.params import Debt, DebtPayoffParams, DebtStrategy
from fincalc.models.results import (
    DebtPayoffOrder,
    DebtPayoffResult,
    DebtStrategyComparison,
    PayoffScheduleEntry,
    StrategySummary,
)
from fincalc.models.validation import ValidationIssue


logger = structlog.get_logger(__name__)

DEFAULT_MAX_MONTHS = 1200

# balances at or below this are treated as paid
_PAID_EPSILON = 1e-9


def order_debts(params: DebtPayoffParams) -> list[Debt]:
    """Debts in the order they receive the pool. Sorts are stable."""
    debts = list(params.debts)

    if params.strategy == DebtStrategy.SNOWBALL:
        return sorted(debts, key=lambda d: d.balance)

    if params.strategy == DebtStrategy.AVALANCHE:
        return sorted(debts, key=lambda d: -d.interest_rate)

    order = params.custom_order or ()
    if Counter(order) != Counter(params.debt_ids):
        raise ValidationError([ValidationIssue(
            field="custom_order",
            issue_type="invalid_order",
            message="custom_order must contain each debt id exactly once",
            severity="error",
        )])

    by_id = {debt.id: debt for debt in debts}
    return [by_id[debt_id] for debt_id in order]


def _underwater_warnings(debts: list[Debt]) -> list[str]:
    warnings = []
    for debt in debts:
        if debt.balance > _PAID_EPSILON and debt.minimum_payment <= debt.monthly_interest:
            warnings.append(
                f"Minimum payment on '{debt.name or debt.id}' ({debt.minimum_payment:.2f}) "
                f"does not cover its monthly interest ({debt.monthly_interest:.2f})"
            )
    return warnings


def calculate_debt_payoff(
    params: DebtPayoffParams,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> DebtPayoffResult:
    """
    Build a month-by-month payoff plan.

    Raises:
        ValidationError: custom order is not a permutation of the debt ids
        NonConvergenceError: the payments can never clear the debts, or the
            plan runs past max_months
    """
    ordered = order_debts(params)

    balances = {debt.id: debt.balance for debt in ordered}
    interest_paid = {debt.id: 0.0 for debt in ordered}
    payoff_month: dict[str, int] = {}
    schedule: list[PayoffScheduleEntry] = []

    for debt in ordered:
        if debt.balance <= _PAID_EPSILON:
            balances[debt.id] = 0.0
            payoff_month[debt.id] = 0
            schedule.append(PayoffScheduleEntry(
                month=0,
                debt_id=debt.id,
                debt_name=debt.name,
                payment=0.0,
                principal_payment=0.0,
                interest_payment=0.0,
                minimum_applied=0.0,
                extra_applied=0.0,
                remaining_balance=0.0,
                is_paid_off=True,
            ))

    unpaid = [debt for debt in ordered if debt.id not in payoff_month]
    warnings = _underwater_warnings(unpaid)
    for warning in warnings:
        logger.warning("debt_minimum_below_interest", detail=warning)

    capacity = params.extra_payment + sum(debt.minimum_payment for debt in ordered)
    first_interest = sum(debt.monthly_interest for debt in unpaid)
    if unpaid and capacity <= first_interest:
        raise NonConvergenceError(
            f"Total monthly payments ({capacity:.2f}) do not exceed the monthly "
            f"interest accrued ({first_interest:.2f}); the debts can never be paid off",
            debt_ids=[debt.id for debt in unpaid],
        )

    month = 0
    while unpaid:
        month += 1
        if month > max_months:
            raise NonConvergenceError(
                f"Debts are still outstanding after {max_months} months",
                debt_ids=[debt.id for debt in unpaid],
            )

        pool = params.extra_payment + sum(
            debt.minimum_payment for debt in ordered if debt.id in payoff_month
        )

        interest = {}
        for debt in unpaid:
            accrued = balances[debt.id] * debt.interest_rate / 12
            balances[debt.id] += accrued
            interest[debt.id] = accrued
            interest_paid[debt.id] += accrued

        minimum_applied = {}
        for debt in unpaid:
            applied = min(debt.minimum_payment, balances[debt.id])
            balances[debt.id] -= applied
            minimum_applied[debt.id] = applied
            pool += debt.minimum_payment - applied

        extra_applied = {debt.id: 0.0 for debt in unpaid}
        for debt in unpaid:
            if pool <= 0:
                break
            applied = min(pool, balances[debt.id])
            balances[debt.id] -= applied
            extra_applied[debt.id] = applied
            pool -= applied

        for debt in unpaid:
            if balances[debt.id] <= _PAID_EPSILON:
                balances[debt.id] = 0.0
                payoff_month[debt.id] = month

            payment = minimum_applied[debt.id] + extra_applied[debt.id]
            schedule.append(PayoffScheduleEntry(
                month=month,
                debt_id=debt.id,
                debt_name=debt.name,
                payment=payment,
                principal_payment=payment - interest[debt.id],
                interest_payment=interest[debt.id],
                minimum_applied=minimum_applied[debt.id],
                extra_applied=extra_applied[debt.id],
                remaining_balance=balances[debt.id],
                is_paid_off=balances[debt.id] == 0.0,
            ))

        unpaid = [debt for debt in unpaid if debt.id not in payoff_month]

    debt_order = tuple(
        DebtPayoffOrder(
            debt_id=debt.id,
            debt_name=debt.name,
            order=index + 1,
            payoff_month=payoff_month[debt.id],
            total_interest=interest_paid[debt.id],
        )
        for index, debt in enumerate(ordered)
    )

    return DebtPayoffResult(
        strategy=params.strategy,
        debt_order=debt_order,
        total_time=max(payoff_month.values()),
        total_interest=sum(interest_paid.values()),
        monthly_savings=params.extra_payment,
        payoff_schedule=tuple(schedule),
        warnings=tuple(warnings),
    )


def _summarize(result: DebtPayoffResult) -> StrategySummary:
    return StrategySummary(
        strategy=result.strategy,
        total_interest=result.total_interest,
        total_time=result.total_time,
        debt_order=tuple(entry.debt_id for entry in result.debt_order),
    )


def compare_strategies(
    params: DebtPayoffParams,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> DebtStrategyComparison:
    """
    Run snowball and avalanche on the same debts.

    Avalanche is recommended when it saves interest; otherwise snowball,
    whose early payoffs cost nothing extra.
    """
    snowball = calculate_debt_payoff(
        params.model_copy(update={"strategy": DebtStrategy.SNOWBALL, "custom_order": None}),
        max_months=max_months,
    )
    avalanche = calculate_debt_payoff(
        params.model_copy(update={"strategy": DebtStrategy.AVALANCHE, "custom_order": None}),
        max_months=max_months,
    )

    interest_savings = snowball.total_interest - avalanche.total_interest
    return DebtStrategyComparison(
        snowball=_summarize(snowball),
        avalanche=_summarize(avalanche),
        interest_savings=interest_savings,
        time_savings=snowball.total_time - avalanche.total_time,
        recommended_strategy=(
            DebtStrategy.AVALANCHE if interest_savings > 0.005 else DebtStrategy.SNOWBALL
        ),
    )
