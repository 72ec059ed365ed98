"""Cross-field rules for debt payoff plans."""

from collections import Counter
from collections.abc import Mapping
from typing import Any

from fincalc.models.validation import ValidationIssue


def _debt_ids(debts: Any) -> list[str]:
    if not isinstance(debts, list):
        return []
    return [
        debt["id"]
        for debt in debts
        if isinstance(debt, Mapping) and isinstance(debt.get("id"), str)
    ]


def check_debt_plan(data: Mapping) -> list[ValidationIssue]:
    """
    Rules that span more than one field of a debt payoff request.

    Checks:
    - Debt ids are unique
    - custom_order is given when, and only when, strategy is custom
    - custom_order is a permutation of the debt ids
    """
    issues = []
    ids = _debt_ids(data.get("debts"))

    duplicates = sorted(debt_id for debt_id, count in Counter(ids).items() if count > 1)
    if duplicates:
        issues.append(ValidationIssue(
            field="debts",
            issue_type="duplicate_id",
            message=f"Debt ids must be unique (duplicated: {', '.join(duplicates)})",
            severity="error",
            suggested_fix="Give every debt its own id",
        ))

    strategy = data.get("strategy", "avalanche")
    custom_order = data.get("custom_order")

    if strategy == "custom":
        if custom_order is None:
            issues.append(ValidationIssue(
                field="custom_order",
                issue_type="missing",
                message="custom_order is required when strategy is 'custom'",
                severity="error",
                suggested_fix="List every debt id in the order to pay them",
            ))
        elif isinstance(custom_order, list) and Counter(custom_order) != Counter(ids):
            issues.append(ValidationIssue(
                field="custom_order",
                issue_type="invalid_order",
                message="custom_order must contain each debt id exactly once",
                severity="error",
                suggested_fix=f"Use a permutation of: {', '.join(ids)}",
            ))
    elif custom_order is not None:
        issues.append(ValidationIssue(
            field="custom_order",
            issue_type="unexpected",
            message=f"custom_order is only allowed when strategy is 'custom' (got '{strategy}')",
            severity="error",
            suggested_fix="Remove custom_order or set strategy to 'custom'",
        ))

    return issues
