"""
Error Taxonomy for the Calculation Engine

Every failure is synchronous and terminal for the call: there is no partial
result and the engine never retries on its own. Calculations are pure, so a
caller that wants to retry can simply call again.

CalculationError
├── ValidationError          malformed or out-of-range input (all issues)
│   ├── SecurityRejection    dangerous pattern / overflow attempt
│   └── NonConvergenceError  debt plan can never reach a zero balance
├── RateLimitError           caller exceeded its request budget
└── ComputationTimeoutError  Monte Carlo exceeded its wall-clock budget
"""

from typing import Optional

from fincalc.models.validation import ValidationIssue


class CalculationError(Exception):
    """Base exception for calculation engine errors."""
    pass


class ValidationError(CalculationError):
    """
    Input failed validation.

    Carries every violation found, not just the first one.
    """

    def __init__(self, issues: list[ValidationIssue], message: Optional[str] = None):
        self.issues = list(issues)
        super().__init__(message or "; ".join(issue.message for issue in self.issues))

    @property
    def fields(self) -> list[str]:
        """Fields with at least one issue, in report order."""
        seen: list[str] = []
        for issue in self.issues:
            if issue.field not in seen:
                seen.append(issue.field)
        return seen


class SecurityRejection(ValidationError):
    """
    Input was rejected for security reasons.

    The caller only ever sees the generic message. The specific reason is
    written to the security log.
    """

    GENERIC_MESSAGE = "Request rejected: parameters failed security validation"

    def __init__(self, issues: list[ValidationIssue], reason: str):
        self.reason = reason
        super().__init__(issues, message=self.GENERIC_MESSAGE)


class NonConvergenceError(ValidationError):
    """A debt payoff plan cannot reach a zero balance under the given payments."""

    def __init__(self, message: str, debt_ids: Optional[list[str]] = None):
        self.debt_ids = debt_ids or []
        super().__init__(
            [
                ValidationIssue(
                    field="debts",
                    issue_type="non_convergent",
                    message=message,
                    severity="error",
                    suggested_fix="Increase minimum payments or the extra payment",
                )
            ]
        )


class RateLimitError(CalculationError):
    """Caller exceeded its request budget for the current window."""

    def __init__(self, caller_id: str, retry_after: float):
        self.caller_id = caller_id
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded. Please try again in {retry_after:.1f} seconds."
        )


class ComputationTimeoutError(CalculationError):
    """A computation exceeded its wall-clock budget and was cancelled."""

    def __init__(self, function_name: str, timeout_seconds: Optional[float] = None):
        self.function_name = function_name
        self.timeout_seconds = timeout_seconds
        if timeout_seconds is None:
            message = f"{function_name} was cancelled before completing"
        else:
            message = f"{function_name} exceeded the {timeout_seconds:g}s computation limit"
        super().__init__(message)
