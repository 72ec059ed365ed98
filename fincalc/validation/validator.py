"""
Calculation Input Validation Pipeline

DESIGN DECISION: Every request passes the same gate, in a fixed order:

RATE LIMIT:
- Checked before any sanitization cost is paid
- A breach is a security event

SECURITY SCREENING:
- Script-like content in any string is rejected outright
- Oversized combinations that signal a denial-of-service attempt are rejected
- Both are logged with the specific reason; the caller sees a generic message

STAGE 1 - SCHEMA VALIDATION:
- Type checking, required fields, data-model invariants
- Done by the pydantic parameter models

STAGE 2 - BOUNDS AND CROSS-FIELD VALIDATION:
- Deployment limits from SecuritySettings (principal, rate range, horizon)
- Debt plan rules that span several fields
- Runs even when stage 1 failed, so the caller gets every violation at once

IMPORTANT: Validation NEVER silently fixes numeric issues.
Everything found is raised together in one ValidationError.
"""

from collections.abc import Mapping
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from fincalc.audit import SecurityAuditLogger
from fincalc.config import SecuritySettings, get_settings
from fincalc.errors import RateLimitError, SecurityRejection, ValidationError
from fincalc.models.params import (
    CompoundInterestParams,
    DebtPayoffParams,
    ExpenseBasedFireParams,
    FireNumberParams,
    MonteCarloParams,
)
from fincalc.models.validation import ValidationIssue
from fincalc.validation.rate_limiter import SlidingWindowRateLimiter
from fincalc.validation.rules import check_debt_plan
from fincalc.validation.sanitizer import normalize_keys, sanitize_input, scan_dangerous


ParamsT = TypeVar("ParamsT", bound=BaseModel)


def _number(value: Any) -> Optional[float]:
    """
    Numeric reading of a raw value, as the schema stage would coerce it.

    Numeric strings count: pydantic accepts "1e14" for a float field, so the
    bounds and overflow guards must see the same number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


class CalculationValidator:
    """
    Validates raw calculator parameters and returns frozen params models.

    One public method per calculator. Each accepts a mapping (snake_case or
    camelCase keys) or an already built params model.
    """

    def __init__(
        self,
        settings: Optional[SecuritySettings] = None,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        audit_logger: Optional[SecurityAuditLogger] = None,
    ):
        """
        Initialize validator.

        Args:
            settings: Security limits. Defaults to the global settings.
            rate_limiter: Per-caller limiter. Built from settings if None.
            audit_logger: Destination for security events.
        """
        self._settings = settings or get_settings().security
        self._rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            max_requests=self._settings.rate_limit_max_requests,
            window_seconds=self._settings.rate_limit_window_seconds,
        )
        self._audit = audit_logger or SecurityAuditLogger(
            history_size=self._settings.event_history_size
        )

    @property
    def rate_limiter(self) -> SlidingWindowRateLimiter:
        return self._rate_limiter

    @property
    def audit_logger(self) -> SecurityAuditLogger:
        return self._audit

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def validate_compound_interest(
        self,
        params: Any,
        caller_id: str = "anonymous",
    ) -> CompoundInterestParams:
        return self._validate(
            CompoundInterestParams,
            params,
            caller_id,
            bounds=self._compound_interest_bounds,
            overflow=self._compound_interest_overflow,
        )

    def validate_monte_carlo(
        self,
        params: Any,
        caller_id: str = "anonymous",
    ) -> MonteCarloParams:
        return self._validate(
            MonteCarloParams,
            params,
            caller_id,
            bounds=self._monte_carlo_bounds,
            overflow=self._monte_carlo_overflow,
        )

    def validate_debt_payoff(
        self,
        params: Any,
        caller_id: str = "anonymous",
    ) -> DebtPayoffParams:
        return self._validate(
            DebtPayoffParams,
            params,
            caller_id,
            bounds=self._debt_payoff_bounds,
            cross_field=check_debt_plan,
        )

    def validate_fire_number(
        self,
        params: Any,
        caller_id: str = "anonymous",
    ) -> FireNumberParams:
        return self._validate(
            FireNumberParams,
            params,
            caller_id,
            bounds=self._fire_number_bounds,
        )

    def validate_expense_based_fire(
        self,
        params: Any,
        caller_id: str = "anonymous",
    ) -> ExpenseBasedFireParams:
        return self._validate(
            ExpenseBasedFireParams,
            params,
            caller_id,
            bounds=self._expense_based_fire_bounds,
        )

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def _validate(
        self,
        model: type[ParamsT],
        params: Any,
        caller_id: str,
        bounds: Callable[[Mapping], list[ValidationIssue]],
        overflow: Optional[Callable[[Mapping, str], None]] = None,
        cross_field: Optional[Callable[[Mapping], list[ValidationIssue]]] = None,
    ) -> ParamsT:
        self._enforce_rate_limit(caller_id)

        raw = self._to_mapping(params)
        self._reject_dangerous(raw, caller_id)

        data, issues = sanitize_input(raw, self._settings.max_string_length)
        if overflow is not None:
            overflow(data, caller_id)

        reported = {issue.field for issue in issues}

        def add(new_issues: list[ValidationIssue]) -> None:
            for issue in new_issues:
                if issue.field not in reported:
                    issues.append(issue)
                    reported.add(issue.field)

        # Stage 1: schema
        validated: Optional[ParamsT] = None
        try:
            validated = model.model_validate(data)
        except PydanticValidationError as e:
            add(self._schema_issues(e))

        # Stage 2: bounds and cross-field rules, reported even if stage 1 failed
        add(bounds(data))
        if cross_field is not None:
            add(cross_field(data))

        errors = [issue for issue in issues if issue.severity == "error"]
        if errors or validated is None:
            raise ValidationError(errors or issues)

        return validated

    def _enforce_rate_limit(self, caller_id: str) -> None:
        allowed, retry_after = self._rate_limiter.check(caller_id)
        if not allowed:
            self._audit.log_rate_limit(
                caller_id=caller_id,
                max_requests=self._rate_limiter.max_requests,
                window_seconds=self._rate_limiter.window_seconds,
                retry_after=retry_after,
            )
            raise RateLimitError(caller_id, retry_after)

    def _to_mapping(self, params: Any) -> dict:
        if isinstance(params, BaseModel):
            params = params.model_dump(mode="json")
        if not isinstance(params, Mapping):
            raise ValidationError([ValidationIssue(
                field="parameters",
                issue_type="invalid_type",
                message=f"Parameters must be a mapping, got {type(params).__name__}",
                severity="error",
            )])
        return normalize_keys(params)

    def _reject_dangerous(self, raw: Mapping, caller_id: str) -> None:
        hits = scan_dangerous(raw)
        if not hits:
            return

        issues = []
        for field, patterns in hits.items():
            self._audit.log_dangerous_input(caller_id, field, patterns)
            issues.append(ValidationIssue(
                field=field,
                issue_type="dangerous_input",
                message=f"{field} contains disallowed content",
                severity="error",
            ))

        reason = "; ".join(f"{field}: {', '.join(p)}" for field, p in hits.items())
        raise SecurityRejection(issues, reason=f"Dangerous patterns detected ({reason})")

    def _schema_issues(self, error: PydanticValidationError) -> list[ValidationIssue]:
        issues = []
        for err in error.errors():
            field = ".".join(str(part) for part in err["loc"]) or "parameters"
            issues.append(ValidationIssue(
                field=field,
                issue_type=err["type"],
                message=f"{field}: {err['msg']}",
                severity="error",
            ))
        return issues

    def _overflow_rejection(
        self,
        caller_id: str,
        calculation: str,
        magnitude: float,
        ceiling: float,
    ) -> None:
        self._audit.log_overflow_attempt(caller_id, calculation, magnitude, ceiling)
        raise SecurityRejection(
            [ValidationIssue(
                field="parameters",
                issue_type="overflow_attempt",
                message="Parameter combination exceeds safe computation limits",
                severity="error",
            )],
            reason=f"{calculation} magnitude {magnitude:g} exceeds {ceiling:g}",
        )

    # =========================================================================
    # BOUNDS
    # =========================================================================

    def _check_max(
        self,
        data: Mapping,
        field: str,
        maximum: float,
        path: Optional[str] = None,
    ) -> list[ValidationIssue]:
        value = _number(data.get(field))
        if value is None or value <= maximum:
            return []
        path = path or field
        return [ValidationIssue(
            field=path,
            issue_type="out_of_range",
            message=f"{path} must not exceed {maximum:g} (got {value:g})",
            severity="error",
        )]

    def _check_range(
        self,
        data: Mapping,
        field: str,
        minimum: float,
        maximum: float,
        path: Optional[str] = None,
    ) -> list[ValidationIssue]:
        value = _number(data.get(field))
        if value is None or minimum <= value <= maximum:
            return []
        path = path or field
        return [ValidationIssue(
            field=path,
            issue_type="out_of_range",
            message=f"{path} must be between {minimum:g} and {maximum:g} (got {value:g})",
            severity="error",
        )]

    def _compound_interest_bounds(self, data: Mapping) -> list[ValidationIssue]:
        s = self._settings
        return [
            *self._check_max(data, "principal", s.max_principal),
            *self._check_range(data, "annual_rate", s.min_interest_rate, s.max_interest_rate),
            *self._check_range(data, "time_in_years", 0, s.max_projection_years),
            *self._check_range(data, "compounding_frequency", s.min_frequency, s.max_frequency),
            *self._check_range(data, "contribution_frequency", s.min_frequency, s.max_frequency),
            *self._check_max(data, "additional_contributions", s.max_principal),
        ]

    def _monte_carlo_bounds(self, data: Mapping) -> list[ValidationIssue]:
        s = self._settings
        return [
            *self._check_max(data, "initial_value", s.max_principal),
            *self._check_max(data, "monthly_contribution", s.max_principal),
            *self._check_range(data, "expected_return", s.min_interest_rate, s.max_interest_rate),
            *self._check_range(data, "inflation_rate", s.min_interest_rate, s.max_interest_rate),
            *self._check_range(data, "years_to_project", 1, s.max_projection_years),
            *self._check_range(data, "iterations", 1, s.max_iterations),
        ]

    def _debt_payoff_bounds(self, data: Mapping) -> list[ValidationIssue]:
        s = self._settings
        issues = self._check_max(data, "extra_payment", s.max_principal)

        debts = data.get("debts")
        if isinstance(debts, list):
            for index, debt in enumerate(debts):
                if not isinstance(debt, Mapping):
                    continue
                prefix = f"debts.{index}"
                issues += self._check_max(debt, "balance", s.max_principal, f"{prefix}.balance")
                issues += self._check_max(
                    debt, "interest_rate", s.max_interest_rate, f"{prefix}.interest_rate"
                )
                issues += self._check_max(
                    debt, "minimum_payment", s.max_principal, f"{prefix}.minimum_payment"
                )
        return issues

    def _fire_number_bounds(self, data: Mapping) -> list[ValidationIssue]:
        s = self._settings
        return [
            *self._check_max(data, "monthly_expenses", s.max_principal),
            *self._check_max(data, "annual_expenses", s.max_principal),
        ]

    def _expense_based_fire_bounds(self, data: Mapping) -> list[ValidationIssue]:
        s = self._settings
        issues = self._check_range(data, "projection_years", 0, s.max_projection_years)

        categories = data.get("expense_categories")
        if isinstance(categories, list):
            for index, category in enumerate(categories):
                if not isinstance(category, Mapping):
                    continue
                prefix = f"expense_categories.{index}"
                issues += self._check_max(
                    category, "monthly_amount", s.max_principal, f"{prefix}.monthly_amount"
                )
                issues += self._check_range(
                    category,
                    "inflation_rate",
                    s.min_interest_rate,
                    s.max_interest_rate,
                    f"{prefix}.inflation_rate",
                )
        return issues

    # =========================================================================
    # OVERFLOW GUARDS
    # =========================================================================

    def _compound_interest_overflow(self, data: Mapping, caller_id: str) -> None:
        rate = _number(data.get("annual_rate"))
        years = _number(data.get("time_in_years"))
        principal = _number(data.get("principal"))
        if rate is None or years is None or principal is None:
            return

        magnitude = abs(rate) * years * principal
        if magnitude > self._settings.overflow_ceiling:
            self._overflow_rejection(
                caller_id, "compound_interest", magnitude, self._settings.overflow_ceiling
            )

    def _monte_carlo_overflow(self, data: Mapping, caller_id: str) -> None:
        iterations = _number(data.get("iterations"))
        years = _number(data.get("years_to_project"))
        if iterations is None or years is None:
            return

        operations = iterations * years * 12
        if operations > self._settings.max_simulation_operations:
            self._overflow_rejection(
                caller_id,
                "monte_carlo",
                operations,
                self._settings.max_simulation_operations,
            )
