"""
Tests for the Calculation Engine

Test strategy:
1. Unit tests for individual components (models, calculators, validator)
2. Integration tests through the engine facade
3. Monte Carlo tests always pass a seed
"""

import typing

import pytest

from fincalc.models import (
    CompoundInterestBreakdown,
    CompoundInterestParams,
    Debt,
    DebtPayoffParams,
    DebtStrategy,
    DetailedCompoundInterestResult,
    FireNumberParams,
    MonteCarloParams,
    SecurityEvent,
    SecurityEventBuilder,
    SecurityEventType,
    SecuritySeverity,
    ValidationIssue,
)
from fincalc.models.results import (
    ConfidenceBand,
    PercentileValue,
    ResultModel,
    YearlyProjection,
)


class TestParameterModels:
    """Tests for calculator parameter models."""

    def test_compound_interest_params_accepts_camel_case(self):
        """Test that wire-format camelCase names populate snake_case fields."""
        params = CompoundInterestParams.model_validate({
            "principal": 10000,
            "annualRate": 0.07,
            "compoundingFrequency": 12,
            "timeInYears": 10,
        })
        assert params.annual_rate == 0.07
        assert params.compounding_frequency == 12

    def test_compound_interest_params_accepts_snake_case(self):
        """Test that field names work directly."""
        params = CompoundInterestParams(
            principal=10000,
            annual_rate=0.07,
            compounding_frequency=12,
            time_in_years=10,
        )
        assert params.additional_contributions == 0.0
        assert params.contribution_frequency == 12
        assert params.contribution_timing == "end"

    def test_legacy_beginning_timing_is_normalized(self):
        """Test that 'beginning' is accepted as 'begin'."""
        params = CompoundInterestParams(
            principal=1000,
            annual_rate=0.05,
            compounding_frequency=1,
            time_in_years=1,
            contribution_timing="beginning",
        )
        assert params.contribution_timing == "begin"

    def test_negative_principal_rejected(self):
        """Test that principal must be non-negative."""
        with pytest.raises(ValueError):
            CompoundInterestParams(
                principal=-1,
                annual_rate=0.05,
                compounding_frequency=1,
                time_in_years=1,
            )

    def test_frequency_bounds(self):
        """Test that compounding frequency must be within 1-365."""
        with pytest.raises(ValueError):
            CompoundInterestParams(
                principal=1000,
                annual_rate=0.05,
                compounding_frequency=366,
                time_in_years=1,
            )

    def test_unknown_fields_rejected(self):
        """Test that unexpected parameters are not silently ignored."""
        with pytest.raises(ValueError):
            CompoundInterestParams(
                principal=1000,
                annual_rate=0.05,
                compounding_frequency=1,
                time_in_years=1,
                bonus=5,
            )

    def test_params_are_frozen(self):
        """Test that validated parameters cannot be modified."""
        params = MonteCarloParams(
            initial_value=1000,
            monthly_contribution=100,
            years_to_project=5,
            expected_return=0.07,
            volatility=0.15,
        )
        with pytest.raises(ValueError):
            params.initial_value = 5

    def test_monte_carlo_derived_values(self):
        """Test total months and total invested."""
        params = MonteCarloParams(
            initial_value=1000,
            monthly_contribution=100,
            years_to_project=5,
            expected_return=0.07,
            volatility=0.15,
        )
        assert params.total_months == 60
        assert params.total_invested == 7000
        assert params.iterations == 1000

    def test_monte_carlo_iterations_bounds(self):
        """Test that iterations must be within 1-10000."""
        with pytest.raises(ValueError):
            MonteCarloParams(
                initial_value=1000,
                monthly_contribution=100,
                years_to_project=5,
                expected_return=0.07,
                volatility=0.15,
                iterations=0,
            )

    def test_debt_payoff_params_require_debts(self):
        """Test that an empty debt list is rejected."""
        with pytest.raises(ValueError):
            DebtPayoffParams(debts=(), extra_payment=100)

    def test_debt_payoff_params_from_lists(self):
        """Test that lists are stored as tuples."""
        params = DebtPayoffParams.model_validate({
            "debts": [
                {"id": "a", "balance": 100, "interestRate": 0.1, "minimumPayment": 10},
            ],
            "extraPayment": 50,
            "strategy": "snowball",
        })
        assert isinstance(params.debts, tuple)
        assert params.strategy == DebtStrategy.SNOWBALL
        assert params.debt_ids == ["a"]

    def test_debt_monthly_interest(self):
        """Test monthly interest accrual helper."""
        debt = Debt(id="card", balance=1200, interest_rate=0.12, minimum_payment=25)
        assert debt.monthly_interest == pytest.approx(12.0)

    def test_fire_params_require_expenses(self):
        """Test that some expense figure must be given."""
        with pytest.raises(ValueError, match="Monthly or annual expenses"):
            FireNumberParams(monthly_expenses=0)

    def test_fire_params_yearly_expenses(self):
        """Test that annual expenses take precedence over monthly."""
        assert FireNumberParams(monthly_expenses=4000).yearly_expenses == 48000
        assert FireNumberParams(annual_expenses=50000).yearly_expenses == 50000


class TestResultModels:
    """Tests for result models."""

    def test_results_are_frozen(self):
        """Test that results cannot be modified by a caller."""
        result = DetailedCompoundInterestResult(
            future_value=110.0,
            total_contributions=0.0,
            total_interest_earned=10.0,
            effective_annual_rate=0.1,
            breakdown=CompoundInterestBreakdown(
                principal_growth=110.0,
                contribution_growth=0.0,
                compound_interest=10.0,
            ),
        )
        with pytest.raises(ValueError):
            result.future_value = 0.0

    def test_results_dump_camel_case(self):
        """Test that results serialize to the wire format."""
        breakdown = CompoundInterestBreakdown(
            principal_growth=1.0,
            contribution_growth=2.0,
            compound_interest=3.0,
        )
        dumped = breakdown.model_dump(by_alias=True)
        assert dumped == {
            "principalGrowth": 1.0,
            "contributionGrowth": 2.0,
            "compoundInterest": 3.0,
        }

    def test_results_hold_no_mutable_collections(self):
        """Test every collection on a result is a tuple, so cached results stay intact."""
        for model in ResultModel.__subclasses__():
            for name, field in model.model_fields.items():
                origin = typing.get_origin(field.annotation) or field.annotation
                assert origin not in (dict, list, set), f"{model.__name__}.{name}"

    def test_yearly_percentile_lookup(self):
        year = YearlyProjection(
            year=1,
            median=100.0,
            mean=101.0,
            percentiles=(
                PercentileValue(percentile=5, value=80.0),
                PercentileValue(percentile=95, value=120.0),
            ),
        )
        assert year.value_at(95) == 120.0
        with pytest.raises(KeyError):
            year.value_at(50)

    def test_confidence_band_dumps_camel_case(self):
        band = ConfidenceBand(name="p90", lower_percentile=5, upper_percentile=95, min=1.0, max=2.0)
        assert band.model_dump(by_alias=True) == {
            "name": "p90",
            "lowerPercentile": 5,
            "upperPercentile": 95,
            "min": 1.0,
            "max": 2.0,
        }


class TestSecurityEventModels:
    """Tests for security event models."""

    def test_security_event_creation(self):
        """Test SecurityEvent model creation."""
        event = SecurityEvent(
            event_type=SecurityEventType.RATE_LIMIT,
            caller_id="client-1",
            description="Test event",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == SecuritySeverity.MEDIUM

    def test_security_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = SecurityEvent(
            event_type=SecurityEventType.DANGEROUS_INPUT,
            severity=SecuritySeverity.HIGH,
            caller_id="client-1",
            description="Test",
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "dangerous_input"
        assert log_dict["severity"] == "high"
        assert log_dict["caller_id"] == "client-1"
        assert isinstance(log_dict["event_id"], str)

    def test_builder_rate_limit(self):
        """Test SecurityEventBuilder for rate limit breaches."""
        event = SecurityEventBuilder.rate_limit("client-1", 100, 60.0, 12.3456)

        assert event.event_type == SecurityEventType.RATE_LIMIT
        assert event.severity == SecuritySeverity.MEDIUM
        assert event.details["retry_after"] == 12.346

    def test_builder_dangerous_input(self):
        """Test SecurityEventBuilder for script-like input."""
        event = SecurityEventBuilder.dangerous_input("client-1", "debts.0.name", ["<script"])

        assert event.event_type == SecurityEventType.DANGEROUS_INPUT
        assert event.severity == SecuritySeverity.HIGH
        assert event.details["patterns"] == ["<script"]

    def test_builder_overflow_attempt(self):
        """Test SecurityEventBuilder for overflow attempts."""
        event = SecurityEventBuilder.overflow_attempt("client-1", "monte_carlo", 1e9, 1e8)

        assert event.event_type == SecurityEventType.OVERFLOW_ATTEMPT
        assert event.severity == SecuritySeverity.HIGH
        assert "monte_carlo" in event.description


class TestValidationIssue:
    """Tests for ValidationIssue."""

    def test_default_severity_is_error(self):
        issue = ValidationIssue(field="principal", issue_type="missing", message="Required")
        assert issue.severity == "error"

    def test_invalid_severity_rejected(self):
        """Test that severity is restricted to error/warning/info."""
        with pytest.raises(ValueError):
            ValidationIssue(
                field="principal",
                issue_type="missing",
                message="Required",
                severity="fatal",
            )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
