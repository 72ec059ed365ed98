"""
Tests for the calculation engine facade.

Each test builds its own engine, so caches, rate limits and metrics never
leak between tests.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from fincalc import (
    ComputationTimeoutError,
    FinancialCalculationEngine,
    NonConvergenceError,
    RateLimitError,
    SecurityRejection,
    ValidationError,
    create_engine,
)
from fincalc.config import CacheSettings, SecuritySettings, Settings
from fincalc.models import DebtStrategy


COMPOUND_INTEREST = {
    "principal": 10000,
    "annualRate": 0.07,
    "compoundingFrequency": 1,
    "timeInYears": 10,
}

DEBT_PLAN = {
    "debts": [
        {"id": "1", "name": "Credit Card", "balance": 5000, "interestRate": 0.18, "minimumPayment": 150},
        {"id": "2", "name": "Store Card", "balance": 3000, "interestRate": 0.22, "minimumPayment": 100},
        {"id": "3", "name": "Car Loan", "balance": 15000, "interestRate": 0.06, "minimumPayment": 300},
    ],
    "extraPayment": 200,
    "strategy": "snowball",
}


@pytest.fixture
def engine():
    return FinancialCalculationEngine(settings=Settings())


class TestCompoundInterest:
    """Tests for the compound interest entry point."""

    def test_end_to_end_with_cache(self, engine):
        """Test the second identical request is served from the cache."""
        first = engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)
        assert first.future_value == pytest.approx(19671.51, abs=0.01)
        assert engine.get_cache_stats().hit_rate == 0.0

        second = engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)
        assert second == first

        stats = engine.get_cache_stats()
        assert stats.hits == 1
        assert stats.hit_rate == pytest.approx(0.5)

        metrics = engine.get_performance_metrics()
        assert [m.cache_hit for m in metrics] == [False, True]

        engine.clear_cache()
        assert engine.get_cache_stats().size == 0

    def test_snake_case_input_shares_cache_entry(self, engine):
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)
        engine.calculate_compound_interest_detailed({
            "principal": 10000,
            "annual_rate": 0.07,
            "compounding_frequency": 1,
            "time_in_years": 10,
        })
        assert engine.get_cache_stats().hits == 1

    def test_invalid_input_is_recorded_not_cached(self, engine):
        """Test failures raise, leave no cache entry and record one metric."""
        with pytest.raises(ValidationError):
            engine.calculate_compound_interest_detailed({**COMPOUND_INTEREST, "principal": -1})

        assert engine.get_cache_stats().size == 0
        metrics = engine.get_performance_metrics()
        assert len(metrics) == 1
        assert not metrics[0].succeeded
        assert metrics[0].error_type == "ValidationError"

    def test_numeric_string_rate_out_of_range(self, engine):
        """Test a rate sent as text is range checked like a number."""
        with pytest.raises(ValidationError) as exc_info:
            engine.calculate_compound_interest_detailed({**COMPOUND_INTEREST, "annualRate": "5.0"})

        assert exc_info.value.fields == ["annual_rate"]
        assert engine.get_cache_stats().size == 0

    def test_one_metric_per_call(self, engine):
        for _ in range(3):
            engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)

        metrics = engine.get_performance_metrics("calculate_compound_interest_detailed")
        assert len(metrics) == 3
        assert metrics[0].input_size > 0
        assert metrics[0].complexity == 10

        summary = engine.get_performance_summary()["calculate_compound_interest_detailed"]
        assert summary.calls == 3
        assert summary.cache_hits == 2

    def test_metrics_truncation(self, engine):
        for _ in range(4):
            engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)

        assert engine.truncate_performance_metrics(keep_last=1) == 3
        assert len(engine.get_performance_metrics()) == 1
        engine.clear_performance_metrics()
        assert engine.get_performance_metrics() == []

    def test_cache_disabled(self):
        engine = FinancialCalculationEngine(settings=Settings(cache=CacheSettings(enabled=False)))
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)

        assert engine.get_cache_stats().size == 0
        assert not any(m.cache_hit for m in engine.get_performance_metrics())


class TestMonteCarlo:
    """Tests for simulation through the engine."""

    def test_degenerate_simulation(self, engine):
        result = engine.run_monte_carlo_simulation({
            "initialValue": 1000,
            "monthlyContribution": 0,
            "yearsToProject": 1,
            "expectedReturn": 0,
            "volatility": 0,
            "iterations": 10,
            "seed": 1,
        })

        assert result.iterations == 10
        assert result.projection_at(50).final_value == pytest.approx(1000)
        assert result.statistics.mean == pytest.approx(1000)

    def test_cached_result_cannot_be_altered(self, engine):
        """Test a caller cannot change what the next caller gets from the cache."""
        params = {
            "initialValue": 10000,
            "monthlyContribution": 100,
            "yearsToProject": 2,
            "expectedReturn": 0.07,
            "volatility": 0.15,
            "iterations": 50,
            "seed": 3,
        }
        first = engine.run_monte_carlo_simulation(params)

        with pytest.raises(AttributeError):
            first.confidence_intervals.clear()
        with pytest.raises(AttributeError):
            first.yearly_projections[0].percentiles.clear()
        with pytest.raises(PydanticValidationError):
            first.band("p90").min = -1
        with pytest.raises(PydanticValidationError):
            first.yearly_projections[0].percentiles[0].value = -1

        second = engine.run_monte_carlo_simulation(params)

        assert engine.get_cache_stats().hits == 1
        assert second == first
        assert [band.name for band in second.confidence_intervals] == ["p90", "p80", "p50"]
        assert len(second.yearly_projections[0].percentiles) == 7

    def test_timeout_cancels_run(self, engine):
        """Test a run past its wall-clock limit fails and is not cached."""
        params = {
            "initialValue": 10000,
            "monthlyContribution": 500,
            "yearsToProject": 100,
            "expectedReturn": 0.07,
            "volatility": 0.15,
            "iterations": 10000,
            "seed": 7,
        }

        with pytest.raises(ComputationTimeoutError):
            engine.run_monte_carlo_simulation(params, timeout_seconds=1e-6)

        assert engine.get_cache_stats().size == 0
        assert engine.get_performance_metrics()[-1].error_type == "ComputationTimeoutError"


class TestDebtPayoff:
    """Tests for debt plans through the engine."""

    def test_snowball_plan(self, engine):
        result = engine.calculate_debt_payoff(DEBT_PLAN)

        assert result.strategy == DebtStrategy.SNOWBALL
        assert [d.debt_id for d in result.debt_order] == ["2", "1", "3"]

    def test_invalidate_by_debt_id(self, engine):
        """Test cached plans are dropped when one of their debts changes."""
        engine.calculate_debt_payoff(DEBT_PLAN)
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)

        assert engine.invalidate_cache(["1"]) == 1
        assert engine.get_cache_stats().size == 1

    def test_compare_strategies(self, engine):
        comparison = engine.compare_debt_strategies(DEBT_PLAN)

        assert comparison.snowball.debt_order == ("2", "1", "3")
        assert comparison.recommended_strategy == DebtStrategy.SNOWBALL

    def test_non_convergent_plan(self, engine):
        plan = {
            "debts": [{"id": "a", "balance": 10000, "interestRate": 0.24, "minimumPayment": 100}],
            "extraPayment": 0,
        }

        with pytest.raises(NonConvergenceError):
            engine.calculate_debt_payoff(plan)

        assert engine.get_cache_stats().size == 0
        assert engine.get_performance_metrics()[-1].error_type == "NonConvergenceError"


class TestFireNumber:
    def test_fire_number(self, engine):
        result = engine.calculate_fire_number({"monthlyExpenses": 5000})
        assert result.fire_number == pytest.approx(1_500_000)

    def test_expense_based_fire(self, engine):
        params = {
            "expenseCategories": [
                {"category": "Housing", "monthlyAmount": 2000, "geographicSensitive": True},
                {"category": "Entertainment", "monthlyAmount": 200, "essential": False},
            ],
            "geographicLocation": "Austin",
            "costOfLivingIndex": 1.5,
            "projectionYears": 0,
        }

        result = engine.calculate_expense_based_fire(params)

        assert result.total_fire_number == pytest.approx(1_080_000 + 60_000)
        assert result.geographic_adjustments.location == "Austin"
        assert engine.get_performance_metrics()[-1].function_name == "calculate_expense_based_fire"

    def test_expense_category_above_ceiling(self, engine):
        params = {
            "expenseCategories": [{"category": "Housing", "monthlyAmount": 5e9}],
        }

        with pytest.raises(ValidationError) as exc_info:
            engine.calculate_expense_based_fire(params)

        assert exc_info.value.fields == ["expense_categories.0.monthly_amount"]


class TestSecurity:
    """Tests for rate limits and security statistics."""

    def test_rate_limit_and_stats(self):
        engine = FinancialCalculationEngine(
            settings=Settings(security=SecuritySettings(rate_limit_max_requests=2))
        )
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST, caller_id="alice")
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST, caller_id="alice")

        with pytest.raises(RateLimitError):
            engine.calculate_compound_interest_detailed(COMPOUND_INTEREST, caller_id="alice")

        # other callers keep their own budget
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST, caller_id="bob")

        stats = engine.get_security_stats()
        assert stats.events_by_type == {"rate_limit": 1}
        assert stats.events_recorded == 1
        assert stats.rate_limit.tracked_callers == 2
        assert stats.rate_limit.max_requests == 2

        assert engine.get_performance_metrics()[2].error_type == "RateLimitError"

    def test_script_injection_rejected(self, engine):
        plan = {**DEBT_PLAN, "debts": [
            {**DEBT_PLAN["debts"][0], "name": "<script>alert(1)</script>"},
        ]}

        with pytest.raises(SecurityRejection):
            engine.calculate_debt_payoff(plan)

        assert engine.get_security_stats().events_by_type == {"dangerous_input": 1}

    def test_cleanup_rate_limits(self, engine):
        engine.calculate_fire_number({"monthlyExpenses": 5000})
        assert engine.cleanup_rate_limits() == 0


class TestEngineConstruction:
    """Tests for isolation between engines."""

    def test_engines_are_isolated(self):
        first = create_engine(Settings())
        second = create_engine(Settings())

        first.calculate_compound_interest_detailed(COMPOUND_INTEREST)

        assert second.get_cache_stats().size == 0
        assert second.get_performance_metrics() == []
        assert first.get_cache_stats().size == 1

    def test_create_engine_uses_settings(self):
        engine = create_engine(Settings(cache=CacheSettings(max_entries=1)))
        engine.calculate_compound_interest_detailed(COMPOUND_INTEREST)
        engine.calculate_fire_number({"monthlyExpenses": 5000})

        stats = engine.get_cache_stats()
        assert stats.size == 1
        assert stats.evictions == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
