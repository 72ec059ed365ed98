"""
Financial Calculation Engine

This module ties together all the components and defines the single entry
point for every calculation:

    rate limit → sanitize → validate → cache lookup → calculator
               → cache store → metric record → result

DESIGN DECISION: The engine enforces the boundaries:
- No calculator sees parameters that have not passed the validator
- Every invocation records exactly one metric, whether it succeeded, was
  served from the cache, or failed
- Failed calls leave nothing in the cache
- Nothing is retried automatically; calculations are pure, so callers retry

The engine is constructed explicitly by its owner. There is no module-level
instance, so two engines never share a rate limit, cache or metrics log.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Iterable, Optional, TypeVar

import structlog

from fincalc.audit import SecurityAuditLogger
from fincalc.cache import ResultCache, make_cache_key
from fincalc.calculators import (
    calculate_compound_interest,
    calculate_debt_payoff,
    calculate_expense_based_fire,
    calculate_fire_number,
    compare_strategies,
    run_monte_carlo,
)
from fincalc.config import Settings, get_settings
from fincalc.errors import ComputationTimeoutError
from fincalc.models.metrics import (
    CacheStats,
    FunctionSummary,
    PerformanceMetric,
    SecurityStats,
)
from fincalc.models.params import MonteCarloParams
from fincalc.models.results import (
    DebtPayoffResult,
    DebtStrategyComparison,
    DetailedCompoundInterestResult,
    ExpenseBasedFireResult,
    FireNumberResult,
    MonteCarloResult,
)
from fincalc.monitoring import PerformanceMonitor
from fincalc.validation import CalculationValidator


logger = structlog.get_logger(__name__)

P = TypeVar("P")
R = TypeVar("R")

ANONYMOUS_CALLER = "anonymous"


class FinancialCalculationEngine:
    """
    Facade over the validator, calculators, cache and performance monitor.

    All dependencies are optional; anything not injected is built from
    settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        validator: Optional[CalculationValidator] = None,
        cache: Optional[ResultCache] = None,
        monitor: Optional[PerformanceMonitor] = None,
        audit_logger: Optional[SecurityAuditLogger] = None,
    ):
        self._settings = settings or get_settings()

        self._audit_logger = audit_logger or (
            validator.audit_logger
            if validator is not None
            else SecurityAuditLogger(history_size=self._settings.security.event_history_size)
        )
        self._validator = validator or CalculationValidator(
            settings=self._settings.security,
            audit_logger=self._audit_logger,
        )
        self._cache = cache or ResultCache(
            max_entries=self._settings.cache.max_entries,
            ttl_seconds=self._settings.cache.ttl_seconds,
        )
        self._monitor = monitor or PerformanceMonitor(
            max_metrics=self._settings.computation.max_metrics
        )

    # =========================================================================
    # CALCULATIONS
    # =========================================================================

    def calculate_compound_interest_detailed(
        self,
        params: Any,
        caller_id: str = ANONYMOUS_CALLER,
    ) -> DetailedCompoundInterestResult:
        """
        Project a balance under discrete compounding with contributions.

        Raises:
            ValidationError: invalid or hostile parameters
            RateLimitError: caller exceeded its request budget
        """
        return self._execute(
            "calculate_compound_interest_detailed",
            params,
            caller_id,
            validate=self._validator.validate_compound_interest,
            compute=calculate_compound_interest,
            complexity=lambda p: p.compounding_frequency * p.time_in_years,
        )

    def run_monte_carlo_simulation(
        self,
        params: Any,
        caller_id: str = ANONYMOUS_CALLER,
        timeout_seconds: Optional[float] = None,
    ) -> MonteCarloResult:
        """
        Simulate portfolio outcomes on a dedicated worker thread.

        Raises:
            ValidationError: invalid or hostile parameters
            RateLimitError: caller exceeded its request budget
            ComputationTimeoutError: the run exceeded its wall-clock limit
        """
        timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else self._settings.computation.monte_carlo_timeout_seconds
        )
        return self._execute(
            "run_monte_carlo_simulation",
            params,
            caller_id,
            validate=self._validator.validate_monte_carlo,
            compute=lambda p: self._simulate_with_timeout(p, timeout),
            complexity=lambda p: p.iterations * p.total_months,
        )

    def calculate_debt_payoff(
        self,
        params: Any,
        caller_id: str = ANONYMOUS_CALLER,
    ) -> DebtPayoffResult:
        """
        Build a month-by-month payoff plan for several debts.

        Raises:
            ValidationError: invalid parameters, including NonConvergenceError
                when the payments can never clear the debts
            RateLimitError: caller exceeded its request budget
        """
        max_months = self._settings.computation.max_payoff_months
        return self._execute(
            "calculate_debt_payoff",
            params,
            caller_id,
            validate=self._validator.validate_debt_payoff,
            compute=lambda p: calculate_debt_payoff(p, max_months=max_months),
            dependencies=lambda p: p.debt_ids,
            complexity=lambda p: len(p.debts),
        )

    def compare_debt_strategies(
        self,
        params: Any,
        caller_id: str = ANONYMOUS_CALLER,
    ) -> DebtStrategyComparison:
        """Run snowball and avalanche on the same debts and compare them."""
        max_months = self._settings.computation.max_payoff_months
        return self._execute(
            "compare_debt_strategies",
            params,
            caller_id,
            validate=self._validator.validate_debt_payoff,
            compute=lambda p: compare_strategies(p, max_months=max_months),
            dependencies=lambda p: p.debt_ids,
            complexity=lambda p: len(p.debts) * 2,
        )

    def calculate_fire_number(
        self,
        params: Any,
        caller_id: str = ANONYMOUS_CALLER,
    ) -> FireNumberResult:
        return self._execute(
            "calculate_fire_number",
            params,
            caller_id,
            validate=self._validator.validate_fire_number,
            compute=calculate_fire_number,
            complexity=lambda p: len(p.stress_scenarios or ()) + 1,
        )

    def calculate_expense_based_fire(
        self,
        params: Any,
        caller_id: str = ANONYMOUS_CALLER,
    ) -> ExpenseBasedFireResult:
        """FIRE number built up from individual expense categories."""
        return self._execute(
            "calculate_expense_based_fire",
            params,
            caller_id,
            validate=self._validator.validate_expense_based_fire,
            compute=calculate_expense_based_fire,
            complexity=lambda p: len(p.expense_categories),
        )

    # =========================================================================
    # CACHE, METRICS AND SECURITY
    # =========================================================================

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def invalidate_cache(self, dependencies: Iterable[str]) -> int:
        """Drop cached results that depend on any of the given debt ids."""
        return self._cache.invalidate(dependencies)

    def get_performance_metrics(
        self,
        function_name: Optional[str] = None,
    ) -> list[PerformanceMetric]:
        return self._monitor.get_metrics(function_name)

    def get_performance_summary(self) -> dict[str, FunctionSummary]:
        return self._monitor.summary()

    def clear_performance_metrics(self) -> None:
        self._monitor.clear()

    def truncate_performance_metrics(self, keep_last: int = 0) -> int:
        return self._monitor.truncate(keep_last)

    def get_security_stats(self) -> SecurityStats:
        counts = self._audit_logger.event_counts()
        return SecurityStats(
            rate_limit=self._validator.rate_limiter.stats(),
            events_recorded=sum(counts.values()),
            events_by_type=counts,
        )

    def cleanup_rate_limits(self) -> int:
        """Forget callers with no requests inside the current window."""
        return self._validator.rate_limiter.cleanup()

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def _execute(
        self,
        function_name: str,
        raw_params: Any,
        caller_id: str,
        validate: Callable[[Any, str], P],
        compute: Callable[[P], R],
        dependencies: Callable[[P], Iterable[str]] = lambda p: (),
        complexity: Callable[[P], float] = lambda p: 0,
    ) -> R:
        started = time.perf_counter()
        cache_hit = False
        input_size = 0
        work: Optional[float] = None

        try:
            params = validate(raw_params, caller_id)
            input_size = len(params.model_dump_json())
            work = float(complexity(params))

            if self._settings.cache.enabled:
                key = make_cache_key(function_name, params)
                result, cache_hit = self._cache.get_or_compute(
                    key,
                    lambda: compute(params),
                    dependencies=dependencies(params),
                )
            else:
                result = compute(params)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            self._monitor.record(
                function_name,
                elapsed_ms,
                input_size=input_size,
                complexity=work,
                succeeded=False,
                error_type=type(e).__name__,
            )
            logger.debug(
                "calculation_failed",
                function=function_name,
                caller_id=caller_id,
                error_type=type(e).__name__,
                execution_time_ms=round(elapsed_ms, 3),
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._monitor.record(
            function_name,
            elapsed_ms,
            cache_hit=cache_hit,
            input_size=input_size,
            complexity=work,
        )
        logger.debug(
            "calculation_completed",
            function=function_name,
            caller_id=caller_id,
            cache_hit=cache_hit,
            execution_time_ms=round(elapsed_ms, 3),
        )
        return result

    def _simulate_with_timeout(
        self,
        params: MonteCarloParams,
        timeout_seconds: float,
    ) -> MonteCarloResult:
        """Run one simulation on its own worker, cancelling it on timeout."""
        cancel_event = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fincalc-monte-carlo")
        try:
            future = executor.submit(
                run_monte_carlo,
                params,
                cancel_event,
                self._settings.computation.default_inflation_rate,
            )
            try:
                return future.result(timeout=timeout_seconds)
            except FutureTimeoutError:
                cancel_event.set()
                raise ComputationTimeoutError(
                    "run_monte_carlo_simulation", timeout_seconds
                ) from None
        finally:
            executor.shutdown(wait=False)


def create_engine(
    settings: Optional[Settings] = None,
) -> FinancialCalculationEngine:
    """
    Factory function to create a fully wired engine.

    Args:
        settings: Engine settings. Defaults to the environment-driven
                  global settings.
    """
    settings = settings or get_settings()
    audit_logger = SecurityAuditLogger(history_size=settings.security.event_history_size)
    validator = CalculationValidator(settings=settings.security, audit_logger=audit_logger)

    return FinancialCalculationEngine(
        settings=settings,
        validator=validator,
        audit_logger=audit_logger,
    )
