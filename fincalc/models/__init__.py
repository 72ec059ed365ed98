"""
Data Models Package

This package contains all Pydantic models used by the calculation engine.
All data flowing in and out of the calculators must conform to these schemas.
"""

from fincalc.models.params import (
    CompoundInterestParams,
    Debt,
    DebtPayoffParams,
    DebtStrategy,
    ExpenseBasedFireParams,
    ExpenseCategory,
    FireNumberParams,
    MonteCarloParams,
    ParamsModel,
    StressScenario,
)
from fincalc.models.results import (
    CONFIDENCE_BANDS,
    PERCENTILES,
    CategoryFireBreakdown,
    CompoundInterestBreakdown,
    ConfidenceBand,
    DebtPayoffOrder,
    DebtPayoffResult,
    DebtStrategyComparison,
    DetailedCompoundInterestResult,
    ExpenseBasedFireResult,
    FireNumberResult,
    FireVariants,
    GeographicAdjustment,
    InflationImpact,
    MonteCarloResult,
    MonteCarloStatistics,
    PayoffScheduleEntry,
    PercentileProjection,
    PercentileValue,
    SavingsSuggestion,
    StrategySummary,
    StressTestResult,
    YearlyProjection,
)
from fincalc.models.audit import (
    SecurityEvent,
    SecurityEventBuilder,
    SecurityEventType,
    SecuritySeverity,
)
from fincalc.models.metrics import (
    CacheStats,
    FunctionSummary,
    PerformanceMetric,
    RateLimitStats,
    SecurityStats,
)
from fincalc.models.validation import ValidationIssue

__all__ = [
    # Parameter models
    "CompoundInterestParams",
    "Debt",
    "DebtPayoffParams",
    "DebtStrategy",
    "ExpenseBasedFireParams",
    "ExpenseCategory",
    "FireNumberParams",
    "MonteCarloParams",
    "ParamsModel",
    "StressScenario",
    # Result models
    "CONFIDENCE_BANDS",
    "PERCENTILES",
    "CategoryFireBreakdown",
    "CompoundInterestBreakdown",
    "ConfidenceBand",
    "DebtPayoffOrder",
    "DebtPayoffResult",
    "DebtStrategyComparison",
    "DetailedCompoundInterestResult",
    "ExpenseBasedFireResult",
    "FireNumberResult",
    "FireVariants",
    "GeographicAdjustment",
    "InflationImpact",
    "MonteCarloResult",
    "MonteCarloStatistics",
    "PayoffScheduleEntry",
    "PercentileProjection",
    "PercentileValue",
    "SavingsSuggestion",
    "StrategySummary",
    "StressTestResult",
    "YearlyProjection",
    # Security event models
    "SecurityEvent",
    "SecurityEventBuilder",
    "SecurityEventType",
    "SecuritySeverity",
    # Metrics models
    "CacheStats",
    "FunctionSummary",
    "PerformanceMetric",
    "RateLimitStats",
    "SecurityStats",
    # Validation
    "ValidationIssue",
]
