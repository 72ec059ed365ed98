"""
Financial Calculation Engine

Compound-interest projection, Monte Carlo portfolio simulation and multi-debt
payoff optimisation behind an input validation and security layer, a result
cache and a performance monitor.

DESIGN PRINCIPLES:
1. Validate at the boundary, trust inside
2. Fail early, fail visibly, never return a partial result
3. Calculators are pure; shared state lives in the engine instance
4. Security rejections are always logged, never explained to the caller
"""

from fincalc.engine import FinancialCalculationEngine, create_engine
from fincalc.errors import (
    CalculationError,
    ComputationTimeoutError,
    NonConvergenceError,
    RateLimitError,
    SecurityRejection,
    ValidationError,
)

__version__ = "1.0.0"
__author__ = "Personal Finance Engineering"

__all__ = [
    "CalculationError",
    "ComputationTimeoutError",
    "FinancialCalculationEngine",
    "NonConvergenceError",
    "RateLimitError",
    "SecurityRejection",
    "ValidationError",
    "create_engine",
]
