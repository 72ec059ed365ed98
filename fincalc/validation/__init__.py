"""Input validation, sanitization and rate limiting."""

from fincalc.validation.rate_limiter import SlidingWindowRateLimiter
from fincalc.validation.rules import check_debt_plan
from fincalc.validation.sanitizer import (
    DANGEROUS_PATTERNS,
    find_dangerous_patterns,
    normalize_keys,
    sanitize_input,
    sanitize_string,
    scan_dangerous,
)
from fincalc.validation.validator import CalculationValidator

__all__ = [
    "CalculationValidator",
    "DANGEROUS_PATTERNS",
    "SlidingWindowRateLimiter",
    "check_debt_plan",
    "find_dangerous_patterns",
    "normalize_keys",
    "sanitize_input",
    "sanitize_string",
    "scan_dangerous",
]
