"""
Security Audit Logger

DESIGN DECISION: Every security rejection is logged.
This provides:
1. Traceability of abusive or malformed callers
2. The specific reason behind a generic rejection message
3. Counts for security statistics

The audit logger:
- Is synchronous, because the engine itself is synchronous
- Keeps a bounded history of recent events in memory
- Never logs ordinary validation failures, only security events
"""

import threading
from collections import Counter, deque
from typing import Optional

import structlog

from fincalc.models.audit import (
    SecurityEvent,
    SecurityEventBuilder,
    SecuritySeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class SecurityAuditLogger:
    """
    Central security logging service.

    Logs events both to:
    1. Structured local log
    2. A bounded in-memory history (for statistics and inspection)
    """

    def __init__(self, history_size: int = 500):
        """
        Initialize security logger.

        Args:
            history_size: Number of recent events kept in memory.
                          0 disables the history.
        """
        self._events: deque[SecurityEvent] = deque(maxlen=history_size)
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()
        self._logger = structlog.get_logger("fincalc.security")

    def log(self, event: SecurityEvent) -> None:
        """Log a security event locally and record it in the history."""
        log_dict = event.to_log_dict()

        if event.severity in (SecuritySeverity.HIGH, SecuritySeverity.CRITICAL):
            self._logger.error("security_event", **log_dict)
        elif event.severity == SecuritySeverity.MEDIUM:
            self._logger.warning("security_event", **log_dict)
        else:
            self._logger.info("security_event", **log_dict)

        with self._lock:
            self._events.append(event)
            self._counts[event.event_type.value] += 1

    def log_rate_limit(
        self,
        caller_id: str,
        max_requests: int,
        window_seconds: float,
        retry_after: float,
    ) -> None:
        """Log a rate limit breach."""
        event = SecurityEventBuilder.rate_limit(
            caller_id=caller_id,
            max_requests=max_requests,
            window_seconds=window_seconds,
            retry_after=retry_after,
        )
        self.log(event)

    def log_dangerous_input(
        self,
        caller_id: str,
        field: str,
        patterns: list[str],
    ) -> None:
        """Log script-like content found in an input string."""
        event = SecurityEventBuilder.dangerous_input(
            caller_id=caller_id,
            field=field,
            patterns=patterns,
        )
        self.log(event)

    def log_overflow_attempt(
        self,
        caller_id: str,
        calculation: str,
        magnitude: float,
        ceiling: float,
    ) -> None:
        """Log parameters whose scale would overflow or exhaust the engine."""
        event = SecurityEventBuilder.overflow_attempt(
            caller_id=caller_id,
            calculation=calculation,
            magnitude=magnitude,
            ceiling=ceiling,
        )
        self.log(event)

    def recent_events(self, limit: Optional[int] = None) -> list[SecurityEvent]:
        """Most recent events, oldest first."""
        with self._lock:
            events = list(self._events)
        if limit is not None:
            return events[-limit:] if limit > 0 else []
        return events

    def event_counts(self) -> dict[str, int]:
        """Events recorded per type since creation or the last clear."""
        with self._lock:
            return dict(self._counts)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
            self._counts.clear()
