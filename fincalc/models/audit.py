"""
Security Event Models

Every request the validator turns away for security reasons is recorded.
This provides:
1. Traceability of abusive callers
2. The specific rejection reason, which callers never see
3. Material for security statistics

DESIGN DECISION: Security events are append-only. The in-memory history is
bounded, but events are never modified once built.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class SecurityEventType(str, Enum):
    """Types of security events we record."""
    RATE_LIMIT = "rate_limit"
    DANGEROUS_INPUT = "dangerous_input"
    OVERFLOW_ATTEMPT = "overflow_attempt"


class SecuritySeverity(str, Enum):
    """Severity level for security events."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SecurityEvent(BaseModel):
    """
    A single security event.

    Built by SecurityEventBuilder and written by SecurityAuditLogger.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: SecurityEventType = Field(
        ...,
        description="Type of event"
    )
    severity: SecuritySeverity = Field(
        default=SecuritySeverity.MEDIUM,
        description="Event severity"
    )

    # Who triggered it
    caller_id: str = Field(
        ...,
        description="Identifier of the calling client"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "caller_id": self.caller_id,
            "description": self.description,
            "details": self.details,
        }


class SecurityEventBuilder:
    """
    Helper class to build security events with common patterns.

    Usage:
        event = SecurityEventBuilder.rate_limit(caller_id, 100, 60.0, retry_after=12.0)
        event = SecurityEventBuilder.dangerous_input(caller_id, "name", ["eval("])
    """

    @staticmethod
    def rate_limit(
        caller_id: str,
        max_requests: int,
        window_seconds: float,
        retry_after: float,
    ) -> SecurityEvent:
        return SecurityEvent(
            event_type=SecurityEventType.RATE_LIMIT,
            severity=SecuritySeverity.MEDIUM,
            caller_id=caller_id,
            description=f"Rate limit exceeded: {max_requests} requests per {window_seconds:g}s",
            details={
                "max_requests": max_requests,
                "window_seconds": window_seconds,
                "retry_after": round(retry_after, 3),
            },
        )

    @staticmethod
    def dangerous_input(
        caller_id: str,
        field: str,
        patterns: list[str],
    ) -> SecurityEvent:
        return SecurityEvent(
            event_type=SecurityEventType.DANGEROUS_INPUT,
            severity=SecuritySeverity.HIGH,
            caller_id=caller_id,
            description=f"Dangerous content in field '{field}'",
            details={
                "field": field,
                "patterns": patterns,
            },
        )

    @staticmethod
    def overflow_attempt(
        caller_id: str,
        calculation: str,
        magnitude: float,
        ceiling: float,
    ) -> SecurityEvent:
        return SecurityEvent(
            event_type=SecurityEventType.OVERFLOW_ATTEMPT,
            severity=SecuritySeverity.HIGH,
            caller_id=caller_id,
            description=f"Potential overflow in {calculation}",
            details={
                "calculation": calculation,
                "magnitude": magnitude,
                "ceiling": ceiling,
            },
        )
