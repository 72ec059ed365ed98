"""Tests for the security audit logger."""

import pytest

from fincalc.audit import SecurityAuditLogger
from fincalc.models import SecurityEventType, SecuritySeverity


class TestSecurityAuditLogger:
    """Tests for event history and counts."""

    def test_records_events(self):
        audit = SecurityAuditLogger()
        audit.log_rate_limit("c", max_requests=10, window_seconds=60, retry_after=12.5)
        audit.log_dangerous_input("c", field="debts.0.name", patterns=["<script"])

        events = audit.recent_events()
        assert [e.event_type for e in events] == [
            SecurityEventType.RATE_LIMIT,
            SecurityEventType.DANGEROUS_INPUT,
        ]
        assert events[0].severity == SecuritySeverity.MEDIUM
        assert events[1].severity == SecuritySeverity.HIGH
        assert events[1].details["field"] == "debts.0.name"

    def test_history_is_bounded(self):
        """Test old events fall out while counts keep growing."""
        audit = SecurityAuditLogger(history_size=2)
        for i in range(3):
            audit.log_overflow_attempt("c", "compound_interest", magnitude=1e16 + i, ceiling=1e15)

        assert len(audit.recent_events()) == 2
        assert audit.event_counts() == {"overflow_attempt": 3}

    def test_recent_events_limit(self):
        audit = SecurityAuditLogger()
        for caller in ("a", "b", "c"):
            audit.log_rate_limit(caller, max_requests=1, window_seconds=1, retry_after=1)

        assert [e.caller_id for e in audit.recent_events(limit=2)] == ["b", "c"]
        assert audit.recent_events(limit=0) == []

    def test_clear(self):
        audit = SecurityAuditLogger()
        audit.log_rate_limit("a", max_requests=1, window_seconds=1, retry_after=1)
        audit.clear()

        assert audit.recent_events() == []
        assert audit.event_counts() == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
