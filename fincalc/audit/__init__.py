"""Security audit logging package."""

from fincalc.audit.logger import SecurityAuditLogger

__all__ = ["SecurityAuditLogger"]
