"""Performance monitoring package."""

from fincalc.monitoring.performance import PerformanceMonitor

__all__ = ["PerformanceMonitor"]
