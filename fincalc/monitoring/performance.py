"""
Performance Monitor

Append-only log of engine invocations: one PerformanceMetric per call,
successful, cached or failed. There is no automatic eviction unless a
max_metrics bound is configured; callers inspect and truncate the log
themselves.
"""

import threading
from collections import defaultdict
from typing import Optional

from fincalc.models.metrics import FunctionSummary, PerformanceMetric


class PerformanceMonitor:
    """Thread-safe metrics log."""

    def __init__(self, max_metrics: Optional[int] = None):
        """
        Args:
            max_metrics: Keep only this many most recent metrics.
                         None keeps everything.
        """
        if max_metrics is not None and max_metrics < 1:
            raise ValueError("max_metrics must be at least 1 when set")
        self.max_metrics = max_metrics
        self._metrics: list[PerformanceMetric] = []
        self._lock = threading.Lock()

    def record(
        self,
        function_name: str,
        execution_time_ms: float,
        cache_hit: bool = False,
        input_size: int = 0,
        complexity: Optional[float] = None,
        succeeded: bool = True,
        error_type: Optional[str] = None,
    ) -> PerformanceMetric:
        metric = PerformanceMetric(
            function_name=function_name,
            execution_time_ms=max(execution_time_ms, 0.0),
            cache_hit=cache_hit,
            input_size=input_size,
            complexity=complexity,
            succeeded=succeeded,
            error_type=error_type,
        )
        with self._lock:
            self._metrics.append(metric)
            if self.max_metrics is not None and len(self._metrics) > self.max_metrics:
                del self._metrics[: len(self._metrics) - self.max_metrics]
        return metric

    def get_metrics(self, function_name: Optional[str] = None) -> list[PerformanceMetric]:
        """Copy of the log in recording order, optionally for one function."""
        with self._lock:
            metrics = list(self._metrics)
        if function_name is not None:
            metrics = [m for m in metrics if m.function_name == function_name]
        return metrics

    def truncate(self, keep_last: int = 0) -> int:
        """
        Drop all but the most recent `keep_last` metrics.

        Returns the number of metrics removed.
        """
        if keep_last < 0:
            raise ValueError("keep_last cannot be negative")
        with self._lock:
            removed = max(len(self._metrics) - keep_last, 0)
            del self._metrics[:removed]
            return removed

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def summary(self) -> dict[str, FunctionSummary]:
        """Per-function call counts and timings."""
        grouped: dict[str, list[PerformanceMetric]] = defaultdict(list)
        for metric in self.get_metrics():
            grouped[metric.function_name].append(metric)

        summaries = {}
        for name, metrics in grouped.items():
            times = [m.execution_time_ms for m in metrics]
            summaries[name] = FunctionSummary(
                function_name=name,
                calls=len(metrics),
                failures=sum(1 for m in metrics if not m.succeeded),
                cache_hits=sum(1 for m in metrics if m.cache_hit),
                average_time_ms=sum(times) / len(times),
                max_time_ms=max(times),
            )
        return summaries
