"""Load-stage timing for the catalog governance engine."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

from catalog_governance.core.constants import BANNER_WIDTH


class PerformanceTracker:
    """Track execution time for pipeline stages"""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter):
        self.metrics: dict[str, float] = {}
        self.logger = logger
        self.start_times: dict[str, float] = {}

    def start(self, operation_name: str):
        """Start timing an operation"""
        self.start_times[operation_name] = time.perf_counter()

    def end(self, operation_name: str):
        """End timing an operation"""
        if operation_name not in self.start_times:
            return
        duration = time.perf_counter() - self.start_times.pop(operation_name)
        self.metrics[operation_name] = duration
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"{operation_name} completed in {duration:.2f}s")

    @contextmanager
    def track(self, operation_name: str) -> Iterator[None]:
        """Time the enclosed block; the timing is recorded even when it raises."""
        self.start(operation_name)
        try:
            yield
        finally:
            self.end(operation_name)

    @property
    def total(self) -> float:
        return sum(self.metrics.values())

    def get_summary(self) -> str:
        """Generate performance summary"""
        if not self.metrics:
            return "No performance metrics collected"

        total = self.total
        lines = ["", "=" * BANNER_WIDTH, "LOAD PERFORMANCE SUMMARY", "=" * BANNER_WIDTH]
        for operation, duration in sorted(self.metrics.items(), key=lambda x: x[1], reverse=True):
            percentage = (duration / total) * 100 if total > 0 else 0
            lines.append(f"{operation:35s}: {duration:6.2f}s ({percentage:5.1f}%)")
        lines.extend(["=" * BANNER_WIDTH, f"{'Total Load Time':35s}: {total:6.2f}s", "=" * BANNER_WIDTH])
        return "\n".join(lines)
