"""
Exceptions raised by the health monitor.
"""
from typing import Optional


class MonitorError(Exception):
    """Base class for all health monitor errors."""


class SampleFailure(MonitorError):
    """A single collection attempt failed or produced unusable values."""

    def __init__(self, message: str, collector: Optional[str] = None):
        super().__init__(message)
        self.collector = collector


class SampleTimeoutError(SampleFailure):
    """The collector did not produce a reading within the sample timeout."""

    def __init__(self, timeout_seconds: float, collector: Optional[str] = None):
        super().__init__(
            f"Collector {collector or 'unknown'} did not respond within {timeout_seconds:.2f}s",
            collector=collector,
        )
        self.timeout_seconds = timeout_seconds


class FatalStartupError(MonitorError):
    """The recurring task scheduler could not be established."""
