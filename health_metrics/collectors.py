"""
Metric collector implementations.
"""
import random
from typing import Dict, Optional

import psutil

from .base import MetricsCollector


class SimulatedMetricsCollector(MetricsCollector):
    """Produces uniformly random usage values in [0, 100)."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def collect(self) -> Dict[str, float]:
        return {
            "cpu": self._rng.random() * 100,
            "memory": self._rng.random() * 100,
            "disk": self._rng.random() * 100,
        }


class SystemMetricsCollector(MetricsCollector):
    """
    Collects real usage values from the operating system via psutil.

    CPU usage is measured since the previous call, so the very first reading
    after construction is primed during ``__init__``.
    """

    def __init__(self, disk_path: str = "/"):
        self.disk_path = disk_path
        # Prime the CPU counter; psutil returns 0.0 on the first call
        psutil.cpu_percent(interval=None)

    def is_available(self) -> bool:
        try:
            psutil.disk_usage(self.disk_path)
        except (OSError, psutil.Error):
            return False
        return True

    def collect(self) -> Dict[str, float]:
        return {
            "cpu": psutil.cpu_percent(interval=None),
            "memory": psutil.virtual_memory().percent,
            "disk": psutil.disk_usage(self.disk_path).percent,
        }


COLLECTORS = {
    "simulated": SimulatedMetricsCollector,
    "system": SystemMetricsCollector,
}


def create_collector(name: str) -> MetricsCollector:
    """
    Create a collector by name.

    Args:
        name: One of the keys of ``COLLECTORS``.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        collector_cls = COLLECTORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown collector {name!r}; expected one of {', '.join(sorted(COLLECTORS))}"
        ) from None
    return collector_cls()
