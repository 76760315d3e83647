"""
Base classes and value types for health metrics collection.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Tuple


METRIC_NAMES: Tuple[str, ...] = ("cpu", "memory", "disk")


class HealthStatus(Enum):
    """Overall health derived from a snapshot and a threshold."""
    HEALTHY = "healthy"
    WARNING = "warning"


def _check_percent(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if math.isnan(value) or not 0.0 <= value <= 100.0:
        raise ValueError(f"{name} must be within [0, 100], got {value}")
    return value


@dataclass(frozen=True)
class MetricsSnapshot:
    """One immutable observation of CPU, memory and disk usage."""
    cpu_percent: float
    memory_percent: float
    disk_percent: float
    taken_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        # Frozen dataclass, so normalized values go through object.__setattr__
        for attr in ("cpu_percent", "memory_percent", "disk_percent"):
            object.__setattr__(self, attr, _check_percent(attr, getattr(self, attr)))

    @classmethod
    def from_reading(cls, reading: Dict[str, Any], taken_at: datetime) -> "MetricsSnapshot":
        """
        Build a snapshot from a collector reading.

        Args:
            reading: Mapping with ``cpu``, ``memory`` and ``disk`` keys.
            taken_at: When the reading was taken.

        Raises:
            ValueError: If a key is missing or a value is out of range.
        """
        missing = [name for name in METRIC_NAMES if name not in reading]
        if missing:
            raise ValueError(f"Reading is missing metrics: {', '.join(missing)}")
        return cls(
            cpu_percent=reading["cpu"],
            memory_percent=reading["memory"],
            disk_percent=reading["disk"],
            taken_at=taken_at,
        )

    def as_dict(self) -> Dict[str, float]:
        """Metric values keyed by metric name."""
        return {
            "cpu": self.cpu_percent,
            "memory": self.memory_percent,
            "disk": self.disk_percent,
        }

    @property
    def max_percent(self) -> float:
        """The highest of the three usage percentages."""
        return max(self.cpu_percent, self.memory_percent, self.disk_percent)


@dataclass(frozen=True)
class HealthReport:
    """The record emitted for one health-check tick."""
    snapshot: MetricsSnapshot
    status: HealthStatus
    threshold_percent: float
    breached: Tuple[str, ...] = ()

    @property
    def is_warning(self) -> bool:
        return self.status is HealthStatus.WARNING

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report to a plain dictionary."""
        return {
            "timestamp": self.snapshot.taken_at.isoformat(),
            "cpu_percent": self.snapshot.cpu_percent,
            "memory_percent": self.snapshot.memory_percent,
            "disk_percent": self.snapshot.disk_percent,
            "status": self.status.name,
            "threshold_percent": self.threshold_percent,
            "breached": list(self.breached),
        }


class MetricsCollector(ABC):
    """
    Abstract base class for metric collectors.

    Collectors are the pluggable source of raw usage numbers. They return
    plain percentages and leave validation and timing to the sampler.
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def collect(self) -> Dict[str, float]:
        """
        Collect one reading.

        Returns:
            A dictionary with ``cpu``, ``memory`` and ``disk`` percentages.
        """
        pass

    def is_available(self) -> bool:
        """
        Check if this collector can be used on the current system.

        Returns:
            True if the collector can be used, False otherwise.
        """
        return True
