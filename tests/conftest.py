"""
Shared fixtures for the health monitor tests.
"""
import threading
import time
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

import pytest

from health_metrics.base import MetricsCollector, MetricsSnapshot
from health_metrics.config import resolve
from health_metrics.events import MonitorEvent, MonitorEventType, Observer


Reading = Union[Dict[str, float], Exception]


class ScriptedCollector(MetricsCollector):
    """
    Test-fixture collector that replays scripted readings.

    Each entry is either a reading dict or an exception to raise. Once the
    script is exhausted the last entry repeats. An optional ``delay`` makes
    every collect() call sleep first.
    """

    def __init__(self, script: Iterable[Reading], delay: float = 0.0):
        self._script: List[Reading] = list(script)
        if not self._script:
            raise ValueError("script must not be empty")
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def collect(self) -> Dict[str, float]:
        with self._lock:
            index = min(self.calls, len(self._script) - 1)
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        entry = self._script[index]
        if isinstance(entry, Exception):
            raise entry
        return dict(entry)


class HangingCollector(MetricsCollector):
    """Collector that blocks until released."""

    def __init__(self):
        self.release = threading.Event()
        self.calls = 0

    def collect(self) -> Dict[str, float]:
        self.calls += 1
        self.release.wait(10)
        return {"cpu": 1.0, "memory": 1.0, "disk": 1.0}


class RecordingObserver(Observer[MonitorEvent]):
    """Keeps every event it receives, with a wall-clock arrival time."""

    def __init__(self):
        self.events: List[MonitorEvent] = []
        self.arrivals: List[float] = []
        self._lock = threading.Lock()

    def update(self, event: MonitorEvent) -> None:
        with self._lock:
            self.events.append(event)
            self.arrivals.append(time.monotonic())

    def of_type(self, event_type: MonitorEventType) -> List[MonitorEvent]:
        with self._lock:
            return [e for e in self.events if e.event_type is event_type]

    def arrivals_of_type(self, event_type: MonitorEventType) -> List[float]:
        with self._lock:
            return [t for e, t in zip(self.events, self.arrivals) if e.event_type is event_type]


def make_snapshot(cpu: float, memory: float, disk: float,
                  taken_at: Optional[datetime] = None) -> MetricsSnapshot:
    return MetricsSnapshot(
        cpu_percent=cpu,
        memory_percent=memory,
        disk_percent=disk,
        taken_at=taken_at or datetime(2024, 1, 1, 12, 0, 0),
    )


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def production_config():
    return resolve("production")


@pytest.fixture
def development_config():
    return resolve("development")


@pytest.fixture
def healthy_collector():
    return ScriptedCollector([{"cpu": 10.0, "memory": 20.0, "disk": 30.0}])


@pytest.fixture
def recorder():
    return RecordingObserver()
