"""
Sampling of metrics snapshots from a pluggable collector.
"""
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .base import MetricsCollector, MetricsSnapshot
from .errors import SampleFailure, SampleTimeoutError

logger = logging.getLogger(__name__)


class Sampler:
    """
    Produces one MetricsSnapshot per call from an injected collector.

    The collector runs on a short-lived daemon thread so that a hung
    collector costs at most ``timeout_seconds`` and never stalls the caller.
    A collector that is still running after the timeout is abandoned; its
    eventual result is discarded. Until it returns, further samples fail
    immediately instead of starting another collector thread.
    """

    def __init__(self,
                 collector: MetricsCollector,
                 timeout_seconds: float = 2.0,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the sampler.

        Args:
            collector: Source of raw metric values
            timeout_seconds: Upper bound on a single collection
            clock: Timestamp source for snapshots (default: datetime.now)
        """
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self.collector = collector
        self.timeout_seconds = timeout_seconds
        self._clock = clock or datetime.now
        # Completion flag of the latest collection; only one may run at a time
        self._in_flight: Optional[threading.Event] = None
        self._in_flight_lock = threading.Lock()

    def sample(self) -> MetricsSnapshot:
        """
        Take one snapshot.

        Raises:
            SampleTimeoutError: If the collector does not finish in time.
            SampleFailure: If the collector raises or returns bad values.
        """
        taken_at = self._clock()
        reading = self._collect_with_timeout()
        try:
            return MetricsSnapshot.from_reading(reading, taken_at)
        except (TypeError, ValueError) as e:
            raise SampleFailure(
                f"Collector {self.collector.name} returned an invalid reading: {e}",
                collector=self.collector.name,
            ) from e

    def _collect_with_timeout(self) -> Dict[str, Any]:
        outcome: Dict[str, Any] = {}
        done = threading.Event()

        def worker() -> None:
            try:
                outcome["reading"] = self.collector.collect()
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        with self._in_flight_lock:
            previous = self._in_flight
            if previous is not None and not previous.is_set():
                raise SampleFailure(
                    f"Collector {self.collector.name}: previous collection still in progress",
                    collector=self.collector.name,
                )
            thread = threading.Thread(
                target=worker,
                daemon=True,
                name=f"collect-{self.collector.name}",
            )
            thread.start()
            self._in_flight = done

        if not done.wait(self.timeout_seconds):
            logger.debug("Abandoning collector thread %s after timeout", thread.name)
            raise SampleTimeoutError(self.timeout_seconds, collector=self.collector.name)

        if "error" in outcome:
            error = outcome["error"]
            raise SampleFailure(
                f"Collector {self.collector.name} failed: {error}",
                collector=self.collector.name,
            ) from error

        reading = outcome.get("reading")
        if not isinstance(reading, dict):
            raise SampleFailure(
                f"Collector {self.collector.name} returned {type(reading).__name__}, expected dict",
                collector=self.collector.name,
            )
        return reading
