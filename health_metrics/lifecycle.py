"""
Lifecycle controller for the health monitor.

The controller owns the recurring tasks. It runs one health check as soon as
it starts, schedules the periodic health check (and, when configured, the
memory introspection task), and cancels everything when a termination
signal arrives.
"""
import logging
import signal
import threading
from enum import Enum
from typing import Callable, Dict, List, Optional

import psutil

from .alerts.thresholds import ThresholdEvaluator
from .base import HealthReport
from .config import EffectiveConfig
from .errors import FatalStartupError, SampleFailure
from .events import MonitorEvent, MonitorEventType, Subject
from .memory import MemoryUsage, ProcessMemoryReporter
from .sampler import Sampler
from .scheduler import RecurringTask

logger = logging.getLogger(__name__)

HEALTH_TASK_NAME = "health-check"
MEMORY_TASK_NAME = "memory-usage"

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LifecycleState(Enum):
    """States of the monitor lifecycle."""
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class MonitorController(Subject[MonitorEvent]):
    """
    Drives the sample, classify and emit cycle.

    Output is delivered to attached observers as MonitorEvents. The
    controller itself never prints.
    """

    def __init__(self,
                 config: EffectiveConfig,
                 sampler: Sampler,
                 evaluator: Optional[ThresholdEvaluator] = None,
                 memory_reporter: Optional[ProcessMemoryReporter] = None,
                 task_factory: Callable[..., RecurringTask] = RecurringTask):
        """
        Initialize the controller.

        Args:
            config: The resolved, read-only configuration
            sampler: Produces snapshots for each health check
            evaluator: Classifies snapshots (default: built from config)
            memory_reporter: Source for memory introspection; when None the
                memory task is never scheduled
            task_factory: Builds recurring tasks (name, interval, action)
        """
        super().__init__()
        self.config = config
        self.sampler = sampler
        self.evaluator = evaluator or ThresholdEvaluator(config.alert_threshold_percent)
        self.memory_reporter = memory_reporter
        self._task_factory = task_factory

        self._state = LifecycleState.STARTING
        self._state_lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._tasks: List[RecurringTask] = []
        self._previous_handlers: Dict[int, object] = {}

        self.cycle_count = 0
        self.failure_count = 0
        self.last_report: Optional[HealthReport] = None
        # Name of the signal that requested shutdown, e.g. "SIGINT"
        self.received_signal: Optional[str] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def tasks(self) -> List[RecurringTask]:
        return list(self._tasks)

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def _transition(self, target: LifecycleState) -> None:
        with self._state_lock:
            previous = self._state
            self._state = target
        self._announce(previous, target)

    def _announce(self, previous: LifecycleState, target: LifecycleState) -> None:
        logger.debug("Monitor state %s -> %s", previous.name, target.name)
        self.notify(MonitorEvent(
            event_type=MonitorEventType.STATE_CHANGED,
            source="lifecycle",
            data={"from": previous, "to": target},
            message=f"{previous.name} -> {target.name}"
        ))

    def start(self) -> None:
        """
        Run the first health check and schedule the recurring tasks.

        Raises:
            RuntimeError: If the controller has already been started.
            FatalStartupError: If a recurring task cannot be established.
        """
        if self._state is not LifecycleState.STARTING:
            raise RuntimeError(f"Cannot start monitor in state {self._state.name}")

        self.run_cycle()

        try:
            self._schedule(HEALTH_TASK_NAME, self.config.interval_seconds, self.run_cycle)
            if self.config.memory_logging_enabled and self.memory_reporter is not None:
                self._schedule(MEMORY_TASK_NAME,
                               self.config.memory_log_interval_seconds,
                               self.report_memory)
        except (RuntimeError, OSError, MemoryError) as e:
            logger.error("Could not establish recurring tasks: %s", e)
            self._cancel_tasks(timeout=None)
            self._transition(LifecycleState.STOPPED)
            raise FatalStartupError(f"Could not establish recurring tasks: {e}") from e

        self._transition(LifecycleState.RUNNING)

    def _schedule(self, name: str, interval_seconds: float, action: Callable[[], object]) -> None:
        task = self._task_factory(name, interval_seconds, action)
        self._tasks.append(task)
        task.start()

    def run_cycle(self) -> Optional[HealthReport]:
        """
        Run one sample, classify and emit cycle.

        Returns:
            The emitted report, or None if the sample failed or shutdown has
            already been requested.
        """
        if self._stop_requested.is_set():
            return None

        try:
            snapshot = self.sampler.sample()
        except SampleFailure as e:
            self.failure_count += 1
            logger.warning("Health check skipped: %s", e)
            self.notify(MonitorEvent(
                event_type=MonitorEventType.SAMPLE_FAILED,
                source=HEALTH_TASK_NAME,
                data=e,
                message=str(e)
            ))
            return None

        report = self.evaluator.evaluate(snapshot)
        self.cycle_count += 1
        self.last_report = report
        if report.is_warning:
            logger.debug("High resource usage: %s above %.1f%%",
                         ", ".join(report.breached), report.threshold_percent)

        self.notify(MonitorEvent(
            event_type=MonitorEventType.HEALTH_CHECKED,
            source=HEALTH_TASK_NAME,
            data=report,
            message=report.status.name
        ))
        return report

    def report_memory(self) -> Optional[MemoryUsage]:
        """Read and emit the monitor's own memory usage."""
        if self.memory_reporter is None or self._stop_requested.is_set():
            return None

        try:
            usage = self.memory_reporter.read()
        except (psutil.Error, OSError) as e:
            logger.warning("Memory usage not available: %s", e)
            return None

        self.notify(MonitorEvent(
            event_type=MonitorEventType.MEMORY_REPORTED,
            source=MEMORY_TASK_NAME,
            data=usage,
            message=f"RSS {usage.rss_mb:.2f} MB"
        ))
        return usage

    def request_stop(self) -> None:
        """Ask the monitor to shut down. Safe to call from a signal handler."""
        self._stop_requested.set()

    def wait_for_stop_request(self, timeout: Optional[float] = None, poll_interval: float = 0.5) -> bool:
        """
        Block until a stop has been requested.

        Waits in short slices so signal handlers get to run promptly.

        Returns:
            True if a stop was requested, False if the timeout expired.
        """
        waited = 0.0
        while not self._stop_requested.wait(poll_interval):
            waited += poll_interval
            if timeout is not None and waited >= timeout:
                return False
        return True

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Cancel every recurring task and move to STOPPED.

        A tick that is in progress finishes its emit first; no tick begins
        after this method returns. Calling stop more than once is harmless.

        Args:
            timeout: Grace period for each task to finish

        Returns:
            True if every task thread finished within the grace period.
        """
        with self._state_lock:
            if self._state in (LifecycleState.SHUTTING_DOWN, LifecycleState.STOPPED):
                return True
            previous = self._state
            self._state = LifecycleState.SHUTTING_DOWN
        self._stop_requested.set()
        self._announce(previous, LifecycleState.SHUTTING_DOWN)

        finished = self._cancel_tasks(timeout)
        if not finished:
            logger.warning("Some recurring tasks did not finish within %ss", timeout)
        self._transition(LifecycleState.STOPPED)
        return finished

    def _cancel_tasks(self, timeout: Optional[float]) -> bool:
        finished = True
        for task in self._tasks:
            finished = task.cancel(timeout) and finished
        return finished

    def install_signal_handlers(self) -> None:
        """
        Route SIGINT and SIGTERM to request_stop.

        Must be called from the main thread.
        """
        for signum in SHUTDOWN_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        """Put back the handlers that were active before install_signal_handlers."""
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers = {}

    def _handle_signal(self, signum, frame) -> None:
        self.received_signal = signal.Signals(signum).name
        self.request_stop()

    def run_forever(self, grace_seconds: float = 5.0, install_signals: bool = True) -> int:
        """
        Start the monitor and block until a termination signal arrives.

        Args:
            grace_seconds: How long to wait for each task during shutdown
            install_signals: Whether to install SIGINT/SIGTERM handlers

        Returns:
            The process exit code (0 on graceful shutdown).

        Raises:
            FatalStartupError: If the recurring tasks cannot be established.
        """
        if install_signals:
            self.install_signal_handlers()
        try:
            self.start()
            self.wait_for_stop_request()
            if self.received_signal:
                logger.info("Received %s, shutting down monitor", self.received_signal)
            else:
                logger.info("Shutdown requested, shutting down monitor")
        finally:
            self.stop(timeout=grace_seconds)
            if install_signals:
                self.restore_signal_handlers()
        return 0
