"""
Cancellable recurring tasks.

Each RecurringTask owns one daemon thread and runs its action on a fixed-rate
schedule. Ticks of the same task run sequentially on that thread, so they can
never overlap.
"""
import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RecurringTask:
    """
    Runs ``action`` every ``interval_seconds`` until cancelled.

    Deadlines are computed from the start time rather than from the end of
    the previous tick, so a slow or failing tick does not push later ticks
    back. If a tick overruns one or more deadlines, those deadlines are
    skipped instead of being run back-to-back.
    """

    def __init__(self,
                 name: str,
                 interval_seconds: float,
                 action: Callable[[], object],
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the task.

        Args:
            name: Name used for the thread and in log messages
            interval_seconds: Period between tick starts
            action: Callable run on every tick
            clock: Monotonic time source
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.name = name
        self.interval_seconds = interval_seconds
        self._action = action
        self._clock = clock

        self._stop_event = threading.Event()
        # Held for the duration of a tick; cancel() waits on it
        self._tick_lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None
        self._started = False
        self.tick_count = 0
        self.skipped_count = 0

    @property
    def is_running(self) -> bool:
        return (self._thread is not None
                and self._thread.is_alive()
                and not self._stop_event.is_set())

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> None:
        """
        Start the task thread. The first tick runs one interval from now.

        Raises:
            RuntimeError: If the task was already started or the thread
                cannot be created.
        """
        if self._started:
            raise RuntimeError(f"Recurring task {self.name} was already started")
        self._started = True
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name=f"RecurringTask-{self.name}"
        )
        self._thread.start()
        logger.debug("Started recurring task %s every %.3fs", self.name, self.interval_seconds)

    def cancel(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the task.

        A tick that is already running is allowed to finish; no tick starts
        once this method has returned.

        Args:
            timeout: Maximum time to wait for the running tick and the thread

        Returns:
            True if the task thread has finished, False if it is still alive.
        """
        self._stop_event.set()

        acquired = self._tick_lock.acquire(timeout=-1 if timeout is None else timeout)
        if acquired:
            self._tick_lock.release()
        else:
            logger.warning("Recurring task %s still running a tick after %.3fs", self.name, timeout)

        thread = self._thread
        if thread is None:
            return True
        if thread is not threading.current_thread():
            thread.join(timeout)
        finished = not thread.is_alive() or thread is threading.current_thread()
        if finished:
            logger.debug("Cancelled recurring task %s after %d ticks", self.name, self.tick_count)
        return finished

    def _run_loop(self) -> None:
        """Thread body: wait for each deadline and run the action."""
        next_run = self._clock() + self.interval_seconds

        while not self._stop_event.is_set():
            delay = next_run - self._clock()
            if delay > 0 and self._stop_event.wait(delay):
                break

            with self._tick_lock:
                if self._stop_event.is_set():
                    break
                self._run_tick()

            now = self._clock()
            next_run += self.interval_seconds
            if next_run <= now:
                missed = int((now - next_run) // self.interval_seconds) + 1
                next_run += missed * self.interval_seconds
                self.skipped_count += missed
                logger.warning("Recurring task %s overran its interval, skipped %d tick(s)",
                               self.name, missed)

    def _run_tick(self) -> None:
        self.tick_count += 1
        try:
            self._action()
        except Exception:
            logger.exception("Error in recurring task %s", self.name)
