"""
Event types and the observer pattern used to emit monitor output.

Delivery is synchronous: ``Subject.notify`` returns only after every observer
has handled the event, so an emit always completes inside the tick that
produced it.
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

# Type variables for generic observer typing
T = TypeVar('T')


class MonitorEventType(Enum):
    """Types of monitor events."""
    HEALTH_CHECKED = auto()
    SAMPLE_FAILED = auto()
    MEMORY_REPORTED = auto()
    STATE_CHANGED = auto()


@dataclass
class MonitorEvent:
    """Event data emitted by the monitor."""

    event_type: MonitorEventType
    source: str
    data: Optional[Any] = None
    message: str = ""
    timestamp: float = field(default_factory=time.time)

    @property
    def age(self) -> float:
        """Get the age of this event in seconds."""
        return time.time() - self.timestamp

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to a dictionary."""
        data = self.data
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        return {
            "event_type": self.event_type.name,
            "timestamp": self.timestamp,
            "source": self.source,
            "data": data,
            "message": self.message
        }


class Observer(Generic[T]):
    """
    Generic observer interface for the observer pattern.

    This abstract class defines the interface for objects that wish to receive
    notifications about events.
    """

    def update(self, event: T) -> None:
        """
        Receive an update notification.

        Args:
            event: The event data
        """
        raise NotImplementedError("Observer subclasses must implement update()")


class Subject(Generic[T]):
    """
    Generic subject for the observer pattern.

    Observers are notified in attach order. An observer that raises is
    logged and skipped; the remaining observers still receive the event.
    """

    def __init__(self):
        """Initialize the subject with an empty observer list."""
        self._observers: List[Observer[T]] = []
        self._observers_lock = threading.Lock()

    def attach(self, observer: Observer[T]) -> None:
        """
        Attach an observer to this subject.

        Args:
            observer: The observer to attach
        """
        with self._observers_lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def detach(self, observer: Observer[T]) -> None:
        """
        Detach an observer from this subject.

        Args:
            observer: The observer to detach
        """
        with self._observers_lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def notify(self, event: T) -> None:
        """
        Notify all observers about an event.

        Args:
            event: The event data to send to observers
        """
        with self._observers_lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                observer.update(event)
            except Exception:
                logger.exception("Error notifying observer %r", observer)
