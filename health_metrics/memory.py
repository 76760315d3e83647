"""
Memory introspection for the monitor process itself.
"""
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

import psutil

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class MemoryUsage:
    """Memory usage of one process at a point in time."""
    pid: int
    rss_mb: float
    vms_mb: float
    percent: float
    taken_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pid": self.pid,
            "rss_mb": self.rss_mb,
            "vms_mb": self.vms_mb,
            "percent": self.percent,
            "timestamp": self.taken_at.isoformat(),
        }


class ProcessMemoryReporter:
    """Reads resident and virtual memory usage of a process via psutil."""

    def __init__(self, pid: Optional[int] = None):
        self.pid = pid if pid is not None else os.getpid()
        self._process = psutil.Process(self.pid)

    def read(self) -> MemoryUsage:
        """
        Take one memory reading.

        Raises:
            psutil.Error: If the process is gone or cannot be inspected.
        """
        with self._process.oneshot():
            info = self._process.memory_info()
            percent = self._process.memory_percent()
        return MemoryUsage(
            pid=self.pid,
            rss_mb=info.rss / BYTES_PER_MB,
            vms_mb=info.vms / BYTES_PER_MB,
            percent=percent,
        )
