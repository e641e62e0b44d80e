"""Live process table used by out-of-band cancellation."""

from __future__ import annotations

import subprocess
import threading


class ProcessRegistryError(ValueError):
    """Raised when a pid is registered twice."""


class ProcessRegistry:
    """Map live solver pids to their ``Popen`` objects under one lock.

    A pid is registered right after spawn and removed once the process has
    been waited on, so lookups never return a reaped process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._processes: dict[int, subprocess.Popen[bytes]] = {}

    def register(self, process: subprocess.Popen[bytes]) -> int:
        pid = int(process.pid)
        with self._lock:
            if pid in self._processes:
                raise ProcessRegistryError(f"Process {pid} is already registered.")
            self._processes[pid] = process
        return pid

    def unregister(self, pid: int) -> subprocess.Popen[bytes] | None:
        with self._lock:
            return self._processes.pop(int(pid), None)

    def get(self, pid: int) -> subprocess.Popen[bytes] | None:
        with self._lock:
            return self._processes.get(int(pid))

    def __contains__(self, pid: object) -> bool:
        if not isinstance(pid, int):
            return False
        with self._lock:
            return pid in self._processes

    def pids(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(sorted(self._processes))


DEFAULT_PROCESS_REGISTRY = ProcessRegistry()
