"""Forced, recursive termination of a solver process tree."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
import signal
import subprocess
from typing import Any, Callable

from solverpack.supervisor.registry import DEFAULT_PROCESS_REGISTRY, ProcessRegistry

logger = logging.getLogger(__name__)

CommandRunner = Callable[[list[str]], subprocess.CompletedProcess[str]]


@dataclass(frozen=True, slots=True)
class CancelResult:
    """Best-effort cancellation report. ``ok=False`` is never raised."""

    pid: int
    ok: bool
    message: str
    method: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "ok": self.ok,
            "message": self.message,
            "method": self.method,
        }


def _default_runner(argv: list[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        argv,
        capture_output=True,
        text=True,
        check=False,
    )


def _cancel_windows(pid: int, runner: CommandRunner) -> CancelResult:
    argv = ["taskkill", "/PID", str(pid), "/T", "/F"]
    try:
        completed = runner(argv)
    except OSError as error:
        return CancelResult(pid=pid, ok=False, message=str(error), method="taskkill")
    output = (completed.stderr or completed.stdout or "").strip()
    if completed.returncode != 0:
        return CancelResult(
            pid=pid,
            ok=False,
            message=output or f"taskkill exited with {completed.returncode}",
            method="taskkill",
        )
    return CancelResult(pid=pid, ok=True, message=output or "terminated", method="taskkill")


def _cancel_posix(pid: int, registry: ProcessRegistry) -> CancelResult:
    if pid == os.getpid():
        return CancelResult(pid=pid, ok=False, message="refusing to kill current process", method="none")

    # Registered solvers run in their own session, so the pid is the group id.
    leads_group = pid in registry
    if not leads_group:
        try:
            leads_group = os.getpgid(pid) == pid
        except ProcessLookupError:
            return CancelResult(pid=pid, ok=False, message="no such process", method="none")
        except OSError as error:
            return CancelResult(pid=pid, ok=False, message=str(error), method="none")

    if leads_group and pid != os.getpgrp():
        try:
            os.killpg(pid, signal.SIGKILL)
            return CancelResult(pid=pid, ok=True, message="process group killed", method="killpg")
        except ProcessLookupError:
            return CancelResult(pid=pid, ok=False, message="no such process", method="killpg")
        except OSError:
            logger.debug("killpg(%s) failed, falling back to kill", pid, exc_info=True)

    try:
        os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        return CancelResult(pid=pid, ok=False, message="no such process", method="kill")
    except OSError as error:
        return CancelResult(pid=pid, ok=False, message=str(error), method="kill")
    return CancelResult(pid=pid, ok=True, message="process killed", method="kill")


def cancel_process(
    pid: int,
    *,
    registry: ProcessRegistry | None = None,
    runner: CommandRunner | None = None,
    platform_name: str | None = None,
) -> CancelResult:
    """Kill ``pid`` and its children.

    Failures (already exited, permission denied) are logged and reported in
    the returned :class:`CancelResult`.
    """
    try:
        target = int(pid)
    except (TypeError, ValueError):
        target = 0
    if target <= 0:
        result = CancelResult(pid=target, ok=False, message=f"invalid pid: {pid!r}", method="none")
    elif (platform_name or os.name) == "nt":
        result = _cancel_windows(target, runner or _default_runner)
    else:
        result = _cancel_posix(target, registry or DEFAULT_PROCESS_REGISTRY)

    if result.ok:
        logger.debug("cancelled solver pid=%s via %s", result.pid, result.method)
    else:
        logger.warning("cancel of pid=%s failed: %s", result.pid, result.message)
    return result
