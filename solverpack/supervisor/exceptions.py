"""Supervisor subsystem exceptions."""

from __future__ import annotations

from typing import Any


class SupervisorError(Exception):
    """Base class for supervisor errors."""


class EmptyCommandError(SupervisorError):
    """Raised when the command prefix has no executable token."""


class SpawnError(SupervisorError):
    """Raised when the solver process cannot be started."""

    def __init__(self, message: str, *, command: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.command = command


class WaitError(SupervisorError):
    """Raised when waiting on the solver process fails at the OS level."""


class ProcessFailure(SupervisorError):
    """Raised when the solver exits with a failure status."""

    def __init__(self, exit_code: int, stderr: str, *, result: Any = None) -> None:
        super().__init__(f"Exit Code: {exit_code}\n{stderr}")
        self.exit_code = exit_code
        self.stderr = stderr
        self.result = result
