"""State file for the solver run started from the command line.

``solverkit run`` records the child pid here so a later ``solverkit cancel``
from another shell can find it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any, Sequence

logger = logging.getLogger(__name__)


class RunStateError(ValueError):
    """Raised when a run state record is malformed."""


@dataclass(frozen=True, slots=True)
class SolverRunState:
    """The solver currently supervised by ``solverkit run``."""

    pid: int
    command: tuple[str, ...]
    started_at: str

    def __post_init__(self) -> None:
        if isinstance(self.pid, bool) or not isinstance(self.pid, int) or self.pid <= 0:
            raise RunStateError(f"pid must be a positive integer, got {self.pid!r}")
        if not self.command or not all(isinstance(part, str) for part in self.command):
            raise RunStateError("command must be a non-empty list of strings")
        if not isinstance(self.started_at, str) or not self.started_at:
            raise RunStateError("started_at must be an ISO-8601 timestamp")

    @classmethod
    def begin(cls, pid: int, command: Sequence[str]) -> "SolverRunState":
        return cls(
            pid=int(pid),
            command=tuple(command),
            started_at=datetime.now(timezone.utc).isoformat(),
        )

    @classmethod
    def from_dict(cls, payload: Any) -> "SolverRunState":
        if not isinstance(payload, dict):
            raise RunStateError("run state must be a JSON object")
        command = payload.get("command")
        if not isinstance(command, list):
            raise RunStateError("command must be a non-empty list of strings")
        return cls(
            pid=payload.get("pid"),
            command=tuple(command),
            started_at=payload.get("started_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "command": list(self.command),
            "started_at": self.started_at,
        }


def default_run_state_path() -> Path:
    return Path("runs/solver/state.json")


def read_run_state(path: str | Path) -> SolverRunState | None:
    """Return the recorded run, or ``None`` when there is no usable record."""
    target = Path(path)
    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as error:
        logger.debug("ignoring unreadable run state %s: %s", target, error)
        return None
    try:
        return SolverRunState.from_dict(payload)
    except RunStateError as error:
        logger.debug("ignoring invalid run state %s: %s", target, error)
        return None


def record_run_state(path: str | Path, state: SolverRunState) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(state.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")


def clear_run_state(path: str | Path) -> None:
    Path(path).unlink(missing_ok=True)
