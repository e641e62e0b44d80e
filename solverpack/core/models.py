"""Core data models for SolverKit runs, captured streams and digests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

STREAM_NAMES = ("stdout", "stderr")


@dataclass(frozen=True, slots=True)
class CapturedStream:
    """Finalized output of one file descriptor."""

    name: str
    lines: tuple[str, ...] = ()
    error: str | None = None

    def __post_init__(self) -> None:
        if self.name not in STREAM_NAMES:
            raise ValueError(f"Unsupported stream name: {self.name}")

    @property
    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "lines": list(self.lines),
            "error": self.error,
        }


@dataclass(slots=True)
class ProcessHandle:
    """One spawned solver process.

    The handle is owned by the supervisor that created it. ``exit_code`` stays
    ``None`` until the process has been waited on.
    """

    pid: int
    command: tuple[str, ...]
    started_at: str
    exit_code: int | None = None
    process: Any = field(default=None, repr=False, compare=False)
    readers: tuple[Any, ...] = field(default=(), repr=False, compare=False)

    @property
    def running(self) -> bool:
        return self.exit_code is None


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of a completed solver run."""

    pid: int
    command: tuple[str, ...]
    exit_code: int
    display_text: str
    stdout: CapturedStream
    stderr: CapturedStream

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def raw_text(self) -> str:
        """Raw combined text consumed by the compression pipeline."""
        return self.stdout.text + self.stderr.text

    def to_dict(self) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "command": list(self.command),
            "exit_code": self.exit_code,
            "display_text": self.display_text,
            "stdout": self.stdout.to_dict(),
            "stderr": self.stderr.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class LogDigest:
    """Bounded, structure-preserving summary of one run's output."""

    text: str
    body_lines: tuple[str, ...] = ()
    json_fragment: Any = None
    json_parsed: bool = False
    truncated: bool = False
    numeric_lines_seen: int = 0
    numeric_lines_kept: int = 0

    @property
    def has_json(self) -> bool:
        return self.json_fragment is not None

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "length": len(self.text),
            "body_line_count": len(self.body_lines),
            "json_parsed": self.json_parsed,
            "has_json": self.has_json,
            "truncated": self.truncated,
            "numeric_lines_seen": self.numeric_lines_seen,
            "numeric_lines_kept": self.numeric_lines_kept,
        }


@dataclass(frozen=True, slots=True)
class PromptRequest:
    """Inputs of one report-generation prompt."""

    digest: LogDigest | str
    system_instruction: str = ""
    focus_text: str = ""

    def render(self, *, max_prompt_chars: int | None = None) -> str:
        from solverpack.prompt.assembler import assemble_prompt

        return assemble_prompt(
            self.system_instruction,
            self.focus_text,
            self.digest,
            max_prompt_chars=max_prompt_chars,
        )
