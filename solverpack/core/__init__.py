"""Core data models shared across SolverKit subsystems."""

from solverpack.core.models import (
    STREAM_NAMES,
    CapturedStream,
    LogDigest,
    ProcessHandle,
    PromptRequest,
    RunResult,
)

__all__ = [
    "STREAM_NAMES",
    "CapturedStream",
    "LogDigest",
    "ProcessHandle",
    "PromptRequest",
    "RunResult",
]
