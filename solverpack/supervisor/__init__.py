"""Solver process supervision and live log streaming."""

from solverpack.supervisor.cancel import CancelResult, cancel_process
from solverpack.supervisor.command import DEFAULT_COMMAND_PREFIX, SolverInvocation, build_invocation
from solverpack.supervisor.exceptions import (
    EmptyCommandError,
    ProcessFailure,
    SpawnError,
    SupervisorError,
    WaitError,
)
from solverpack.supervisor.process import SolverSupervisor, run_solver
from solverpack.supervisor.registry import (
    DEFAULT_PROCESS_REGISTRY,
    ProcessRegistry,
    ProcessRegistryError,
)
from solverpack.supervisor.stream_reader import StreamReader, read_stream

__all__ = [
    "CancelResult",
    "cancel_process",
    "DEFAULT_COMMAND_PREFIX",
    "SolverInvocation",
    "build_invocation",
    "SupervisorError",
    "EmptyCommandError",
    "SpawnError",
    "WaitError",
    "ProcessFailure",
    "SolverSupervisor",
    "run_solver",
    "DEFAULT_PROCESS_REGISTRY",
    "ProcessRegistry",
    "ProcessRegistryError",
    "StreamReader",
    "read_stream",
]
