"""Solver process supervisor: spawn, stream, wait, cancel."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import os
import subprocess
from typing import Any

from solverpack.core.models import CapturedStream, ProcessHandle, RunResult
from solverpack.display.sanitizer import DEFAULT_SANITIZER_POLICY, SanitizerPolicy, sanitize
from solverpack.events import PROCESS_PID_EVENT, Event, EventSink, publish_quietly
from solverpack.supervisor.cancel import CancelResult, CommandRunner, cancel_process
from solverpack.supervisor.command import build_invocation
from solverpack.supervisor.exceptions import ProcessFailure, SpawnError, WaitError
from solverpack.supervisor.registry import DEFAULT_PROCESS_REGISTRY, ProcessRegistry
from solverpack.supervisor.stream_reader import StreamReader

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _process_group_kwargs() -> dict[str, Any]:
    if os.name == "nt":
        return {"creationflags": int(getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0))}
    return {"start_new_session": True}


class SolverSupervisor:
    """Run one external solver at a time per call, streaming both pipes.

    Each run uses three concurrent activities: a stdout reader thread, a
    stderr reader thread and the caller blocked in :meth:`wait`.
    """

    def __init__(
        self,
        *,
        sink: EventSink | None = None,
        registry: ProcessRegistry | None = None,
        sanitizer_policy: SanitizerPolicy = DEFAULT_SANITIZER_POLICY,
        cancel_runner: CommandRunner | None = None,
        cwd: str | os.PathLike[str] | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self.sink = sink
        self.registry = registry or DEFAULT_PROCESS_REGISTRY
        self.sanitizer_policy = sanitizer_policy
        self.cancel_runner = cancel_runner
        self.cwd = cwd
        self.env = env

    def start(self, command_prefix: str, script_path: str, arg_string: str = "") -> ProcessHandle:
        invocation = build_invocation(command_prefix, script_path, arg_string)
        argv = invocation.argv
        logger.debug("spawning solver: %s", argv)
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                env=self.env,
                **_process_group_kwargs(),
            )
        except OSError as error:
            raise SpawnError(f"failed to start {argv[0]}: {error}", command=tuple(argv)) from error

        if process.stdout is None or process.stderr is None:
            process.kill()
            process.wait()
            raise SpawnError(f"output pipes of {argv[0]} were not opened", command=tuple(argv))
        pid = self.registry.register(process)
        publish_quietly(self.sink, Event(kind=PROCESS_PID_EVENT, payload=pid))
        readers = (
            StreamReader(process.stdout, name="stdout", sink=self.sink).start(),
            StreamReader(process.stderr, name="stderr", sink=self.sink).start(),
        )
        return ProcessHandle(
            pid=pid,
            command=tuple(argv),
            started_at=_utc_now(),
            process=process,
            readers=readers,
        )

    def wait(self, handle: ProcessHandle) -> RunResult:
        """Block until the solver exits and return its captured output.

        Raises:
            ProcessFailure: The solver exited with a non-zero status. The
                exception carries the exit code, the stderr text and the
                full :class:`RunResult`.
            WaitError: The OS wait call failed.
        """
        process = handle.process
        if process is None:
            raise WaitError(f"Process {handle.pid} has no live handle.")
        try:
            exit_code = process.wait()
        except OSError as error:
            raise WaitError(f"waiting on pid {handle.pid} failed: {error}") from error
        finally:
            self.registry.unregister(handle.pid)

        captured: dict[str, CapturedStream] = {}
        for reader in handle.readers:
            captured[reader.name] = reader.join()
        stdout = captured.get("stdout") or CapturedStream(name="stdout")
        stderr = captured.get("stderr") or CapturedStream(name="stderr")

        handle.exit_code = int(exit_code)
        handle.process = None
        logger.debug("solver pid=%s exited with %s", handle.pid, exit_code)

        result = RunResult(
            pid=handle.pid,
            command=handle.command,
            exit_code=int(exit_code),
            display_text=sanitize(stdout.text, policy=self.sanitizer_policy),
            stdout=stdout,
            stderr=stderr,
        )
        if exit_code != 0:
            raise ProcessFailure(int(exit_code), stderr.text, result=result)
        return result

    def run(self, command_prefix: str, script_path: str, arg_string: str = "") -> RunResult:
        handle = self.start(command_prefix, script_path, arg_string)
        return self.wait(handle)

    def cancel(self, pid: int) -> CancelResult:
        return cancel_process(pid, registry=self.registry, runner=self.cancel_runner)


def run_solver(
    command_prefix: str,
    script_path: str,
    arg_string: str = "",
    *,
    sink: EventSink | None = None,
    sanitizer_policy: SanitizerPolicy = DEFAULT_SANITIZER_POLICY,
) -> RunResult:
    """Spawn a solver, stream its output to ``sink`` and wait for it."""
    supervisor = SolverSupervisor(sink=sink, sanitizer_policy=sanitizer_policy)
    return supervisor.run(command_prefix, script_path, arg_string)
