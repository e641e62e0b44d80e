"""Solver command-line construction."""

from __future__ import annotations

from dataclasses import dataclass

from solverpack.supervisor.exceptions import EmptyCommandError

DEFAULT_COMMAND_PREFIX = "python -u"


@dataclass(frozen=True, slots=True)
class SolverInvocation:
    """Tokenized solver command."""

    executable: str
    arguments: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.arguments]


def build_invocation(command_prefix: str, script_path: str, arg_string: str = "") -> SolverInvocation:
    """Tokenize ``prefix + script + args`` into an argv.

    The prefix and the argument string are split on whitespace. The script
    path is passed through as a single token.
    """
    prefix_tokens = (command_prefix or "").split()
    if not prefix_tokens:
        raise EmptyCommandError("Command prefix cannot be empty.")

    arguments = list(prefix_tokens[1:])
    if script_path and script_path.strip():
        arguments.append(script_path.strip())
    arguments.extend((arg_string or "").split())
    return SolverInvocation(executable=prefix_tokens[0], arguments=tuple(arguments))
