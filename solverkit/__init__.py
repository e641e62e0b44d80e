"""Stable public API surface for SolverKit.

This module is the supported import path for library users.
"""

from __future__ import annotations

from solverpack.analysis import AnalysisError, AnalysisResult, analyze_log, resolve_api_key
from solverpack.compress import compress
from solverpack.core.models import LogDigest, RunResult
from solverpack.display import sanitize as _sanitize
from solverpack.events import Event, EventSink, RecordingEventSink
from solverpack.prompt import assemble_prompt
from solverpack.settings import Settings, load_settings
from solverpack.supervisor import (
    CancelResult,
    ProcessFailure,
    SolverSupervisor,
    cancel_process,
)

__version__ = "0.1.0"


def _settings_or_default(settings: Settings | None) -> Settings:
    return settings if settings is not None else load_settings()


def run(
    script: str,
    *,
    args: str = "",
    prefix: str | None = None,
    sink: EventSink | None = None,
    settings: Settings | None = None,
) -> RunResult:
    """Run a solver script, streaming its output lines into ``sink``.

    The process pid is published before any output line. A non-zero exit
    raises :class:`ProcessFailure`, whose ``result`` still holds everything
    captured.
    """
    resolved = _settings_or_default(settings)
    supervisor = SolverSupervisor(sink=sink, sanitizer_policy=resolved.sanitizer)
    return supervisor.run(
        prefix if prefix is not None else resolved.command_prefix,
        script,
        args,
    )


def cancel(pid: int) -> CancelResult:
    """Kill a solver and its child processes. Never raises."""
    return cancel_process(pid)


def sanitize(raw_text: str, *, settings: Settings | None = None) -> str:
    """Drop solver banner lines from ``raw_text`` for display."""
    return _sanitize(raw_text, policy=_settings_or_default(settings).sanitizer)


def digest(
    raw_text: str,
    *,
    max_chars: int | None = None,
    max_items: int | None = None,
    window: int | None = None,
    stride: int | None = None,
    settings: Settings | None = None,
) -> LogDigest:
    """Compress a raw solver log into a bounded digest."""
    config = _settings_or_default(settings).compression.with_overrides(
        max_output_chars=max_chars,
        max_items_per_array=max_items,
        sample_window=window,
        sample_stride=stride,
    )
    return compress(raw_text, config)


def prompt(
    raw_text: str,
    *,
    focus: str = "",
    instruction: str = "",
    settings: Settings | None = None,
) -> str:
    """Build the report prompt for a raw solver log."""
    resolved = _settings_or_default(settings)
    return assemble_prompt(
        instruction,
        focus,
        compress(raw_text, resolved.compression),
        max_prompt_chars=resolved.max_prompt_chars,
    )


def report(
    raw_text: str,
    *,
    focus: str = "",
    instruction: str = "",
    provider: str | None = None,
    model: str | None = None,
    api_key: str | None = None,
    settings: Settings | None = None,
) -> AnalysisResult:
    """Generate a Markdown report for a raw solver log.

    When ``api_key`` is omitted it is read from the provider's environment
    variable. Raises :class:`AnalysisError` on any provider failure.
    """
    resolved = _settings_or_default(settings)
    provider_key = provider or resolved.provider
    resolved_key, _env_name = resolve_api_key(
        provider=provider_key,
        explicit_api_key=api_key,
        api_key_env=resolved.api_key_env,
    )
    return analyze_log(
        raw_text,
        focus_text=focus,
        system_instruction=instruction,
        provider=provider_key,
        model=model or resolved.model,
        api_key=resolved_key,
        timeout_seconds=resolved.timeout_seconds,
        compression_config=resolved.compression,
        max_prompt_chars=resolved.max_prompt_chars,
    )


__all__ = [
    "__version__",
    "AnalysisError",
    "AnalysisResult",
    "CancelResult",
    "Event",
    "EventSink",
    "LogDigest",
    "ProcessFailure",
    "RecordingEventSink",
    "RunResult",
    "Settings",
    "load_settings",
    "run",
    "cancel",
    "sanitize",
    "digest",
    "prompt",
    "report",
]
