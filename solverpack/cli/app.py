import json
from importlib.metadata import PackageNotFoundError, version as package_version
import logging
from pathlib import Path
import sys
from dataclasses import dataclass
from typing import Any, NoReturn

import typer

from solverpack.analysis import AnalysisError, MissingApiKeyError, analyze_log, resolve_api_key
from solverpack.compress import CompressionConfigError, compress
from solverpack.display import sanitize
from solverpack.events import LOG_OUTPUT_EVENT, PROCESS_PID_EVENT, CallbackEventSink, Event
from solverpack.prompt import assemble_prompt
from solverpack.providers import (
    ReportProviderRegistryError,
    get_report_provider,
    list_report_provider_keys,
    load_report_providers_from_plugins,
)
from solverpack.run_state import (
    SolverRunState,
    clear_run_state,
    default_run_state_path,
    read_run_state,
    record_run_state,
)
from solverpack.settings import Settings, SettingsError, load_settings
from solverpack.supervisor import (
    EmptyCommandError,
    ProcessFailure,
    SolverSupervisor,
    SpawnError,
    WaitError,
    build_invocation,
    cancel_process,
)

app = typer.Typer(help="SolverKit CLI")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    no_color: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()


def _resolve_cli_version() -> str:
    try:
        return package_version("solverkit")
    except PackageNotFoundError:
        from solverpack import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show SolverKit version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug diagnostics to stderr.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable ANSI color output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.no_color = no_color
    _OUTPUT_OPTIONS.stable_json = stable_json
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def _echo(message: str, *, err: bool = False, force: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err and not force:
        return
    typer.echo(message, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    else:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            indent=2,
        )
    typer.echo(rendered, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _fail(message: str, *, exit_code: int, json_output: bool, **extra: Any) -> NoReturn:
    if json_output:
        _echo_json({"status": "error", "exit_code": exit_code, "message": message, **extra})
    else:
        _echo(message, err=True)
    raise typer.Exit(code=exit_code)


def _load_cli_settings(path: Path | None, *, json_output: bool) -> Settings:
    try:
        return load_settings(path)
    except SettingsError as error:
        _fail(f"invalid settings: {error}", exit_code=2, json_output=json_output)


def _read_log(path: Path, *, json_output: bool) -> str:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as error:
        _fail(f"cannot read log file {path}: {error}", exit_code=2, json_output=json_output)


def _write_raw(path: Path | None, text: str) -> None:
    if path is None:
        return
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")


@app.command("run")
def run_command(
    script: str = typer.Argument(..., help="Solver script to execute."),
    args: str = typer.Option("", "--args", help="Whitespace-separated solver arguments."),
    prefix: str | None = typer.Option(
        None,
        "--prefix",
        help="Command prefix placed before the script (default: python -u).",
    ),
    settings_path: Path | None = typer.Option(
        None,
        "--settings",
        help="Path to a JSON settings file.",
    ),
    state_file: Path = typer.Option(
        default_run_state_path(),
        "--state-file",
        help="Where the running solver pid is recorded for `cancel`.",
    ),
    raw_out: Path | None = typer.Option(
        None,
        "--raw-out",
        help="Write the combined stdout+stderr text here for later digests.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit a machine-readable run summary.",
    ),
) -> None:
    """Run a solver and stream its output live."""
    settings = _load_cli_settings(settings_path, json_output=json_output)
    command_prefix = prefix if prefix is not None else settings.command_prefix
    try:
        invocation = build_invocation(command_prefix, script, args)
    except EmptyCommandError as error:
        _fail(f"run failed: {error}", exit_code=2, json_output=json_output)

    state_path = Path(state_file)

    def _on_event(event: Event) -> None:
        if event.kind == PROCESS_PID_EVENT:
            record_run_state(state_path, SolverRunState.begin(int(event.payload), invocation.argv))
        elif event.kind == LOG_OUTPUT_EVENT and not _OUTPUT_OPTIONS.quiet:
            # Live lines go to stderr; stdout carries only the final result.
            _echo(str(event.payload), err=True)

    supervisor = SolverSupervisor(
        sink=CallbackEventSink(_on_event),
        sanitizer_policy=settings.sanitizer,
    )
    try:
        result = supervisor.run(command_prefix, script, args)
    except SpawnError as error:
        _fail(f"run failed: {error}", exit_code=2, json_output=json_output)
    except WaitError as error:
        _fail(f"run failed: {error}", exit_code=1, json_output=json_output)
    except ProcessFailure as failure:
        if failure.result is not None:
            _write_raw(raw_out, failure.result.raw_text)
        _fail(
            str(failure),
            exit_code=1,
            json_output=json_output,
            solver_exit_code=failure.exit_code,
            pid=failure.result.pid if failure.result is not None else None,
            raw_out=str(raw_out) if raw_out is not None else None,
        )
    finally:
        clear_run_state(state_path)

    _write_raw(raw_out, result.raw_text)
    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "message": "solver finished",
                "solver_exit_code": result.exit_code,
                "pid": result.pid,
                "command": list(result.command),
                "display_text": result.display_text,
                "raw_out": str(raw_out) if raw_out is not None else None,
            }
        )
    else:
        if result.display_text:
            _echo(result.display_text, force=True)
        if not _OUTPUT_OPTIONS.quiet:
            _echo(f"solver finished: pid={result.pid} exit_code={result.exit_code}", err=True)


@app.command("cancel")
def cancel_command(
    pid: int | None = typer.Argument(
        None,
        help="Solver pid. Defaults to the pid recorded by `run`.",
    ),
    state_file: Path = typer.Option(
        default_run_state_path(),
        "--state-file",
        help="Run state file written by `run`.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable cancel status.",
    ),
) -> None:
    """Forcefully terminate a solver and its children."""
    state_path = Path(state_file)
    recorded = read_run_state(state_path) if pid is None else None
    target = pid if pid is not None else (recorded.pid if recorded is not None else None)
    if target is None or target <= 0:
        _fail(
            "cancel failed: no solver pid given and no running solver recorded.",
            exit_code=2,
            json_output=json_output,
            state_file=str(state_path),
        )

    result = cancel_process(target)
    if recorded is not None:
        # The recorded solver is now killed or was already gone.
        clear_run_state(state_path)

    # Cancellation is best-effort; a failed kill is reported, not fatal.
    message = f"cancel {'ok' if result.ok else 'failed'}: pid={target} ({result.message})"
    if json_output:
        _echo_json(
            {
                "status": "ok" if result.ok else "warning",
                "exit_code": 0,
                "message": message,
                "state_file": str(state_path),
                **result.to_dict(),
            }
        )
    else:
        _echo(message, err=not result.ok, force=not result.ok)


@app.command("sanitize")
def sanitize_command(
    log_file: Path = typer.Argument(..., help="Captured solver stdout."),
    settings_path: Path | None = typer.Option(None, "--settings", help="Path to a JSON settings file."),
) -> None:
    """Print the log with solver banner lines removed."""
    settings = _load_cli_settings(settings_path, json_output=False)
    raw = _read_log(log_file, json_output=False)
    _echo(sanitize(raw, policy=settings.sanitizer), force=True)


@app.command("digest")
def digest_command(
    log_file: Path = typer.Argument(..., help="Captured solver log."),
    max_chars: int | None = typer.Option(None, "--max-chars", help="Output character budget."),
    max_items: int | None = typer.Option(None, "--max-items", help="Items kept per JSON array."),
    window: int | None = typer.Option(None, "--window", help="Numeric lines always kept."),
    stride: int | None = typer.Option(None, "--stride", help="Keep every Nth numeric line after the window."),
    settings_path: Path | None = typer.Option(None, "--settings", help="Path to a JSON settings file."),
    json_output: bool = typer.Option(False, "--json", help="Emit the digest as JSON."),
) -> None:
    """Compress a solver log into a bounded digest."""
    settings = _load_cli_settings(settings_path, json_output=json_output)
    raw = _read_log(log_file, json_output=json_output)
    try:
        config = settings.compression.with_overrides(
            max_output_chars=max_chars,
            max_items_per_array=max_items,
            sample_window=window,
            sample_stride=stride,
        )
    except CompressionConfigError as error:
        _fail(f"digest failed: {error}", exit_code=2, json_output=json_output)

    digest = compress(raw, config)
    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "message": "digest built",
                "digest": digest.to_dict(),
            }
        )
    else:
        _echo(digest.text, force=True)


@app.command("prompt")
def prompt_command(
    log_file: Path = typer.Argument(..., help="Captured solver log."),
    focus: str = typer.Option("", "--focus", help="Extra point the report should analyze."),
    instruction: str = typer.Option("", "--instruction", help="Replace the default instruction."),
    max_prompt_chars: int | None = typer.Option(
        None,
        "--max-prompt-chars",
        help="Re-truncate the digest so the whole prompt fits.",
    ),
    settings_path: Path | None = typer.Option(None, "--settings", help="Path to a JSON settings file."),
) -> None:
    """Print the prompt that `analyze` would send."""
    settings = _load_cli_settings(settings_path, json_output=False)
    raw = _read_log(log_file, json_output=False)
    digest = compress(raw, settings.compression)
    limit = max_prompt_chars if max_prompt_chars is not None else settings.max_prompt_chars
    _echo(assemble_prompt(instruction, focus, digest, max_prompt_chars=limit), force=True)


@app.command("analyze")
def analyze_command(
    log_file: Path = typer.Argument(..., help="Captured solver log."),
    focus: str = typer.Option("", "--focus", help="Extra point the report should analyze."),
    instruction: str = typer.Option("", "--instruction", help="Replace the default instruction."),
    provider: str | None = typer.Option(None, "--provider", help="Report provider key."),
    model: str | None = typer.Option(None, "--model", help="Provider model name."),
    api_key: str | None = typer.Option(None, "--api-key", help="Provider API key."),
    api_key_env: str | None = typer.Option(
        None,
        "--api-key-env",
        help="Environment variable holding the API key.",
    ),
    base_url: str | None = typer.Option(None, "--base-url", help="Override provider base URL."),
    timeout_seconds: float | None = typer.Option(
        None,
        "--timeout-seconds",
        help="HTTP timeout for the provider call.",
    ),
    settings_path: Path | None = typer.Option(None, "--settings", help="Path to a JSON settings file."),
    out: Path | None = typer.Option(None, "--out", help="Write the Markdown report here."),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable analysis output."),
) -> None:
    """Digest a solver log and generate a Markdown report."""
    settings = _load_cli_settings(settings_path, json_output=json_output)
    raw = _read_log(log_file, json_output=json_output)
    provider_key = (provider or settings.provider).strip().lower()

    try:
        load_report_providers_from_plugins(settings.report_providers, overwrite=True)
        adapter = get_report_provider(provider_key)
        resolved_key, env_name = resolve_api_key(
            provider=provider_key,
            explicit_api_key=api_key,
            api_key_env=api_key_env or settings.api_key_env,
        )
    except (ReportProviderRegistryError, ImportError) as error:
        _fail(f"analyze failed: {error}", exit_code=2, json_output=json_output)

    if adapter.requires_network and resolved_key is None:
        hint = f" Set {env_name} or pass --api-key." if env_name else " Pass --api-key."
        _fail(
            f"analyze failed: API key is not set for provider {provider_key}.{hint}",
            exit_code=2,
            json_output=json_output,
        )

    try:
        result = analyze_log(
            raw,
            focus_text=focus,
            system_instruction=instruction,
            provider=provider_key,
            model=model or settings.model,
            api_key=resolved_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds if timeout_seconds is not None else settings.timeout_seconds,
            compression_config=settings.compression,
            max_prompt_chars=settings.max_prompt_chars,
        )
    except MissingApiKeyError as error:
        _fail(f"analyze failed: {error}", exit_code=2, json_output=json_output)
    except AnalysisError as error:
        _fail(f"analyze failed: {error}", exit_code=1, json_output=json_output)

    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.report, encoding="utf-8")

    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "message": "report generated",
                "report_path": str(out) if out is not None else None,
                **result.to_dict(),
            }
        )
    else:
        _echo(result.report, force=True)


@app.command("providers")
def providers_command(
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable provider listing output.",
    ),
) -> None:
    """List supported report provider keys."""
    providers = list(list_report_provider_keys())
    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "message": "supported report providers",
                "providers": providers,
            }
        )
    else:
        _echo("\n".join(providers), force=True)


def main() -> None:
    app()
