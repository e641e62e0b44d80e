"""Settings for solver runs, digests and report generation."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from solverpack.compress import (
    DEFAULT_COMPRESSION_CONFIG,
    CompressionConfig,
    CompressionConfigError,
    compression_config_from_config,
)
from solverpack.display import (
    DEFAULT_SANITIZER_POLICY,
    SanitizerPolicy,
    SanitizerPolicyConfigError,
    sanitizer_policy_from_config,
)
from solverpack.supervisor.command import DEFAULT_COMMAND_PREFIX

ENV_COMMAND_PREFIX = "SOLVERKIT_COMMAND_PREFIX"
ENV_PROVIDER = "SOLVERKIT_PROVIDER"
ENV_MODEL = "SOLVERKIT_MODEL"
ENV_MAX_OUTPUT_CHARS = "SOLVERKIT_MAX_OUTPUT_CHARS"
ENV_TIMEOUT_SECONDS = "SOLVERKIT_TIMEOUT_SECONDS"

SETTINGS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "SolverKit Settings",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "command_prefix": {"type": "string", "minLength": 1},
        "provider": {"type": "string", "minLength": 1},
        "model": {"type": ["string", "null"]},
        "api_key_env": {"type": ["string", "null"]},
        "timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
        "max_prompt_chars": {"type": ["integer", "null"], "minimum": 1},
        "report_providers": {
            "type": "object",
            "additionalProperties": {"type": "string", "pattern": r"^[\w.]+:[\w]+$"},
        },
        "sanitizer": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "enabled": {"type": "boolean"},
                "replace_defaults": {"type": "boolean"},
                "extra_banner_substrings": {"type": "array", "items": {"type": "string"}},
            },
        },
        "compression": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "max_items_per_array": {"type": "integer", "minimum": 0},
                "sample_window": {"type": "integer", "minimum": 0},
                "sample_stride": {"type": "integer", "minimum": 1},
                "max_output_chars": {"type": "integer", "minimum": 1},
                "json_begin_marker": {"type": "string", "minLength": 1},
                "json_end_marker": {"type": "string", "minLength": 1},
                "elision_marker": {"type": "string"},
            },
        },
    },
}


class SettingsError(ValueError):
    """Raised when a settings file cannot be used."""


@dataclass(frozen=True, slots=True)
class Settings:
    command_prefix: str = DEFAULT_COMMAND_PREFIX
    provider: str = "google"
    model: str | None = None
    api_key_env: str | None = None
    timeout_seconds: float = 60.0
    max_prompt_chars: int | None = None
    sanitizer: SanitizerPolicy = DEFAULT_SANITIZER_POLICY
    compression: CompressionConfig = DEFAULT_COMPRESSION_CONFIG
    report_providers: dict[str, str] = field(default_factory=dict)


DEFAULT_SETTINGS = Settings()


def validate_settings_payload(payload: Any) -> None:
    validator = Draft202012Validator(SETTINGS_SCHEMA)
    errors = sorted(validator.iter_errors(payload), key=lambda err: [str(part) for part in err.path])
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.path) or "$"
        raise SettingsError(f"Invalid settings at {location}: {first.message}")


def settings_from_config(config: Mapping[str, Any]) -> Settings:
    """Build settings from an already-parsed mapping."""
    validate_settings_payload(dict(config))
    try:
        sanitizer = sanitizer_policy_from_config(config.get("sanitizer", {}))
        compression = compression_config_from_config(config.get("compression", {}))
    except (SanitizerPolicyConfigError, CompressionConfigError) as error:
        raise SettingsError(str(error)) from error

    return Settings(
        command_prefix=config.get("command_prefix", DEFAULT_SETTINGS.command_prefix),
        provider=config.get("provider", DEFAULT_SETTINGS.provider),
        model=config.get("model"),
        api_key_env=config.get("api_key_env"),
        timeout_seconds=float(config.get("timeout_seconds", DEFAULT_SETTINGS.timeout_seconds)),
        max_prompt_chars=config.get("max_prompt_chars"),
        sanitizer=sanitizer,
        compression=compression,
        report_providers=dict(config.get("report_providers", {})),
    )


def _env_int(environ: Mapping[str, str], key: str) -> int | None:
    raw = environ.get(key)
    if raw is None:
        return None
    try:
        parsed = int(raw)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _env_float(environ: Mapping[str, str], key: str) -> float | None:
    raw = environ.get(key)
    if raw is None:
        return None
    try:
        parsed = float(raw)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _env_str(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key, "").strip()
    return value or None


def apply_environment(settings: Settings, environ: Mapping[str, str] | None = None) -> Settings:
    """Overlay ``SOLVERKIT_*`` variables; unparsable numbers are ignored."""
    source = os.environ if environ is None else environ
    compression = settings.compression
    max_output_chars = _env_int(source, ENV_MAX_OUTPUT_CHARS)
    if max_output_chars is not None:
        compression = compression.with_overrides(max_output_chars=max_output_chars)
    timeout = _env_float(source, ENV_TIMEOUT_SECONDS)

    return Settings(
        command_prefix=_env_str(source, ENV_COMMAND_PREFIX) or settings.command_prefix,
        provider=_env_str(source, ENV_PROVIDER) or settings.provider,
        model=_env_str(source, ENV_MODEL) or settings.model,
        api_key_env=settings.api_key_env,
        timeout_seconds=timeout if timeout is not None else settings.timeout_seconds,
        max_prompt_chars=settings.max_prompt_chars,
        sanitizer=settings.sanitizer,
        compression=compression,
        report_providers=dict(settings.report_providers),
    )


def load_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from an optional JSON file, then apply the environment."""
    settings = DEFAULT_SETTINGS
    if path is not None:
        settings_path = Path(path)
        try:
            raw = json.loads(settings_path.read_text(encoding="utf-8"))
        except FileNotFoundError as error:
            raise SettingsError(f"settings file not found: {settings_path}") from error
        except json.JSONDecodeError as error:
            raise SettingsError(f"Invalid settings JSON ({settings_path}): {error}") from error
        if not isinstance(raw, dict):
            raise SettingsError(f"Settings must be a JSON object ({settings_path}).")
        settings = settings_from_config(raw)
    return apply_environment(settings, environ)
