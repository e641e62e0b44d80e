import json
from pathlib import Path

import pytest

from solverpack.settings import DEFAULT_SETTINGS, SettingsError, load_settings, settings_from_config


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_defaults_without_file_or_environment() -> None:
    settings = load_settings(environ={})

    assert settings == DEFAULT_SETTINGS
    assert settings.command_prefix == "python -u"
    assert settings.provider == "google"
    assert settings.timeout_seconds == 60.0
    assert settings.compression.max_output_chars == 12000


def test_settings_file_overrides_sections(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "command_prefix": "python3 -u",
            "provider": "openai",
            "model": "gpt-test",
            "timeout_seconds": 15,
            "max_prompt_chars": 9000,
            "sanitizer": {"extra_banner_substrings": ["Presolve"]},
            "compression": {"max_output_chars": 4000, "sample_stride": 10},
            "report_providers": {"team": "team_reports:TeamProvider"},
        },
    )

    settings = load_settings(path, environ={})

    assert settings.command_prefix == "python3 -u"
    assert settings.provider == "openai"
    assert settings.model == "gpt-test"
    assert settings.timeout_seconds == 15.0
    assert settings.max_prompt_chars == 9000
    assert "Presolve" in settings.sanitizer.banner_substrings
    assert settings.compression.max_output_chars == 4000
    assert settings.compression.sample_stride == 10
    assert settings.compression.sample_window == 20
    assert settings.report_providers == {"team": "team_reports:TeamProvider"}


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(SettingsError, match="bogus"):
        load_settings(_write(tmp_path, {"bogus": 1}), environ={})
    with pytest.raises(SettingsError, match="window"):
        settings_from_config({"compression": {"window": 3}})


def test_invalid_values_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(SettingsError, match="compression.sample_stride"):
        load_settings(_write(tmp_path, {"compression": {"sample_stride": 0}}), environ={})
    with pytest.raises(SettingsError):
        load_settings(_write(tmp_path, {"timeout_seconds": -1}), environ={})
    with pytest.raises(SettingsError, match="JSON object"):
        load_settings(_write(tmp_path, ["not", "an", "object"]), environ={})


def test_missing_and_malformed_files(tmp_path: Path) -> None:
    with pytest.raises(SettingsError, match="not found"):
        load_settings(tmp_path / "missing.json", environ={})

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsError, match="Invalid settings JSON"):
        load_settings(broken, environ={})


def test_environment_overrides_file_values(tmp_path: Path) -> None:
    path = _write(tmp_path, {"provider": "openai", "compression": {"max_output_chars": 4000}})

    settings = load_settings(
        path,
        environ={
            "SOLVERKIT_COMMAND_PREFIX": "pypy3 -u",
            "SOLVERKIT_PROVIDER": "fake",
            "SOLVERKIT_MODEL": "m1",
            "SOLVERKIT_MAX_OUTPUT_CHARS": "800",
            "SOLVERKIT_TIMEOUT_SECONDS": "2.5",
        },
    )

    assert settings.command_prefix == "pypy3 -u"
    assert settings.provider == "fake"
    assert settings.model == "m1"
    assert settings.compression.max_output_chars == 800
    assert settings.timeout_seconds == 2.5


def test_unparsable_environment_numbers_are_ignored() -> None:
    settings = load_settings(
        environ={
            "SOLVERKIT_MAX_OUTPUT_CHARS": "lots",
            "SOLVERKIT_TIMEOUT_SECONDS": "-3",
            "SOLVERKIT_PROVIDER": "   ",
        }
    )

    assert settings.compression.max_output_chars == 12000
    assert settings.timeout_seconds == 60.0
    assert settings.provider == "google"
