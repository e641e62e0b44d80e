import json
from pathlib import Path

import pytest

from solverpack.display import (
    DEFAULT_BANNER_SUBSTRINGS,
    SanitizerPolicy,
    SanitizerPolicyConfigError,
    build_sanitizer_policy,
    load_sanitizer_policy_from_file,
    sanitize,
    sanitizer_policy_from_config,
)

GUROBI_HEADER = (
    "Set parameter Username\n"
    "Academic license - for non-commercial use only - expires 2027-01-01\n"
    "Gurobi Optimizer version 11.0.0 build v11.0.0rc2 (linux64)\n"
    "CPU model: Demo CPU\n"
    "Thread count: 8 physical cores, 16 logical processors\n"
    "Optimize a model with 120 rows\n"
    "Model fingerprint: 0x5a1e2b3c\n"
    "Optimal objective 4.200000000e+01\n"
)


def test_sanitize_removes_vendor_banner_lines() -> None:
    assert sanitize(GUROBI_HEADER) == (
        "Optimize a model with 120 rows\nOptimal objective 4.200000000e+01"
    )


def test_sanitize_passes_plain_output_through() -> None:
    assert sanitize("1 2 3\n") == "1 2 3"


def test_sanitize_strips_carriage_returns_and_keeps_blank_lines() -> None:
    assert sanitize("a\r\n\r\nb\r\n") == "a\n\nb"


def test_sanitize_empty_input() -> None:
    assert sanitize("") == ""


def test_sanitize_is_idempotent() -> None:
    once = sanitize(GUROBI_HEADER)
    assert sanitize(once) == once


def test_disabled_policy_keeps_every_line() -> None:
    policy = build_sanitizer_policy(enabled=False)
    assert sanitize("Academic license\nx\n", policy=policy) == "Academic license\nx"


def test_extra_substrings_extend_defaults() -> None:
    policy = build_sanitizer_policy(extra_banner_substrings=("Presolve", ""))

    assert policy.banner_substrings == (*DEFAULT_BANNER_SUBSTRINGS, "Presolve")
    assert sanitize("Presolve time: 0.01s\nAcademic license\nkeep\n", policy=policy) == "keep"


def test_replace_defaults_uses_only_custom_substrings() -> None:
    policy = build_sanitizer_policy(extra_banner_substrings=("noise",), replace_defaults=True)

    assert policy == SanitizerPolicy(enabled=True, banner_substrings=("noise",))
    assert sanitize("Academic license\nnoise here\n", policy=policy) == "Academic license"


def test_policy_from_config_rejects_unknown_keys() -> None:
    with pytest.raises(SanitizerPolicyConfigError, match="Unsupported sanitizer config keys"):
        sanitizer_policy_from_config({"banners": []})


def test_policy_from_config_validates_types() -> None:
    with pytest.raises(SanitizerPolicyConfigError, match="'enabled'"):
        sanitizer_policy_from_config({"enabled": "yes"})
    with pytest.raises(SanitizerPolicyConfigError, match="extra_banner_substrings"):
        sanitizer_policy_from_config({"extra_banner_substrings": "Presolve"})


def test_load_policy_from_file(tmp_path: Path) -> None:
    config_path = tmp_path / "sanitizer.json"
    config_path.write_text(
        json.dumps({"extra_banner_substrings": ["Presolve"], "replace_defaults": True}),
        encoding="utf-8",
    )

    policy = load_sanitizer_policy_from_file(config_path)

    assert policy.banner_substrings == ("Presolve",)


def test_load_policy_from_file_rejects_non_object(tmp_path: Path) -> None:
    config_path = tmp_path / "sanitizer.json"
    config_path.write_text("[]", encoding="utf-8")

    with pytest.raises(SanitizerPolicyConfigError, match="JSON object"):
        load_sanitizer_policy_from_file(config_path)
