"""Banner filtering for solver output shown to humans."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Mapping

DEFAULT_BANNER_SUBSTRINGS = (
    "Set parameter",
    "Academic license",
    "Gurobi Optimizer version",
    "CPU model",
    "Thread count",
    "Model fingerprint",
)


class SanitizerPolicyConfigError(ValueError):
    """Raised when a sanitizer config payload is invalid."""


@dataclass(frozen=True, slots=True)
class SanitizerPolicy:
    """Which vendor banner lines are hidden from the display text."""

    enabled: bool = True
    banner_substrings: tuple[str, ...] = field(default_factory=lambda: DEFAULT_BANNER_SUBSTRINGS)

    def matches(self, line: str) -> bool:
        return any(substring in line for substring in self.banner_substrings)


DEFAULT_SANITIZER_POLICY = SanitizerPolicy()


def build_sanitizer_policy(
    *,
    enabled: bool = True,
    extra_banner_substrings: tuple[str, ...] = (),
    replace_defaults: bool = False,
    base_policy: SanitizerPolicy = DEFAULT_SANITIZER_POLICY,
) -> SanitizerPolicy:
    """Build a policy by extending (or replacing) the base banner list."""
    substrings: list[str] = [] if replace_defaults else list(base_policy.banner_substrings)
    for value in extra_banner_substrings:
        if not isinstance(value, str):
            raise SanitizerPolicyConfigError("banner substrings must be strings.")
        # An empty substring would match every line.
        if value and value not in substrings:
            substrings.append(value)
    return SanitizerPolicy(enabled=enabled, banner_substrings=tuple(substrings))


def sanitizer_policy_from_config(
    config: Mapping[str, Any],
    *,
    base_policy: SanitizerPolicy = DEFAULT_SANITIZER_POLICY,
) -> SanitizerPolicy:
    """Create a sanitizer policy from a config mapping."""
    supported_keys = {"enabled", "extra_banner_substrings", "replace_defaults"}
    unknown = sorted(set(config.keys()) - supported_keys)
    if unknown:
        raise SanitizerPolicyConfigError(
            "Unsupported sanitizer config keys: " + ", ".join(unknown)
        )

    enabled_value = config.get("enabled", base_policy.enabled)
    if not isinstance(enabled_value, bool):
        raise SanitizerPolicyConfigError("sanitizer config key 'enabled' must be a boolean.")

    replace_value = config.get("replace_defaults", False)
    if not isinstance(replace_value, bool):
        raise SanitizerPolicyConfigError(
            "sanitizer config key 'replace_defaults' must be a boolean."
        )

    extra = config.get("extra_banner_substrings", [])
    if not isinstance(extra, list):
        raise SanitizerPolicyConfigError(
            "sanitizer config key 'extra_banner_substrings' must be a JSON array of strings."
        )

    return build_sanitizer_policy(
        enabled=enabled_value,
        extra_banner_substrings=tuple(extra),
        replace_defaults=replace_value,
        base_policy=base_policy,
    )


def load_sanitizer_policy_from_file(
    path: str | Path,
    *,
    base_policy: SanitizerPolicy = DEFAULT_SANITIZER_POLICY,
) -> SanitizerPolicy:
    """Load sanitizer config from a JSON file."""
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise SanitizerPolicyConfigError(
            f"Invalid sanitizer config JSON ({config_path}): {error}"
        ) from error
    if not isinstance(raw, dict):
        raise SanitizerPolicyConfigError(
            f"Sanitizer config must be a JSON object ({config_path})."
        )
    return sanitizer_policy_from_config(raw, base_policy=base_policy)


def _split_lines(text: str) -> list[str]:
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def sanitize(raw_stdout: str, *, policy: SanitizerPolicy = DEFAULT_SANITIZER_POLICY) -> str:
    """Drop banner lines; keep every other line verbatim and in order.

    Display only. Compression must run on the unsanitized text.
    """
    lines = _split_lines(raw_stdout)
    if not policy.enabled:
        return "\n".join(lines)
    return "\n".join(line for line in lines if not policy.matches(line))
