"""Human-facing display helpers."""

from solverpack.display.sanitizer import (
    DEFAULT_BANNER_SUBSTRINGS,
    DEFAULT_SANITIZER_POLICY,
    SanitizerPolicy,
    SanitizerPolicyConfigError,
    build_sanitizer_policy,
    load_sanitizer_policy_from_file,
    sanitize,
    sanitizer_policy_from_config,
)

__all__ = [
    "DEFAULT_BANNER_SUBSTRINGS",
    "DEFAULT_SANITIZER_POLICY",
    "SanitizerPolicy",
    "SanitizerPolicyConfigError",
    "build_sanitizer_policy",
    "load_sanitizer_policy_from_file",
    "sanitize",
    "sanitizer_policy_from_config",
]
