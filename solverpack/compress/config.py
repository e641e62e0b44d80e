"""Compression tunables."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from solverpack.compress.exceptions import CompressionConfigError

DEFAULT_MAX_ITEMS_PER_ARRAY = 5
DEFAULT_SAMPLE_WINDOW = 20
DEFAULT_SAMPLE_STRIDE = 20
DEFAULT_MAX_OUTPUT_CHARS = 12000
DEFAULT_JSON_BEGIN_MARKER = "===JSON_BEGIN==="
DEFAULT_JSON_END_MARKER = "===JSON_END==="
DEFAULT_ELISION_MARKER = "... (truncated) ...\n"

_INT_FIELDS = {
    "max_items_per_array": 0,
    "sample_window": 0,
    "sample_stride": 1,
    "max_output_chars": 1,
}
_STR_FIELDS = ("json_begin_marker", "json_end_marker", "elision_marker")


@dataclass(frozen=True, slots=True)
class CompressionConfig:
    """Parameters of :func:`solverpack.compress.compress`."""

    max_items_per_array: int = DEFAULT_MAX_ITEMS_PER_ARRAY
    sample_window: int = DEFAULT_SAMPLE_WINDOW
    sample_stride: int = DEFAULT_SAMPLE_STRIDE
    max_output_chars: int = DEFAULT_MAX_OUTPUT_CHARS
    json_begin_marker: str = DEFAULT_JSON_BEGIN_MARKER
    json_end_marker: str = DEFAULT_JSON_END_MARKER
    elision_marker: str = DEFAULT_ELISION_MARKER

    def __post_init__(self) -> None:
        for name, minimum in _INT_FIELDS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise CompressionConfigError(f"'{name}' must be an integer.")
            if value < minimum:
                raise CompressionConfigError(f"'{name}' must be >= {minimum}, got {value}.")
        for name in _STR_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                raise CompressionConfigError(f"'{name}' must be a string.")
        if not self.json_begin_marker or not self.json_end_marker:
            raise CompressionConfigError("JSON markers cannot be empty.")

    def with_overrides(self, **overrides: Any) -> "CompressionConfig":
        """Return a copy with every non-``None`` override applied."""
        applied = {key: value for key, value in overrides.items() if value is not None}
        if not applied:
            return self
        try:
            return replace(self, **applied)
        except TypeError as error:
            raise CompressionConfigError(str(error)) from error

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_items_per_array": self.max_items_per_array,
            "sample_window": self.sample_window,
            "sample_stride": self.sample_stride,
            "max_output_chars": self.max_output_chars,
            "json_begin_marker": self.json_begin_marker,
            "json_end_marker": self.json_end_marker,
            "elision_marker": self.elision_marker,
        }


DEFAULT_COMPRESSION_CONFIG = CompressionConfig()


def compression_config_from_config(
    config: Mapping[str, Any],
    *,
    base_config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
) -> CompressionConfig:
    """Create a compression config from a settings mapping."""
    supported_keys = set(_INT_FIELDS) | set(_STR_FIELDS)
    unknown = sorted(set(config.keys()) - supported_keys)
    if unknown:
        raise CompressionConfigError(
            "Unsupported compression config keys: " + ", ".join(unknown)
        )
    return base_config.with_overrides(**dict(config))
