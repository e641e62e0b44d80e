"""Bounded, structure-preserving digests of solver logs."""

from solverpack.compress.config import (
    DEFAULT_COMPRESSION_CONFIG,
    CompressionConfig,
    compression_config_from_config,
)
from solverpack.compress.exceptions import CompressionConfigError, CompressionError
from solverpack.compress.pipeline import JSON_SECTION_HEADER, SplitLog, compress, split_log, truncate_tail
from solverpack.compress.pruning import parse_and_prune, prune_json, truncation_marker
from solverpack.compress.sampling import collapse_spaces, is_numeric_line, sample_lines

__all__ = [
    "DEFAULT_COMPRESSION_CONFIG",
    "CompressionConfig",
    "compression_config_from_config",
    "CompressionError",
    "CompressionConfigError",
    "JSON_SECTION_HEADER",
    "SplitLog",
    "compress",
    "split_log",
    "truncate_tail",
    "parse_and_prune",
    "prune_json",
    "truncation_marker",
    "collapse_spaces",
    "is_numeric_line",
    "sample_lines",
]
