"""Whitespace normalization and numeric-line decimation."""

from __future__ import annotations

from dataclasses import dataclass
import re

_SPACE_RUN_RE = re.compile(r" {2,}")


@dataclass(frozen=True, slots=True)
class SampleResult:
    lines: tuple[str, ...]
    numeric_seen: int
    numeric_kept: int


def collapse_spaces(text: str) -> str:
    """Collapse runs of two or more spaces; tabs and newlines are untouched."""
    return _SPACE_RUN_RE.sub(" ", text)


def is_numeric_line(line: str) -> bool:
    stripped = line.lstrip()
    return bool(stripped) and stripped[0] in "0123456789"


def sample_lines(text: str, *, window: int, stride: int) -> SampleResult:
    """Drop blank lines and thin out numeric iteration rows.

    The n-th numeric line (1-based) is kept when ``n < window`` or when ``n``
    is a multiple of ``stride``. Lines starting with anything else are always
    kept and do not advance the counter.
    """
    if stride < 1:
        raise ValueError("stride must be >= 1")

    kept: list[str] = []
    seen = 0
    numeric_kept = 0
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip():
            continue
        if not is_numeric_line(line):
            kept.append(line)
            continue
        seen += 1
        if seen < window or seen % stride == 0:
            kept.append(line)
            numeric_kept += 1
    return SampleResult(lines=tuple(kept), numeric_seen=seen, numeric_kept=numeric_kept)
