"""Solver log compression: split, prune, normalize, sample, bound."""

from __future__ import annotations

from dataclasses import dataclass

from solverpack.compress.config import DEFAULT_COMPRESSION_CONFIG, CompressionConfig
from solverpack.compress.pruning import parse_and_prune, render_fragment
from solverpack.compress.sampling import collapse_spaces, sample_lines
from solverpack.core.models import LogDigest

JSON_SECTION_HEADER = "--- JSON Result ---"


@dataclass(frozen=True, slots=True)
class SplitLog:
    body: str
    fragment: str | None


def split_log(raw_text: str, *, begin_marker: str, end_marker: str) -> SplitLog:
    """Separate the log body from the delimited JSON fragment.

    Text after the end marker is discarded. A begin marker without an end
    marker yields a fragment running to the end of the text.
    """
    begin = raw_text.find(begin_marker)
    if begin < 0:
        return SplitLog(body=raw_text, fragment=None)

    body = raw_text[:begin]
    rest = raw_text[begin + len(begin_marker):]
    end = rest.find(end_marker)
    fragment = rest if end < 0 else rest[:end]
    if not fragment.strip():
        return SplitLog(body=body, fragment=None)
    return SplitLog(body=body, fragment=fragment)


def truncate_tail(text: str, *, limit: int, marker: str) -> tuple[str, bool]:
    """Keep the end of ``text`` so that ``marker + tail`` fits in ``limit``."""
    if len(text) <= limit:
        return text, False
    if len(marker) >= limit:
        return text[len(text) - limit:], True
    keep = limit - len(marker)
    return marker + text[len(text) - keep:], True


def compress(raw_text: str, config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG) -> LogDigest:
    """Build the bounded digest of one run's raw output.

    Pure and deterministic: the same text and config always give the same
    digest.
    """
    split = split_log(
        raw_text,
        begin_marker=config.json_begin_marker,
        end_marker=config.json_end_marker,
    )

    fragment = None
    parsed = False
    if split.fragment is not None:
        fragment, parsed = parse_and_prune(split.fragment, max_items=config.max_items_per_array)

    sampled = sample_lines(
        collapse_spaces(split.body),
        window=config.sample_window,
        stride=config.sample_stride,
    )

    assembled = "\n".join(sampled.lines)
    if fragment is not None:
        assembled = f"{assembled}\n\n{JSON_SECTION_HEADER}\n{render_fragment(fragment, parsed=parsed)}"

    text, truncated = truncate_tail(
        assembled,
        limit=config.max_output_chars,
        marker=config.elision_marker,
    )
    return LogDigest(
        text=text,
        body_lines=sampled.lines,
        json_fragment=fragment,
        json_parsed=parsed,
        truncated=truncated,
        numeric_lines_seen=sampled.numeric_seen,
        numeric_lines_kept=sampled.numeric_kept,
    )
