"""Array pruning for the embedded solver result JSON."""

from __future__ import annotations

import json
from typing import Any

TRUNCATION_MARKER_TEMPLATE = "... (truncated {count} items) ..."

# Fragments nested deeper than this are kept as unparsed text.
MAX_FRAGMENT_DEPTH = 256


def truncation_marker(count: int) -> str:
    return TRUNCATION_MARKER_TEMPLATE.format(count=count)


def prune_json(value: Any, *, max_items: int) -> Any:
    """Cut every array longer than ``max_items`` to its head plus a marker.

    Object keys are never dropped; scalars pass through unchanged.
    """
    if isinstance(value, dict):
        return {key: prune_json(item, max_items=max_items) for key, item in value.items()}
    if isinstance(value, list):
        kept = [prune_json(item, max_items=max_items) for item in value[:max_items]]
        removed = len(value) - len(kept)
        if removed > 0:
            kept.append(truncation_marker(removed))
        return kept
    return value


def nesting_depth(value: Any) -> int:
    depth = 0
    pending = [(value, 1)]
    while pending:
        current, level = pending.pop()
        if isinstance(current, dict):
            children = current.values()
        elif isinstance(current, list):
            children = current
        else:
            continue
        depth = max(depth, level)
        pending.extend((child, level + 1) for child in children)
    return depth


def parse_and_prune(fragment: str, *, max_items: int) -> tuple[Any, bool]:
    """Parse ``fragment`` and prune it.

    Returns ``(pruned, True)`` on success. A fragment that is not valid JSON,
    or is nested deeper than ``MAX_FRAGMENT_DEPTH``, comes back stripped and
    untouched as ``(text, False)``.
    """
    try:
        parsed = json.loads(fragment)
    except (json.JSONDecodeError, RecursionError):
        return fragment.strip(), False
    if nesting_depth(parsed) > MAX_FRAGMENT_DEPTH:
        return fragment.strip(), False
    return prune_json(parsed, max_items=max_items), True


def render_fragment(fragment: Any, *, parsed: bool) -> str:
    if not parsed:
        return str(fragment)
    return json.dumps(fragment, indent=2, ensure_ascii=False)
