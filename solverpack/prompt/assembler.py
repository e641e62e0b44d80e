"""Report prompt assembly."""

from __future__ import annotations

from solverpack.compress.config import DEFAULT_ELISION_MARKER
from solverpack.compress.pipeline import truncate_tail
from solverpack.core.models import LogDigest

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a data scientist. Analyze the following optimization run log "
    "(it often ends with a JSON result block) and output only a readable "
    "report in Markdown. Constraints: do not add greetings or preambles such "
    "as 'Here is the analysis'; start directly with a Markdown heading (#); "
    "do not quote the log contents verbatim."
)
DEFAULT_FOCUS = (
    "In particular, summarize the results and comment on the health of the "
    "solve process."
)
FOCUS_DIRECTIVE_TEMPLATE = '**Also analyze the following point in depth**: "{focus}"'
LOG_SECTION_DELIMITER = "--- Log ---"


def _digest_text(digest: LogDigest | str) -> str:
    return digest.text if isinstance(digest, LogDigest) else str(digest)


def build_focus(focus_text: str) -> str:
    if not focus_text or not focus_text.strip():
        return DEFAULT_FOCUS
    return DEFAULT_FOCUS + FOCUS_DIRECTIVE_TEMPLATE.format(focus=focus_text)


def assemble_prompt(
    system_instruction: str,
    focus_text: str,
    digest: LogDigest | str,
    *,
    max_prompt_chars: int | None = None,
) -> str:
    """Join instruction, focus and digest under the log delimiter.

    Without ``max_prompt_chars`` the digest is used as-is; its own budget is
    expected to leave room for the fixed text. With a limit, only the digest
    tail is cut, never the instruction or focus.
    """
    instruction = system_instruction
    if not instruction or not instruction.strip():
        instruction = DEFAULT_SYSTEM_INSTRUCTION
    header = f"{instruction}\n{build_focus(focus_text)}\n\n{LOG_SECTION_DELIMITER}\n"
    body = _digest_text(digest)

    if max_prompt_chars is not None:
        room = max(0, max_prompt_chars - len(header))
        if room == 0:
            body = ""
        else:
            body, _ = truncate_tail(body, limit=room, marker=DEFAULT_ELISION_MARKER)
    return header + body
