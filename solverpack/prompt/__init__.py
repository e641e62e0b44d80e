"""Prompt assembly for report generation."""

from solverpack.prompt.assembler import (
    DEFAULT_FOCUS,
    DEFAULT_SYSTEM_INSTRUCTION,
    FOCUS_DIRECTIVE_TEMPLATE,
    LOG_SECTION_DELIMITER,
    assemble_prompt,
    build_focus,
)

__all__ = [
    "DEFAULT_FOCUS",
    "DEFAULT_SYSTEM_INSTRUCTION",
    "FOCUS_DIRECTIVE_TEMPLATE",
    "LOG_SECTION_DELIMITER",
    "assemble_prompt",
    "build_focus",
]
