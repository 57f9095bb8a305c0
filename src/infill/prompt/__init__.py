"""Prompt construction APIs."""

from infill.prompt.builder import (
    PromptBuildResult,
    build_prompt,
    describe_snippet,
    get_suffix_after_first_newline,
    render_intro,
)
from infill.prompt.text import (
    CHARS_PER_TOKEN,
    CLOSING_CODE_TAG,
    OPENING_CODE_TAG,
    get_head_and_tail,
    tokens_to_chars,
)

__all__ = [
    "CHARS_PER_TOKEN",
    "CLOSING_CODE_TAG",
    "OPENING_CODE_TAG",
    "PromptBuildResult",
    "build_prompt",
    "describe_snippet",
    "get_head_and_tail",
    "get_suffix_after_first_newline",
    "render_intro",
    "tokens_to_chars",
]
