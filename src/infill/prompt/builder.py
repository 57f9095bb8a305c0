"""Greedy infilling-prompt packer with a strict character budget."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from infill.context import ContextSnippet
from infill.language import DEFAULT_COMMENT_START


# Receives the rendered intro block and returns the full candidate prompt.
PromptRenderer = Callable[[str], str]


@dataclass(frozen=True)
class PromptBuildResult:
    prompt: str
    included_snippet_count: int
    exceeds_budget: bool


def get_suffix_after_first_newline(suffix: str) -> str:
    """Drop the remainder of the cursor line from ``suffix``.

    Infilling models tend to repeat same-line suffix content, so only text
    starting at the first line break is kept. No line break means no suffix.
    """

    first_newline = suffix.find("\n")
    if first_newline == -1:
        return ""
    return suffix[first_newline:]


def describe_snippet(snippet: ContextSnippet) -> str:
    if snippet.is_symbol_documentation:
        return f"Additional documentation for `{snippet.symbol}`:\n\n{snippet.content}"
    return f"Here is a reference snippet of code from {snippet.file_name}:\n\n{snippet.content}"


def render_intro(intro: Sequence[str], comment_start: Optional[str] = None) -> str:
    if not intro:
        return ""
    marker = comment_start if comment_start is not None else DEFAULT_COMMENT_START
    lines = "\n\n".join(intro).split("\n")
    return "\n".join(marker + line for line in lines) + "\n"


def build_prompt(
    snippets: Sequence[ContextSnippet],
    *,
    prompt_chars: int,
    render: PromptRenderer,
    header_lines: Sequence[str] = (),
    comment_start: Optional[str] = None,
) -> PromptBuildResult:
    """Include as many leading snippets as fit strictly under ``prompt_chars``.

    Snippets are added one at a time in the given order. The first candidate
    that reaches the budget is discarded and the previous one is returned. The
    zero-snippet candidate is returned even when it does not fit.
    """

    intro = list(header_lines)
    prompt = ""

    for count in range(len(snippets) + 1):
        if count > 0:
            intro.append(describe_snippet(snippets[count - 1]))

        candidate = render(render_intro(intro, comment_start))
        if len(candidate) >= prompt_chars:
            if count == 0:
                return PromptBuildResult(
                    prompt=candidate,
                    included_snippet_count=0,
                    exceeds_budget=True,
                )
            return PromptBuildResult(
                prompt=prompt,
                included_snippet_count=count - 1,
                exceeds_budget=False,
            )

        prompt = candidate

    return PromptBuildResult(
        prompt=prompt,
        included_snippet_count=len(snippets),
        exceeds_budget=False,
    )
