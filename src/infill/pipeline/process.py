"""Turn raw model text into structured inline completion items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from infill.document import DocumentContext
from infill.language import DEFAULT_COMMENT_START, LanguageConfig
from infill.llm.types import StopReason


_FALLBACK_LANGUAGE = LanguageConfig(language_id="", comment_start=DEFAULT_COMMENT_START)
_CLOSERS = (")", "]", "}")
_TAB_WIDTH = 4


@dataclass(frozen=True)
class InlineCompletionItem:
    insert_text: str
    stop_reason: str
    line_count: int
    char_count: int
    truncated_with: Optional[str] = None
    is_hot_streak: bool = False
    error_type: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.insert_text


@dataclass(frozen=True)
class PartialCompletion:
    """Leading part of a stream that can already be shown.

    ``consumed`` counts the source characters it covers, including the line
    break that ends it.
    """

    text: str
    consumed: int


def empty_completion(
    stop_reason: StopReason,
    *,
    error_type: Optional[str] = None,
) -> InlineCompletionItem:
    return InlineCompletionItem(
        insert_text="",
        stop_reason=stop_reason.value,
        line_count=0,
        char_count=0,
        error_type=error_type,
    )


def get_indentation(line: str) -> int:
    expanded = line.expandtabs(_TAB_WIDTH)
    return len(expanded) - len(expanded.lstrip(" "))


def find_block_end(
    lines: Sequence[str],
    doc_context: DocumentContext,
    language: Optional[LanguageConfig] = None,
) -> Optional[int]:
    """Index of the first line that no longer belongs to the cursor's block.

    The anchor is the cursor line with the first generated line appended. If the
    anchor opens a block, the block ends at the first non-blank line indented no
    deeper than the anchor; a closing bracket at that depth is kept. Otherwise
    the block ends at the first line indented less than the anchor.
    """

    if len(lines) <= 1:
        return None

    profile = language or _FALLBACK_LANGUAGE
    anchor = doc_context.current_line_prefix + lines[0]
    if not anchor.strip():
        anchor = doc_context.prev_non_empty_line

    start_indent = get_indentation(anchor)
    opens_block = profile.opens_block(anchor)

    for index in range(1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        indent = get_indentation(line)
        if opens_block and indent <= start_indent:
            if line.strip().startswith(_CLOSERS):
                return index + 1
            return index
        if not opens_block and indent < start_indent:
            return index
    return None


def truncate_multiline_completion(
    text: str,
    doc_context: DocumentContext,
    language: Optional[LanguageConfig] = None,
) -> Tuple[str, bool]:
    lines = text.split("\n")
    block_end = find_block_end(lines, doc_context, language)
    if block_end is None or block_end >= len(lines):
        return text, False
    return "\n".join(lines[:block_end]), True


def extract_partial_completion(
    text: str,
    *,
    doc_context: DocumentContext,
    multiline: bool,
    language: Optional[LanguageConfig] = None,
) -> Optional[PartialCompletion]:
    """Return the leading completion once it is known to be complete.

    Single-line completions are complete at the first line break. Multiline
    completions are complete once a finished line leaves the cursor's block.
    The trailing, still-growing line is never inspected.
    """

    last_newline = text.rfind("\n")
    if last_newline == -1:
        return None

    if not multiline:
        first_newline = text.find("\n")
        return PartialCompletion(text=text[:first_newline], consumed=first_newline + 1)

    lines = text[:last_newline].split("\n")
    block_end = find_block_end(lines, doc_context, language)
    if block_end is None:
        return None
    segment = "\n".join(lines[:block_end])
    return PartialCompletion(text=segment, consumed=len(segment) + 1)


def process_completion(
    text: str,
    *,
    doc_context: DocumentContext,
    multiline: bool,
    stop_reason: StopReason,
    language: Optional[LanguageConfig] = None,
    is_hot_streak: bool = False,
) -> InlineCompletionItem:
    insert_text = text
    truncated_with: Optional[str] = None

    # The cursor already sits after whitespace; do not insert more of it.
    if doc_context.current_line_prefix.endswith((" ", "\t")):
        insert_text = insert_text.lstrip(" \t")

    if multiline:
        insert_text, truncated = truncate_multiline_completion(insert_text, doc_context, language)
        if truncated:
            truncated_with = "indentation"
    else:
        first_newline = insert_text.find("\n")
        if first_newline != -1:
            insert_text = insert_text[:first_newline]
            truncated_with = "newline"

    insert_text = insert_text.rstrip()
    return InlineCompletionItem(
        insert_text=insert_text,
        stop_reason=stop_reason.value,
        line_count=insert_text.count("\n") + 1 if insert_text else 0,
        char_count=len(insert_text),
        truncated_with=truncated_with,
        is_hot_streak=is_hot_streak,
    )
