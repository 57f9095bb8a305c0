"""Document identity and the prefix/suffix window around the cursor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TextDocument:
    file_name: str
    language_id: str
    relative_path: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.file_name.strip():
            raise ValueError("file_name cannot be empty.")

    @property
    def display_path(self) -> str:
        """Workspace-relative path when known, otherwise the file name."""

        return self.relative_path or self.file_name


@dataclass(frozen=True)
class DocumentContext:
    prefix: str
    suffix: str
    current_line_prefix: str
    current_line_suffix: str
    prev_non_empty_line: str
    next_non_empty_line: str


def build_doc_context(prefix: str, suffix: str) -> DocumentContext:
    prefix_lines = prefix.split("\n")
    suffix_lines = suffix.split("\n")

    prev_non_empty_line = next(
        (line for line in reversed(prefix_lines[:-1]) if line.strip()),
        "",
    )
    next_non_empty_line = next(
        (line for line in suffix_lines[1:] if line.strip()),
        "",
    )

    return DocumentContext(
        prefix=prefix,
        suffix=suffix,
        current_line_prefix=prefix_lines[-1],
        current_line_suffix=suffix_lines[0],
        prev_non_empty_line=prev_non_empty_line,
        next_non_empty_line=next_non_empty_line,
    )


def insert_into_doc_context(doc_context: DocumentContext, insertion: str) -> DocumentContext:
    """Return a context as if ``insertion`` had been typed at the cursor."""

    return build_doc_context(doc_context.prefix + insertion, doc_context.suffix)
