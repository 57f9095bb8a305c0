"""Text helpers shared by prompt templates."""

from __future__ import annotations

from dataclasses import dataclass


CHARS_PER_TOKEN = 4

OPENING_CODE_TAG = "<CODE5711>"
CLOSING_CODE_TAG = "</CODE5711>"

_TAIL_THRESHOLD = 2


def tokens_to_chars(tokens: float) -> float:
    return tokens * CHARS_PER_TOKEN


@dataclass(frozen=True)
class TrimmedString:
    raw: str
    trimmed: str
    lead_space: str
    rear_space: str


@dataclass(frozen=True)
class PrefixComponents:
    head: TrimmedString
    tail: TrimmedString


def trim_space(text: str) -> TrimmedString:
    trimmed = text.strip()
    head_end = text.find(trimmed) if trimmed else len(text)
    return TrimmedString(
        raw=text,
        trimmed=trimmed,
        lead_space=text[:head_end],
        rear_space=text[head_end + len(trimmed):],
    )


def get_head_and_tail(prefix: str) -> PrefixComponents:
    """Split ``prefix`` so the tail starts at the second-to-last non-empty line.

    When the prefix has fewer than two non-empty lines, head and tail are both
    the whole prefix.
    """

    lines = prefix.split("\n")
    non_empty_count = 0
    tail_start = -1
    for index in range(len(lines) - 1, -1, -1):
        if lines[index].strip():
            non_empty_count += 1
        if non_empty_count >= _TAIL_THRESHOLD:
            tail_start = index
            break

    if tail_start == -1:
        whole = trim_space(prefix)
        return PrefixComponents(head=whole, tail=whole)

    return PrefixComponents(
        head=trim_space("\n".join(lines[:tail_start]) + "\n"),
        tail=trim_space("\n".join(lines[tail_start:])),
    )
