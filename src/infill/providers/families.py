"""Prompt templates and output cleanup per model family."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from infill.prompt.text import CLOSING_CODE_TAG, OPENING_CODE_TAG, get_head_and_tail


EOT_STARCODER = "<|endoftext|>"
EOT_LLAMA_CODE = " <EOT>"

INSTRUCT_MODEL = "mistral-7b-instruct-4k"

_INSTRUCT_PREAMBLE = (
    "Below is the code from file path {path}. Review the code outside the XML tags "
    "to detect the functionality, formats, style, patterns, and logics in use. "
    "Then, use what you detect and reuse methods/libraries to complete and enclose "
    "completed code only inside XML tags precisely without duplicating existing "
    "implementations. Here is the code:"
)

logger = logging.getLogger("infill.providers.families")


@dataclass(frozen=True)
class InfillingInput:
    """Pieces of one infilling prompt.

    ``suffix`` is already cut to start at the first line break; ``raw_prefix``
    and ``raw_suffix`` are the untouched document window used by the instruct
    template.
    """

    file_path: str
    intro: str
    prefix: str
    suffix: str
    raw_prefix: str
    raw_suffix: str


class ModelFamily(Enum):
    STARCODER = "starcoder"
    LLAMA_CODE = "llama-code"
    INSTRUCT = "instruct"
    UNKNOWN = "unknown"

    @classmethod
    def for_model(cls, model: str) -> "ModelFamily":
        if model.startswith("starcoder"):
            return cls.STARCODER
        if model.startswith("llama-code"):
            return cls.LLAMA_CODE
        if model == INSTRUCT_MODEL:
            return cls.INSTRUCT
        return cls.UNKNOWN

    @property
    def announces_path(self) -> bool:
        # StarCoder carries the path in its own <filename> token.
        return self is not ModelFamily.STARCODER

    def render_infilling_prompt(self, model: str, parts: InfillingInput) -> str:
        if self is ModelFamily.STARCODER:
            return (
                f"<filename>{parts.file_path}<fim_prefix>{parts.intro}{parts.prefix}"
                f"<fim_suffix>{parts.suffix}<fim_middle>"
            )
        if self is ModelFamily.LLAMA_CODE:
            return f"<PRE> {parts.intro}{parts.prefix} <SUF>{parts.suffix} <MID>"
        if self is ModelFamily.INSTRUCT:
            return _render_instruct(parts)

        logger.error("infilling_prompt_unresolved model=%s", model)
        return f"{parts.intro}{parts.prefix}"

    def post_process(self, content: str) -> str:
        """Drop the first end-of-text marker the family emits."""

        if self is ModelFamily.STARCODER:
            return content.replace(EOT_STARCODER, "", 1)
        if self is ModelFamily.LLAMA_CODE:
            return content.replace(EOT_LLAMA_CODE, "", 1)
        return content


def _render_instruct(parts: InfillingInput) -> str:
    head_and_tail = get_head_and_tail(parts.raw_prefix)
    infill_prefix = head_and_tail.head.raw
    infill_block = head_and_tail.tail.trimmed
    preamble = _INSTRUCT_PREAMBLE.format(path=parts.file_path)
    return (
        f"<s>[INST] {preamble}\n"
        "```\n"
        f"{parts.intro}{infill_prefix}{OPENING_CODE_TAG}{CLOSING_CODE_TAG}{parts.raw_suffix}\n"
        "```[/INST]\n"
        f" {OPENING_CODE_TAG}{infill_block}"
    )
