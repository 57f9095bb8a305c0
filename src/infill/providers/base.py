"""Provider interface shared by completion backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence
import asyncio
import math

from infill.context import ContextSnippet
from infill.document import DocumentContext, TextDocument
from infill.llm.types import CompletionParameters
from infill.pipeline.fetch import OnHotStreakCompletionReady
from infill.pipeline.process import InlineCompletionItem
from infill.prompt.text import tokens_to_chars


OnCompletionsReady = Callable[[list[InlineCompletionItem]], None]


@dataclass(frozen=True)
class ProviderOptions:
    document: TextDocument
    doc_context: DocumentContext
    n: int = 1
    multiline: bool = False
    dynamic_multiline_completions: bool = False
    hot_streak: bool = False
    request_id: str = ""

    def __post_init__(self) -> None:
        if self.n <= 0:
            raise ValueError("n must be a positive integer.")

    @property
    def uses_extended_generation(self) -> bool:
        return self.multiline or self.dynamic_multiline_completions or self.hot_streak


@dataclass(frozen=True)
class ContextSizeHints:
    total_chars: int
    prefix_chars: int
    suffix_chars: int


def standard_context_size_hints(max_context_tokens: int) -> ContextSizeHints:
    # 10% of the window is left for the prompt preamble.
    return ContextSizeHints(
        total_chars=math.floor(tokens_to_chars(0.9 * max_context_tokens)),
        prefix_chars=round(tokens_to_chars(0.6 * max_context_tokens)),
        suffix_chars=round(tokens_to_chars(0.1 * max_context_tokens)),
    )


class CompletionProviderTracer(Protocol):
    def params(self, parameters: CompletionParameters) -> None:
        ...

    def result(self, completions: Sequence[InlineCompletionItem]) -> None:
        ...


class Provider(ABC):
    def __init__(self, options: ProviderOptions) -> None:
        self.options = options

    @abstractmethod
    async def generate_completions(
        self,
        abort_event: asyncio.Event,
        snippets: Sequence[ContextSnippet],
        on_completion_ready: OnCompletionsReady,
        on_hot_streak_completion_ready: OnHotStreakCompletionReady,
        tracer: Optional[CompletionProviderTracer] = None,
    ) -> None:
        """Generate ``options.n`` samples and report them once all have settled."""


@dataclass(frozen=True)
class ProviderConfig:
    create: Callable[[ProviderOptions], Provider]
    context_size_hints: ContextSizeHints
    identifier: str
    model: str
