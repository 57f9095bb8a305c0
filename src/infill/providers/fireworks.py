"""Fireworks-hosted StarCoder / Llama Code / Mistral completion provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence
import asyncio
import logging

from infill.config.settings import TimeoutSettings
from infill.context import ContextSnippet
from infill.language import comment_start_for
from infill.llm.client import CodeCompletionsClient
from infill.llm.errors import UnknownModelError
from infill.llm.types import CompletionParameters, Message
from infill.observability import PostProcessLogger
from infill.pipeline.fetch import (
    OnHotStreakCompletionReady,
    fetch_and_process_completions,
    fetch_and_process_dynamic_multiline_completions,
)
from infill.pipeline.process import InlineCompletionItem
from infill.prompt.builder import build_prompt, get_suffix_after_first_newline
from infill.prompt.text import tokens_to_chars

from .base import (
    CompletionProviderTracer,
    OnCompletionsReady,
    Provider,
    ProviderConfig,
    ProviderOptions,
    standard_context_size_hints,
)
from .families import InfillingInput, ModelFamily


PROVIDER_IDENTIFIER = "fireworks"

HYBRID_MODEL = "starcoder-hybrid"

MAX_RESPONSE_TOKENS = 256
DEFAULT_MAX_CONTEXT_TOKENS = 1200

MODEL_MAP: Mapping[str, str] = {
    "starcoder-16b": "fireworks/starcoder-16b",
    "starcoder-7b": "fireworks/starcoder-7b",
    "starcoder-3b": "fireworks/accounts/fireworks/models/starcoder-3b-w8a16",
    "starcoder-1b": "fireworks/accounts/fireworks/models/starcoder-1b-w8a16",
    "llama-code-7b": "fireworks/accounts/fireworks/models/llama-v2-7b-code",
    "llama-code-13b": "fireworks/accounts/fireworks/models/llama-v2-13b-code",
    "llama-code-13b-instruct": "fireworks/accounts/fireworks/models/llama-v2-13b-code-instruct",
    "mistral-7b-instruct-4k": "fireworks/accounts/fireworks/models/mistral-7b-instruct-4k",
}

# Every family is capped well below its native window so providers compare evenly.
MAX_CONTEXT_TOKENS: Mapping[str, int] = {
    HYBRID_MODEL: 2048,
    **{model: 2048 for model in MODEL_MAP},
}


@dataclass(frozen=True)
class RequestPreset:
    timeout_ms: int
    max_tokens_to_sample: int
    stop_sequences: Optional[tuple[str, ...]]


SINGLE_LINE_PRESET = RequestPreset(
    timeout_ms=5_000,
    # A low token limit keeps single-line sampling fast; the stream cannot end on "\n" by itself.
    max_tokens_to_sample=30,
    stop_sequences=("\n",),
)
MULTI_LINE_PRESET = RequestPreset(
    timeout_ms=15_000,
    max_tokens_to_sample=MAX_RESPONSE_TOKENS,
    stop_sequences=("\n\n", "\n\r\n"),
)
# No stop sequences: a block may contain blank lines before it closes.
DYNAMIC_MULTILINE_PRESET = RequestPreset(
    timeout_ms=15_000,
    max_tokens_to_sample=MAX_RESPONSE_TOKENS,
    stop_sequences=None,
)


def get_max_context_tokens(model: str) -> int:
    return MAX_CONTEXT_TOKENS.get(model, DEFAULT_MAX_CONTEXT_TOKENS)


def resolve_model(model: Optional[str]) -> str:
    """Validate a configured model id; empty input selects the hybrid model."""

    if model is None or model == "":
        return HYBRID_MODEL
    if model == HYBRID_MODEL or model in MODEL_MAP:
        return model
    raise UnknownModelError(f"Unknown model: `{model}`")


class FireworksProvider(Provider):
    def __init__(
        self,
        options: ProviderOptions,
        *,
        model: str,
        client: CodeCompletionsClient,
        max_context_tokens: int,
        timeouts: Optional[TimeoutSettings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(options)
        self.model = model
        self.family = ModelFamily.for_model(model)
        self.prompt_chars = int(tokens_to_chars(max_context_tokens - MAX_RESPONSE_TOKENS))
        self._client = client
        self._timeouts = timeouts
        self._logger = logger or logging.getLogger("infill.providers.fireworks")

    @property
    def backend_model(self) -> str:
        if self.model == HYBRID_MODEL:
            return MODEL_MAP["starcoder-16b" if self.options.multiline else "starcoder-7b"]
        return MODEL_MAP[self.model]

    def create_prompt(self, snippets: Sequence[ContextSnippet]) -> str:
        doc_context = self.options.doc_context
        document = self.options.document

        header_lines: list[str] = []
        if self.family.announces_path:
            header_lines.append(f"Path: {document.display_path}")

        suffix = get_suffix_after_first_newline(doc_context.suffix)

        def render(intro: str) -> str:
            return self.family.render_infilling_prompt(
                self.model,
                InfillingInput(
                    file_path=document.display_path,
                    intro=intro,
                    prefix=doc_context.prefix,
                    suffix=suffix,
                    raw_prefix=doc_context.prefix,
                    raw_suffix=doc_context.suffix,
                ),
            )

        result = build_prompt(
            snippets,
            prompt_chars=self.prompt_chars,
            render=render,
            header_lines=header_lines,
            comment_start=comment_start_for(document.language_id),
        )
        if result.exceeds_budget:
            self._logger.warning(
                "prompt_exceeds_budget model=%s chars=%s budget=%s",
                self.model,
                len(result.prompt),
                self.prompt_chars,
            )
        return result.prompt

    def build_request_parameters(self, prompt: str) -> CompletionParameters:
        options = self.options
        extended = options.uses_extended_generation

        preset = MULTI_LINE_PRESET if extended else SINGLE_LINE_PRESET
        if options.dynamic_multiline_completions:
            preset = DYNAMIC_MULTILINE_PRESET

        timeout_ms = preset.timeout_ms
        if self._timeouts is not None:
            if extended and self._timeouts.multiline is not None:
                timeout_ms = self._timeouts.multiline
            if not extended and self._timeouts.singleline is not None:
                timeout_ms = self._timeouts.singleline

        return CompletionParameters(
            messages=(Message(speaker="human", text=prompt),),
            model=self.backend_model,
            max_tokens_to_sample=preset.max_tokens_to_sample,
            timeout_ms=timeout_ms,
            stop_sequences=preset.stop_sequences,
        )

    def post_process(self, content: str) -> str:
        return self.family.post_process(content)

    async def generate_completions(
        self,
        abort_event: asyncio.Event,
        snippets: Sequence[ContextSnippet],
        on_completion_ready: OnCompletionsReady,
        on_hot_streak_completion_ready: OnHotStreakCompletionReady,
        tracer: Optional[CompletionProviderTracer] = None,
    ) -> None:
        options = self.options
        parameters = self.build_request_parameters(self.create_prompt(snippets))

        if parameters.timeout_ms == 0:
            self._logger.info(
                "completion_request_skipped model=%s reason=zero_timeout request_id=%s",
                parameters.model,
                options.request_id or "-",
            )
            on_completion_ready([])
            return

        fetch = fetch_and_process_completions
        if options.dynamic_multiline_completions:
            fetch = fetch_and_process_dynamic_multiline_completions

        if tracer is not None:
            tracer.params(parameters)

        completions: list[InlineCompletionItem] = []
        post_process_logger = PostProcessLogger()

        def on_sample_ready(item: InlineCompletionItem) -> None:
            completions.append(item)
            if len(completions) == options.n:
                post_process_logger.flush()
                if tracer is not None:
                    tracer.result(completions)
                on_completion_ready(completions)

        self._logger.info(
            "completion_request_dispatched model=%s n=%s multiline=%s timeout_ms=%s request_id=%s",
            parameters.model,
            options.n,
            options.multiline,
            parameters.timeout_ms,
            options.request_id or "-",
        )

        await asyncio.gather(
            *(
                fetch(
                    client=self._client,
                    parameters=parameters,
                    abort_event=abort_event,
                    post_process=self.post_process,
                    provider_options=options,
                    on_completion_ready=on_sample_ready,
                    on_hot_streak_completion_ready=on_hot_streak_completion_ready,
                    post_process_logger=post_process_logger,
                    logger=self._logger,
                )
                for _ in range(options.n)
            )
        )
        # Hot-streak entries can arrive after the aggregated flush.
        if not abort_event.is_set():
            post_process_logger.flush()


def create_provider_config(
    *,
    model: Optional[str],
    client: CodeCompletionsClient,
    timeouts: Optional[TimeoutSettings] = None,
    max_context_tokens: Optional[int] = None,
) -> ProviderConfig:
    """Resolve ``model`` and return a factory for Fireworks providers.

    Raises ``UnknownModelError`` for ids outside ``MODEL_MAP``.
    ``max_context_tokens`` replaces the fixed per-model window when given.
    """

    resolved_model = resolve_model(model)
    if max_context_tokens is not None and max_context_tokens <= MAX_RESPONSE_TOKENS:
        raise ValueError(f"max_context_tokens must exceed {MAX_RESPONSE_TOKENS}.")
    context_tokens = (
        max_context_tokens if max_context_tokens is not None else get_max_context_tokens(resolved_model)
    )

    def create(options: ProviderOptions) -> Provider:
        return FireworksProvider(
            options,
            model=resolved_model,
            client=client,
            max_context_tokens=context_tokens,
            timeouts=timeouts,
        )

    return ProviderConfig(
        create=create,
        context_size_hints=standard_context_size_hints(context_tokens),
        identifier=PROVIDER_IDENTIFIER,
        model=resolved_model,
    )
