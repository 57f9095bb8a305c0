"""Fetch one streaming completion per sample and turn it into inline items."""

from __future__ import annotations

from contextlib import aclosing, suppress
from typing import TYPE_CHECKING, AsyncIterator, Callable, Optional
import asyncio
import logging

from infill.document import DocumentContext, insert_into_doc_context
from infill.language import get_language_config
from infill.llm.client import CodeCompletionsClient
from infill.llm.errors import CompletionsError
from infill.llm.types import CompletionParameters, CompletionResponse, StopReason
from infill.observability import PostProcessLogger
from infill.pipeline.process import (
    InlineCompletionItem,
    empty_completion,
    extract_partial_completion,
    process_completion,
)

if TYPE_CHECKING:
    from infill.providers.base import ProviderOptions


PostProcess = Callable[[str], str]
OnSampleReady = Callable[[InlineCompletionItem], None]
OnHotStreakCompletionReady = Callable[[DocumentContext, InlineCompletionItem], None]


class _StreamingSample:
    """Per-sample state: accumulated text, delivery status and hot-streak cursor."""

    def __init__(
        self,
        *,
        provider_options: "ProviderOptions",
        post_process: PostProcess,
        abort_event: asyncio.Event,
        dynamic_multiline: bool,
        on_completion_ready: OnSampleReady,
        on_hot_streak_completion_ready: OnHotStreakCompletionReady,
        post_process_logger: PostProcessLogger,
    ) -> None:
        self._request_id = provider_options.request_id
        self._language = get_language_config(provider_options.document.language_id)
        self._multiline = provider_options.multiline
        self._hot_streak = provider_options.hot_streak
        self._dynamic_multiline = dynamic_multiline
        self._doc_context = provider_options.doc_context
        self._post_process = post_process
        self._abort_event = abort_event
        self._on_completion_ready = on_completion_ready
        self._on_hot_streak_completion_ready = on_hot_streak_completion_ready
        self._post_process_logger = post_process_logger
        self._upgrade_checked = False
        self._consumed = 0
        self._last_text = ""
        self.delivered = False

    def feed(self, response: CompletionResponse) -> bool:
        """Handle one stream response; return True once the stream is no longer needed."""

        text = self._post_process(response.completion)
        self._last_text = text
        extracts_early = self._dynamic_multiline or self._hot_streak
        if not response.is_final and not extracts_early:
            return False

        if not self.delivered:
            if self._dynamic_multiline and not self._upgrade_checked:
                self._check_multiline_upgrade(text)

            partial = None
            if not response.is_final or self._hot_streak:
                partial = extract_partial_completion(
                    text,
                    doc_context=self._doc_context,
                    multiline=self._multiline,
                    language=self._language,
                )

            if partial is None:
                if not response.is_final:
                    return False
                self._deliver(self._process(text, response.stop_reason), consumed=text)
                return True

            self._deliver(
                self._process(partial.text, StopReason.STREAMING_CHUNK),
                consumed=text[: partial.consumed],
            )
            if not self._hot_streak:
                return True

        return self._extract_hot_streak(text, response)

    def settle_failure(self, stop_reason: StopReason, *, error_type: Optional[str] = None) -> None:
        if self.delivered:
            return
        self._deliver(empty_completion(stop_reason, error_type=error_type), consumed="")

    def settle_unfinished(self) -> None:
        """The stream closed without a final response; use what arrived."""

        if self.delivered:
            return
        self._deliver(self._process(self._last_text, StopReason.STOP), consumed=self._last_text)

    def _check_multiline_upgrade(self, text: str) -> None:
        first_newline = text.find("\n")
        if first_newline == -1:
            return
        self._upgrade_checked = True
        if self._multiline or self._language is None:
            return

        first_line = self._doc_context.current_line_prefix + text[:first_newline]
        if self._language.opens_block(first_line):
            self._multiline = True
            self._post_process_logger.info(
                request_id=self._request_id,
                stage="dynamic_multiline",
                detail="upgraded=true",
            )

    def _extract_hot_streak(self, text: str, response: CompletionResponse) -> bool:
        while True:
            remaining = text[self._consumed:]
            partial = extract_partial_completion(
                remaining,
                doc_context=self._doc_context,
                multiline=self._multiline,
                language=self._language,
            )
            if partial is None:
                break
            item = self._process(partial.text, StopReason.STREAMING_CHUNK, is_hot_streak=True)
            self._emit_hot_streak(item, consumed=remaining[: partial.consumed])

        if not response.is_final:
            return False

        remaining = text[self._consumed:]
        if remaining.strip():
            item = self._process(remaining, response.stop_reason, is_hot_streak=True)
            self._emit_hot_streak(item, consumed=remaining)
        return True

    def _process(
        self,
        text: str,
        stop_reason: StopReason,
        *,
        is_hot_streak: bool = False,
    ) -> InlineCompletionItem:
        item = process_completion(
            text,
            doc_context=self._doc_context,
            multiline=self._multiline,
            stop_reason=stop_reason,
            language=self._language,
            is_hot_streak=is_hot_streak,
        )
        if item.truncated_with is not None:
            self._post_process_logger.info(
                request_id=self._request_id,
                stage="truncate",
                detail=f"truncated_with={item.truncated_with} chars={item.char_count}",
            )
        return item

    def _deliver(self, item: InlineCompletionItem, *, consumed: str) -> None:
        self.delivered = True
        self._advance(consumed)
        if self._abort_event.is_set():
            return
        self._on_completion_ready(item)

    def _emit_hot_streak(self, item: InlineCompletionItem, *, consumed: str) -> None:
        doc_context = self._doc_context
        self._advance(consumed)
        if item.is_empty or self._abort_event.is_set():
            return
        self._post_process_logger.info(
            request_id=self._request_id,
            stage="hot_streak",
            detail=f"lines={item.line_count}",
        )
        self._on_hot_streak_completion_ready(doc_context, item)

    def _advance(self, consumed: str) -> None:
        if not consumed:
            return
        self._consumed += len(consumed)
        self._doc_context = insert_into_doc_context(self._doc_context, consumed)


async def fetch_and_process_completions(
    *,
    client: CodeCompletionsClient,
    parameters: CompletionParameters,
    abort_event: asyncio.Event,
    post_process: PostProcess,
    provider_options: "ProviderOptions",
    on_completion_ready: OnSampleReady,
    on_hot_streak_completion_ready: OnHotStreakCompletionReady,
    post_process_logger: Optional[PostProcessLogger] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Run one sample and report exactly one item unless aborted.

    Hot-streak requests additionally report every further completion found in
    the stream through ``on_hot_streak_completion_ready`` before returning.
    """

    await _fetch_and_process(
        client=client,
        parameters=parameters,
        abort_event=abort_event,
        post_process=post_process,
        provider_options=provider_options,
        on_completion_ready=on_completion_ready,
        on_hot_streak_completion_ready=on_hot_streak_completion_ready,
        dynamic_multiline=False,
        post_process_logger=post_process_logger,
        logger=logger,
    )


async def fetch_and_process_dynamic_multiline_completions(
    *,
    client: CodeCompletionsClient,
    parameters: CompletionParameters,
    abort_event: asyncio.Event,
    post_process: PostProcess,
    provider_options: "ProviderOptions",
    on_completion_ready: OnSampleReady,
    on_hot_streak_completion_ready: OnHotStreakCompletionReady,
    post_process_logger: Optional[PostProcessLogger] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Like :func:`fetch_and_process_completions`, re-evaluating mid-stream.

    A single-line request whose first generated line opens a block is treated
    as multiline from then on, and the stream is closed as soon as the block
    is complete.
    """

    await _fetch_and_process(
        client=client,
        parameters=parameters,
        abort_event=abort_event,
        post_process=post_process,
        provider_options=provider_options,
        on_completion_ready=on_completion_ready,
        on_hot_streak_completion_ready=on_hot_streak_completion_ready,
        dynamic_multiline=True,
        post_process_logger=post_process_logger,
        logger=logger,
    )


async def _fetch_and_process(
    *,
    client: CodeCompletionsClient,
    parameters: CompletionParameters,
    abort_event: asyncio.Event,
    post_process: PostProcess,
    provider_options: "ProviderOptions",
    on_completion_ready: OnSampleReady,
    on_hot_streak_completion_ready: OnHotStreakCompletionReady,
    dynamic_multiline: bool,
    post_process_logger: Optional[PostProcessLogger],
    logger: Optional[logging.Logger],
) -> None:
    _logger = logger or logging.getLogger("infill.pipeline.fetch")
    # Without a caller-owned logger the sample's diagnostics are flushed here.
    own_logger = None
    if post_process_logger is None:
        post_process_logger = own_logger = PostProcessLogger()
    try:
        await _fetch_sample(
            client=client,
            parameters=parameters,
            abort_event=abort_event,
            post_process=post_process,
            provider_options=provider_options,
            on_completion_ready=on_completion_ready,
            on_hot_streak_completion_ready=on_hot_streak_completion_ready,
            dynamic_multiline=dynamic_multiline,
            post_process_logger=post_process_logger,
            logger=_logger,
        )
    finally:
        if own_logger is not None:
            own_logger.flush()


async def _fetch_sample(
    *,
    client: CodeCompletionsClient,
    parameters: CompletionParameters,
    abort_event: asyncio.Event,
    post_process: PostProcess,
    provider_options: "ProviderOptions",
    on_completion_ready: OnSampleReady,
    on_hot_streak_completion_ready: OnHotStreakCompletionReady,
    dynamic_multiline: bool,
    post_process_logger: PostProcessLogger,
    logger: logging.Logger,
) -> None:
    sample = _StreamingSample(
        provider_options=provider_options,
        post_process=post_process,
        abort_event=abort_event,
        dynamic_multiline=dynamic_multiline,
        on_completion_ready=on_completion_ready,
        on_hot_streak_completion_ready=on_hot_streak_completion_ready,
        post_process_logger=post_process_logger,
    )

    if abort_event.is_set():
        return

    try:
        finished = await _consume(
            client.complete(parameters, abort_event),
            sample,
            abort_event,
            timeout_seconds=parameters.timeout_ms / 1000.0,
        )
    except CompletionsError as exc:
        logger.warning(
            "completion_sample_failed model=%s error_type=%s",
            parameters.model,
            exc.__class__.__name__,
        )
        sample.settle_failure(StopReason.ERROR, error_type=exc.__class__.__name__)
        return

    if abort_event.is_set():
        logger.debug("completion_sample_aborted model=%s", parameters.model)
        return

    if not finished:
        logger.warning(
            "completion_sample_timed_out model=%s timeout_ms=%s",
            parameters.model,
            parameters.timeout_ms,
        )
        sample.settle_failure(StopReason.TIMEOUT, error_type="TimeoutError")
        return

    sample.settle_unfinished()


async def _consume(
    responses: AsyncIterator[CompletionResponse],
    sample: _StreamingSample,
    abort_event: asyncio.Event,
    *,
    timeout_seconds: float,
) -> bool:
    """Drain ``responses`` into ``sample``; False when aborted or timed out."""

    drain = asyncio.ensure_future(_drain(responses, sample))
    abort_wait = asyncio.ensure_future(abort_event.wait())
    try:
        done, _pending = await asyncio.wait(
            {drain, abort_wait},
            timeout=timeout_seconds,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        abort_wait.cancel()
        if not drain.done():
            drain.cancel()
            with suppress(asyncio.CancelledError, CompletionsError):
                await drain

    if drain in done:
        drain.result()
        return True
    return False


async def _drain(responses: AsyncIterator[CompletionResponse], sample: _StreamingSample) -> None:
    async with aclosing(responses) as stream:
        async for response in stream:
            if sample.feed(response):
                break
