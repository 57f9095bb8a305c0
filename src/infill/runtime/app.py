"""Runtime helpers for running one completion request end to end."""

from __future__ import annotations

from typing import Optional, Sequence
import asyncio
import logging

from infill.context import ContextSnippet
from infill.document import DocumentContext, TextDocument, build_doc_context
from infill.pipeline.process import InlineCompletionItem
from infill.providers.base import ProviderConfig, ProviderOptions


def configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


async def run_completion(
    config: ProviderConfig,
    *,
    document: TextDocument,
    prefix: str,
    suffix: str,
    n: int = 1,
    multiline: bool = False,
    dynamic_multiline: bool = False,
    hot_streak: bool = False,
    snippets: Sequence[ContextSnippet] = (),
    request_id: str = "",
    abort_event: Optional[asyncio.Event] = None,
    logger: Optional[logging.Logger] = None,
) -> list[InlineCompletionItem]:
    """Run one request and return its items followed by any hot-streak items.

    Returns ``[]`` when the request is aborted or its mode is disabled.
    """

    _logger = logger or logging.getLogger("infill.runtime")
    # The window sent to the model is bounded by the provider's context hints.
    hints = config.context_size_hints
    prefix = prefix[-hints.prefix_chars:] if hints.prefix_chars else ""
    suffix = suffix[: hints.suffix_chars]

    options = ProviderOptions(
        document=document,
        doc_context=build_doc_context(prefix, suffix),
        n=n,
        multiline=multiline,
        dynamic_multiline_completions=dynamic_multiline,
        hot_streak=hot_streak,
        request_id=request_id,
    )
    provider = config.create(options)

    results: list[InlineCompletionItem] = []
    hot_streak_items: list[InlineCompletionItem] = []

    def on_completion_ready(items: list[InlineCompletionItem]) -> None:
        results.extend(items)

    def on_hot_streak_completion_ready(
        _doc_context: DocumentContext,
        item: InlineCompletionItem,
    ) -> None:
        _logger.debug("hot_streak_completion lines=%s chars=%s", item.line_count, item.char_count)
        hot_streak_items.append(item)

    await provider.generate_completions(
        abort_event or asyncio.Event(),
        snippets,
        on_completion_ready,
        on_hot_streak_completion_ready,
    )
    if not results:
        return []
    return results + hot_streak_items
