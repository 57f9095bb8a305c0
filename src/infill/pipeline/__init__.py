"""Streaming fetch and post-processing of completion samples."""

from infill.pipeline.fetch import (
    OnHotStreakCompletionReady,
    OnSampleReady,
    PostProcess,
    fetch_and_process_completions,
    fetch_and_process_dynamic_multiline_completions,
)
from infill.pipeline.process import (
    InlineCompletionItem,
    PartialCompletion,
    empty_completion,
    extract_partial_completion,
    process_completion,
    truncate_multiline_completion,
)

__all__ = [
    "InlineCompletionItem",
    "OnHotStreakCompletionReady",
    "OnSampleReady",
    "PartialCompletion",
    "PostProcess",
    "empty_completion",
    "extract_partial_completion",
    "fetch_and_process_completions",
    "fetch_and_process_dynamic_multiline_completions",
    "process_completion",
    "truncate_multiline_completion",
]
