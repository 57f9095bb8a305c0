"""Backend completions client and request/response types."""

from infill.llm.client import (
    FIREWORKS_BASE_URL,
    CodeCompletionsClient,
    OpenAICompletionsClient,
    build_completions_client,
    resolve_backend_model,
)

from .errors import (
    CompletionsClientError,
    CompletionsError,
    ProviderSDKMissingError,
    UnknownModelError,
)
from .types import CompletionParameters, CompletionResponse, Message, StopReason

__all__ = [
    "FIREWORKS_BASE_URL",
    "CodeCompletionsClient",
    "CompletionParameters",
    "CompletionResponse",
    "CompletionsClientError",
    "CompletionsError",
    "Message",
    "OpenAICompletionsClient",
    "ProviderSDKMissingError",
    "StopReason",
    "UnknownModelError",
    "build_completions_client",
    "resolve_backend_model",
]
