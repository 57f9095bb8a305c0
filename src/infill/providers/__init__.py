"""Completion providers and their config factories."""

from infill.providers.base import (
    CompletionProviderTracer,
    ContextSizeHints,
    OnCompletionsReady,
    Provider,
    ProviderConfig,
    ProviderOptions,
    standard_context_size_hints,
)
from infill.providers.families import InfillingInput, ModelFamily
from infill.providers.fireworks import (
    HYBRID_MODEL,
    MODEL_MAP,
    PROVIDER_IDENTIFIER,
    FireworksProvider,
    create_provider_config,
    get_max_context_tokens,
    resolve_model,
)

__all__ = [
    "CompletionProviderTracer",
    "ContextSizeHints",
    "FireworksProvider",
    "HYBRID_MODEL",
    "InfillingInput",
    "MODEL_MAP",
    "ModelFamily",
    "OnCompletionsReady",
    "PROVIDER_IDENTIFIER",
    "Provider",
    "ProviderConfig",
    "ProviderOptions",
    "create_provider_config",
    "get_max_context_tokens",
    "resolve_model",
    "standard_context_size_hints",
]
