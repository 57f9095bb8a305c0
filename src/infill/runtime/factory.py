"""Factory for wiring settings into a ready provider config."""

from __future__ import annotations

from typing import Any, Mapping, Optional
import logging

from infill.config.settings import AutocompleteSettings
from infill.llm.client import CodeCompletionsClient, build_completions_client
from infill.providers.base import ProviderConfig
from infill.providers.fireworks import create_provider_config, resolve_model


def build_provider_config(
    settings: AutocompleteSettings,
    *,
    environ: Optional[Mapping[str, str]] = None,
    client: Optional[CodeCompletionsClient] = None,
    sdk_client: Any | None = None,
    logger: Optional[logging.Logger] = None,
) -> ProviderConfig:
    """Create the Fireworks provider config described by ``settings``.

    ``client`` replaces the backend client entirely; ``sdk_client`` only
    replaces the underlying ``AsyncOpenAI`` instance.
    """

    _logger = logger or logging.getLogger("infill.runtime.factory")

    # Fail on an unknown model before credentials are looked up.
    resolve_model(settings.provider.model)

    if client is None:
        client = build_completions_client(
            settings,
            environ=environ,
            client=sdk_client,
            logger=logging.getLogger("infill.llm.client"),
        )

    config = create_provider_config(
        model=settings.provider.model,
        client=client,
        timeouts=settings.timeouts,
    )
    _logger.info(
        "provider_config_ready identifier=%s model=%s total_chars=%s",
        config.identifier,
        config.model,
        config.context_size_hints.total_chars,
    )
    return config
