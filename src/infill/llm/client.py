"""Streaming code-completions backend client."""

from __future__ import annotations

from typing import Any, AsyncIterator, Callable, Mapping, Optional, Protocol
import asyncio
import logging

from infill.config.settings import AutocompleteSettings, resolve_env_secret

from .errors import CompletionsClientError, ProviderSDKMissingError
from .types import CompletionParameters, CompletionResponse, StopReason


FIREWORKS_BASE_URL = "https://api.fireworks.ai/inference/v1"

_ROUTING_PREFIX = "fireworks/"
_ACCOUNT_MODEL_PREFIX = "accounts/fireworks/models/"


class CodeCompletionsClient(Protocol):
    def complete(
        self,
        parameters: CompletionParameters,
        abort_event: asyncio.Event,
    ) -> AsyncIterator[CompletionResponse]:
        """Yield accumulated completion text, ending with one final response."""
        ...


def resolve_backend_model(model: str) -> str:
    """Map a routed model id (``fireworks/...``) to the Fireworks model path."""

    name = model[len(_ROUTING_PREFIX):] if model.startswith(_ROUTING_PREFIX) else model
    if name.startswith("accounts/"):
        return name
    return _ACCOUNT_MODEL_PREFIX + name


class OpenAICompletionsClient:
    """Fireworks client speaking the OpenAI-compatible ``/completions`` API.

    Every yielded response carries the full text accumulated so far. Partial
    responses use ``StopReason.STREAMING_CHUNK``; the last response carries the
    backend finish reason.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: Optional[str] = None,
        client: Any | None = None,
        client_factory: Callable[..., Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url or FIREWORKS_BASE_URL
        self._client = client
        self._client_factory = client_factory or self._default_client_factory
        self._logger = logger or logging.getLogger("infill.llm.client")

    async def complete(
        self,
        parameters: CompletionParameters,
        abort_event: asyncio.Event,
    ) -> AsyncIterator[CompletionResponse]:
        openai = _load_openai()
        client = self._client or self._build_client()
        request: dict[str, Any] = {
            "model": resolve_backend_model(parameters.model),
            "prompt": parameters.prompt,
            "max_tokens": parameters.max_tokens_to_sample,
            "temperature": parameters.temperature,
            "stream": True,
            "timeout": parameters.timeout_ms / 1000.0,
            "extra_body": {"top_k": parameters.top_k},
        }
        if parameters.stop_sequences:
            request["stop"] = list(parameters.stop_sequences)

        try:
            stream = await client.completions.create(**request)
        except openai.OpenAIError as exc:
            raise CompletionsClientError("Fireworks completion request failed.") from exc

        completion = ""
        finish_reason: Optional[str] = None
        try:
            async for chunk in stream:
                if abort_event.is_set():
                    self._logger.debug("completion_stream_aborted model=%s", parameters.model)
                    return
                choices = getattr(chunk, "choices", None)
                if not choices:
                    continue
                choice = choices[0]
                completion += getattr(choice, "text", None) or ""
                finish_reason = getattr(choice, "finish_reason", None) or finish_reason
                yield CompletionResponse(completion=completion, stop_reason=StopReason.STREAMING_CHUNK)
        except openai.OpenAIError as exc:
            raise CompletionsClientError("Fireworks completion stream failed.") from exc
        finally:
            await stream.close()

        self._logger.debug(
            "completion_stream_finished model=%s finish_reason=%s chars=%s",
            parameters.model,
            finish_reason,
            len(completion),
        )
        yield CompletionResponse(
            completion=completion,
            stop_reason=StopReason.from_finish_reason(finish_reason),
        )

    def _build_client(self) -> Any:
        self._client = self._client_factory(api_key=self._api_key, base_url=self._base_url)
        return self._client

    @staticmethod
    def _default_client_factory(**kwargs: Any) -> Any:
        return _load_openai().AsyncOpenAI(**kwargs)


def build_completions_client(
    settings: AutocompleteSettings,
    *,
    environ: Optional[Mapping[str, str]] = None,
    client: Any | None = None,
    logger: logging.Logger | None = None,
) -> CodeCompletionsClient:
    api_key = resolve_env_secret(settings.provider.api_key_env, environ)
    return OpenAICompletionsClient(
        api_key=api_key,
        base_url=settings.provider.base_url,
        client=client,
        logger=logger,
    )


def _load_openai() -> Any:
    try:
        import openai
    except ImportError as exc:
        raise ProviderSDKMissingError(
            "openai SDK is required to use OpenAICompletionsClient."
        ) from exc
    return openai
