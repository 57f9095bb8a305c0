from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class StopReason(str, Enum):
    STREAMING_CHUNK = "streaming-chunk"
    STOP = "stop"
    LENGTH = "length"
    TIMEOUT = "timeout"
    ERROR = "error"

    @classmethod
    def from_finish_reason(cls, finish_reason: Optional[str]) -> "StopReason":
        if finish_reason == "length":
            return cls.LENGTH
        return cls.STOP


@dataclass(frozen=True)
class Message:
    speaker: str
    text: str


@dataclass(frozen=True)
class CompletionParameters:
    messages: Tuple[Message, ...]
    model: str
    max_tokens_to_sample: int
    timeout_ms: int
    stop_sequences: Optional[Tuple[str, ...]] = None
    temperature: float = 0.2
    top_k: int = 0

    @property
    def prompt(self) -> str:
        return "".join(message.text for message in self.messages if message.speaker == "human")


@dataclass(frozen=True)
class CompletionResponse:
    completion: str
    stop_reason: StopReason

    @property
    def is_final(self) -> bool:
        return self.stop_reason is not StopReason.STREAMING_CHUNK
