"""Buffered diagnostics for completion post-processing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import logging


@dataclass(frozen=True)
class _Entry:
    request_id: str
    stage: str
    detail: str


class PostProcessLogger:
    """Collects post-processing decisions and writes them once a request settles.

    Samples of one request finish in any order; buffering keeps their entries
    together in the log instead of interleaving them with other requests.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("infill.pipeline.post_process")
        self._entries: list[_Entry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def info(self, *, request_id: str, stage: str, detail: str) -> None:
        self._entries.append(_Entry(request_id=request_id, stage=stage, detail=detail))

    def flush(self) -> None:
        entries, self._entries = self._entries, []
        for entry in entries:
            self._logger.debug(
                "post_process request_id=%s stage=%s %s",
                entry.request_id or "-",
                entry.stage,
                entry.detail,
            )

