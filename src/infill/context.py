"""Context snippets and last-request-wins coordination for context lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar
import asyncio
import logging


T = TypeVar("T")


@dataclass(frozen=True)
class ContextSnippet:
    """Auxiliary code fragment, ranked most relevant first by the caller.

    A non-empty ``symbol`` marks the snippet as documentation for that symbol;
    otherwise it is a plain excerpt of ``file_name``.
    """

    file_name: str
    content: str
    symbol: Optional[str] = None

    @property
    def is_symbol_documentation(self) -> bool:
        return bool(self.symbol)


class LatestLookupGate:
    """Cancels the previous lookup whenever a new one starts."""

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._current: Optional[asyncio.Event] = None
        self._logger = logger or logging.getLogger("infill.context.lookup")

    def begin(self) -> asyncio.Event:
        if self._current is not None and not self._current.is_set():
            self._current.set()
            self._logger.debug("context_lookup_superseded")
        self._current = asyncio.Event()
        return self._current

    def is_current(self, abort_event: asyncio.Event) -> bool:
        return abort_event is self._current and not abort_event.is_set()

    async def run(self, lookup: Callable[[asyncio.Event], Awaitable[T]]) -> Optional[T]:
        """Run ``lookup`` and drop its result if a newer lookup started meanwhile."""

        abort_event = self.begin()
        result = await lookup(abort_event)
        if not self.is_current(abort_event):
            return None
        return result
