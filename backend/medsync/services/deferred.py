"""Deferred Callback — a cancellable loop.call_later slot that can never fire stale.

Invariants:
    - At most one handle armed per slot; arm() supersedes the previous handle
    - cancel() is synchronous and total: once it returns, the callback will not run
    - A handle whose generation no longer matches the slot is ignored on fire

Design Decisions:
    - TimerHandle.cancel() plus a generation counter: the counter covers the window
      where the loop has already popped the handle for this iteration
    - Repeating behaviour is built by the caller re-arming from inside the callback,
      so a tick that cancels the slot also stops the chain
"""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class DeferredCallback:
    """One named deferred-callback slot bound to an event loop."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handle: asyncio.TimerHandle | None = None
        self._generation = 0

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(
        self,
        loop: asyncio.AbstractEventLoop,
        delay: float,
        callback: Callable[[], None],
    ) -> None:
        """Schedule callback after delay seconds, replacing any armed handle."""
        self.cancel()
        self._handle = loop.call_later(
            delay, self._fire, self._generation, callback,
        )

    def cancel(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int, callback: Callable[[], None]) -> None:
        if generation != self._generation:
            logger.debug(f"Dropped stale {self.name} callback")
            return
        self._handle = None
        callback()
