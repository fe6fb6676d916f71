"""Bounded concurrency queue for outbound AI calls.

Caps the number of simultaneously in-flight requests, however many calls
the rest of the application issues at once. Callers above the limit are
suspended (never blocking the event loop) and admitted in arrival order as
running tasks finish.
"""

import asyncio
import collections
import logging
from typing import Awaitable, Callable, Deque, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 2

T = TypeVar("T")

class RequestQueue:
    """FIFO admission control with at most `max_concurrency` running tasks.

    State is only touched from the event loop thread, so no lock is needed.
    When a running task settles, its slot is handed straight to the oldest
    waiter; `active_count` therefore never exceeds the limit and a caller
    arriving later cannot overtake one already waiting.
    """

    def __init__(self, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        """Initializes the queue.

        Args:
            max_concurrency: Maximum number of tasks allowed to run at once.
        """
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive.")
        self.max_concurrency = max_concurrency
        self.active_count = 0
        self._waiters: Deque[asyncio.Future] = collections.deque()
        logger.info(f"RequestQueue initialized: max_concurrency={max_concurrency}")

    @property
    def pending_count(self) -> int:
        """Number of callers waiting for a slot."""
        return len(self._waiters)

    async def run(self, task: Callable[[], Awaitable[T]]) -> T:
        """Runs `task` once a concurrency slot is available.

        Args:
            task: Zero-argument callable returning an awaitable.

        Returns:
            Whatever the task returns. Task errors propagate unchanged after
            the slot has been released.
        """
        await self._acquire()
        try:
            return await task()
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self.active_count < self.max_concurrency and not self._waiters:
            self.active_count += 1
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug(f"Queue at capacity ({self.active_count}/{self.max_concurrency}). "
                     f"Waiting behind {len(self._waiters) - 1} other caller(s).")
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The slot was handed over before the cancellation landed
                self._release()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
            raise

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Hand the slot over; active_count is unchanged
                waiter.set_result(None)
                return
        self.active_count -= 1
