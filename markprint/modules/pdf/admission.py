"""
Admission gate for PDF render jobs.

A counting limit on concurrently admitted jobs plus a bounded FIFO of waiters.
Releasing a slot hands it straight to the oldest waiter, so the active count
never dips below the limit while someone is queued and arrival order is kept.
"""

import asyncio
from collections import deque

from markprint.shared.errors import TooManyPendingError


class AdmissionGate:
    """Semaphore with a bounded, strictly FIFO wait queue."""

    def __init__(self, limit: int, max_pending: int | None = None) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.max_pending = limit * 2 if max_pending is None else max_pending
        self._active = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def active(self) -> int:
        return self._active

    @property
    def pending(self) -> int:
        return len(self._waiters)

    def can_admit_now(self) -> bool:
        return self._active < self.limit and not self._waiters

    async def acquire(self) -> None:
        """
        Wait for a slot.

        Raises:
            TooManyPendingError: the wait queue is already full
        """
        if self.can_admit_now():
            self._active += 1
            return

        if len(self._waiters) >= self.max_pending:
            raise TooManyPendingError(self.max_pending)

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before cancellation; pass it on
                self.release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        """Give the slot to the next waiter, or free it."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Slot transfers; active count is unchanged
                waiter.set_result(None)
                return
        if self._active <= 0:
            raise RuntimeError("release() called more times than acquire()")
        self._active -= 1
