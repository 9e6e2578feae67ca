"""Deadline and cancellation signal carried by one reconciliation call."""

from __future__ import annotations

import asyncio
import time


class OperationContext:
    """
    Caller-supplied deadline and cooperative cancellation.

    A context may be narrowed with ``with_timeout``; the narrowed context
    shares its parent's cancellation signal, so canceling the parent
    cancels every derived context.

    Example:
        ctx = OperationContext()
        op_ctx = ctx.with_timeout(30 * 60)
        ...
        ctx.cancel()  # op_ctx.cancelled is now True
    """

    def __init__(
        self,
        deadline: float | None = None,
        *,
        _cancel_event: asyncio.Event | None = None,
    ) -> None:
        """
        Args:
            deadline: Absolute ``time.monotonic()`` deadline, or None for no limit
        """
        self.deadline = deadline
        self._cancel_event = _cancel_event if _cancel_event is not None else asyncio.Event()

    @classmethod
    def with_deadline_in(cls, seconds: float) -> OperationContext:
        """Create a root context that expires ``seconds`` from now."""
        return cls(time.monotonic() + seconds)

    def with_timeout(self, seconds: float | None) -> OperationContext:
        """Derive a context whose deadline is the earlier of ours and now + seconds."""
        if seconds is None:
            deadline = self.deadline
        else:
            deadline = time.monotonic() + seconds
            if self.deadline is not None:
                deadline = min(deadline, self.deadline)
        return OperationContext(deadline, _cancel_event=self._cancel_event)

    def remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), or None if unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request cancellation of every operation using this context."""
        self._cancel_event.set()

    async def sleep(self, seconds: float) -> bool:
        """
        Sleep up to ``seconds``, waking early on cancellation.

        Returns:
            True if the context was cancelled during (or before) the sleep
        """
        if self.cancelled:
            return True
        try:
            await asyncio.wait_for(self._cancel_event.wait(), timeout=max(0.0, seconds))
        except TimeoutError:
            return False
        return True
