"""Keyed mutual exclusion for mutating reconciliation calls.

The remote API has no transactional update semantics, so two concurrent
mutations of the same object could interleave. The lock manager hands
out one ``asyncio.Lock`` per resource identifier.

Locks are created lazily on first use and never removed; the map grows
with the number of distinct identifiers touched in the process. There
is no lock around the map itself: creating an entry is a single
dict insert on the event loop thread, so unrelated keys never
contend.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .exceptions import LockAcquisitionFailed

logger = logging.getLogger(__name__)


class MutationLockManager:
    """
    Per-key mutual exclusion over resource identifiers.

    Owned by a ReconciliationEngine (or shared between engines by passing
    the same instance). Not thread-safe: use one manager per event loop.

    Example:
        locks = MutationLockManager()
        async with locks.hold(str(resource_id)):
            await client.delete_and_poll(resource_id, ctx)
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, asyncio.Task | None] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def acquire(
        self,
        key: str,
        timeout: float | None = None,
        *,
        operation: str = "lock",
    ) -> None:
        """
        Block until ``key`` is free, then take it.

        Args:
            key: Canonical identifier string
            timeout: Give up after this many seconds (default: wait forever)
            operation: Operation name reported if acquisition fails

        Raises:
            LockAcquisitionFailed: If ``timeout`` expires first
        """
        lock = self._lock_for(key)
        if lock.locked():
            logger.debug("Waiting for mutation lock on %s", key)

        if timeout is None:
            await lock.acquire()
        else:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=timeout)
            except TimeoutError as e:
                raise LockAcquisitionFailed(
                    f"could not acquire mutation lock within {timeout}s",
                    operation=operation,
                    resource_id=key,
                    cause=e,
                ) from e
        self._holders[key] = asyncio.current_task()

    def release(self, key: str) -> None:
        """
        Release ``key``.

        Only the task that acquired ``key`` can release it. Calls for a key
        that was never acquired, is already released, or is held by another
        task are ignored.
        """
        lock = self._locks.get(key)
        if lock is None or not lock.locked():
            return
        if self._holders.get(key) is not asyncio.current_task():
            logger.debug("Ignoring release of %s from a task that does not hold it", key)
            return
        del self._holders[key]
        lock.release()

    @asynccontextmanager
    async def hold(
        self,
        key: str,
        timeout: float | None = None,
        *,
        operation: str = "lock",
    ) -> AsyncIterator[None]:
        """Hold ``key`` for the duration of the ``async with`` block."""
        await self.acquire(key, timeout=timeout, operation=operation)
        try:
            yield
        finally:
            self.release(key)

    def locked(self, key: str) -> bool:
        """True if some task currently holds ``key``."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, key: object) -> bool:
        return key in self._locks
