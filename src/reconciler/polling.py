"""Polling of long-running remote operations.

A mutation submitted to the remote API returns before it is done. The
adapter wraps it in a PendingOperation and polls a status check with
bounded exponential backoff until it reaches a terminal state::

    SUBMITTED -> POLLING -> SUCCEEDED | FAILED | TIMED_OUT | CANCELED

TIMED_OUT is distinct from FAILED: a timed-out operation may still
complete remotely, a failed one was rejected.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from ulid import ULID

from .context import OperationContext
from .exceptions import PollingCanceled, PollingFailed, PollingTimedOut

logger = logging.getLogger(__name__)


class OperationStatus(Enum):
    """Lifecycle states of a PendingOperation."""

    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELED = "canceled"

    @property
    def terminal(self) -> bool:
        return self not in (OperationStatus.SUBMITTED, OperationStatus.POLLING)


class RemoteStatus(Enum):
    """Status reported by one remote status check."""

    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELED = "Canceled"

    @classmethod
    def from_api(cls, value: str | None) -> RemoteStatus:
        """
        Map a provisioning/operation status string to a RemoteStatus.

        Anything not recognized as terminal counts as in progress
        (``Accepted``, ``Creating``, ``Updating``, ``Deleting``...).
        """
        normalized = (value or "").strip().lower()
        if normalized in ("succeeded", "success", "completed"):
            return cls.SUCCEEDED
        if normalized == "failed":
            return cls.FAILED
        if normalized in ("canceled", "cancelled"):
            return cls.CANCELED
        return cls.IN_PROGRESS


@dataclass(frozen=True)
class StatusCheck:
    """Result of one status check."""

    status: RemoteStatus
    error: str | None = None


StatusCheckFn = Callable[[], Awaitable[StatusCheck]]


@dataclass
class PendingOperation:
    """
    A submitted long-running mutation.

    Attributes:
        kind: "create", "update", or "delete"
        resource_id: Canonical identifier of the target
        operation_id: Unique ID used to correlate log lines
        status: Current lifecycle state
        attempts: Number of status checks performed
        error: Remote error details once FAILED
    """

    kind: str
    resource_id: str
    operation_id: str = field(default_factory=lambda: str(ULID()))
    status: OperationStatus = OperationStatus.SUBMITTED
    attempts: int = 0
    error: str | None = None
    submitted_at: float = field(default_factory=time.monotonic)

    def transition(self, status: OperationStatus) -> None:
        """
        Move to ``status``.

        Raises:
            ValueError: If the operation already reached a terminal state
        """
        if self.status.terminal:
            raise ValueError(
                f"operation {self.operation_id} is already {self.status.value}, "
                f"cannot move to {status.value}"
            )
        self.status = status

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.submitted_at


@dataclass(frozen=True)
class PollPolicy:
    """
    Bounded exponential backoff between status checks.

    Attributes:
        initial_interval: Delay before the second check (seconds)
        max_interval: Upper bound for any single delay (seconds)
        multiplier: Growth factor applied after each check
    """

    initial_interval: float = 2.0
    max_interval: float = 30.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.initial_interval < 0:
            raise ValueError("initial_interval must be non-negative")
        if self.max_interval < self.initial_interval:
            raise ValueError("max_interval must be >= initial_interval")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

    def interval(self, attempt: int) -> float:
        """Delay after status check number ``attempt`` (1-indexed)."""
        delay = self.initial_interval * (self.multiplier ** max(0, attempt - 1))
        return min(delay, self.max_interval)


async def poll_until_done(
    operation: PendingOperation,
    check_status: StatusCheckFn,
    ctx: OperationContext,
    policy: PollPolicy | None = None,
) -> PendingOperation:
    """
    Poll ``check_status`` until the operation reaches a terminal state.

    Cancellation is checked before every status check, and the backoff
    wait wakes as soon as the context is cancelled.

    Args:
        operation: The submitted operation (status SUBMITTED)
        check_status: Coroutine function performing one status check
        ctx: Deadline and cancellation signal
        policy: Backoff policy (default: PollPolicy())

    Returns:
        The operation, in state SUCCEEDED

    Raises:
        PollingFailed: The remote API reported Failed or Canceled
        PollingTimedOut: The deadline passed while still in progress
        PollingCanceled: ``ctx`` was cancelled

    Any other exception raised by ``check_status`` propagates unchanged,
    after the operation is moved to FAILED (CANCELED if the task itself
    was cancelled).
    """
    policy = policy or PollPolicy()
    operation.transition(OperationStatus.POLLING)

    while True:
        if ctx.cancelled:
            operation.transition(OperationStatus.CANCELED)
            raise PollingCanceled(operation)
        if ctx.expired:
            operation.transition(OperationStatus.TIMED_OUT)
            raise PollingTimedOut(operation)

        try:
            result = await asyncio.wait_for(check_status(), timeout=ctx.remaining())
        except TimeoutError as e:
            operation.transition(OperationStatus.TIMED_OUT)
            raise PollingTimedOut(operation) from e
        except asyncio.CancelledError:
            operation.transition(OperationStatus.CANCELED)
            raise
        except Exception as e:
            operation.error = str(e) or type(e).__name__
            operation.transition(OperationStatus.FAILED)
            raise
        operation.attempts += 1

        logger.debug(
            "Operation %s (%s %s) check %d: %s",
            operation.operation_id,
            operation.kind,
            operation.resource_id,
            operation.attempts,
            result.status.value,
        )

        if result.status is RemoteStatus.SUCCEEDED:
            operation.transition(OperationStatus.SUCCEEDED)
            return operation

        if result.status in (RemoteStatus.FAILED, RemoteStatus.CANCELED):
            operation.error = result.error or f"remote status {result.status.value}"
            operation.transition(OperationStatus.FAILED)
            raise PollingFailed(operation)

        delay = policy.interval(operation.attempts)
        remaining = ctx.remaining()
        if remaining is not None:
            delay = min(delay, remaining)
        if await ctx.sleep(delay):
            operation.transition(OperationStatus.CANCELED)
            raise PollingCanceled(operation)
