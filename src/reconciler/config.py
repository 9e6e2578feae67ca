"""Engine configuration.

Values resolve in the order: explicit argument, environment variable,
built-in default.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .exceptions import ValidationError

SUBSCRIPTION_ENV_VAR = "ARM_SUBSCRIPTION_ID"
"""Environment variable holding the subscription new resources are created in."""

LOCK_TIMEOUT_ENV_VAR = "RECONCILER_LOCK_TIMEOUT"
"""Environment variable bounding how long a mutation waits for its lock (seconds)."""

OPERATIONS = ("create", "read", "update", "delete", "import")


@dataclass(frozen=True)
class EngineOptions:
    """
    Options for ReconciliationEngine.

    Attributes:
        subscription_id: Subscription used to build identifiers on Create
        timeouts: Per-operation overrides of a resource's own budgets (seconds)
        lock_timeout: Give up waiting for a mutation lock after this many
            seconds (None waits forever, so LockAcquisitionFailed cannot occur)
    """

    subscription_id: str | None = None
    timeouts: Mapping[str, float] = field(default_factory=dict)
    lock_timeout: float | None = None

    def __post_init__(self) -> None:
        for operation, seconds in self.timeouts.items():
            if operation not in OPERATIONS:
                raise ValidationError("timeouts", operation, f"must be one of {OPERATIONS}")
            if seconds <= 0:
                raise ValidationError(f"timeouts.{operation}", seconds, "must be positive")
        if self.lock_timeout is not None and self.lock_timeout <= 0:
            raise ValidationError("lock_timeout", self.lock_timeout, "must be positive")

    @classmethod
    def from_env(
        cls,
        *,
        subscription_id: str | None = None,
        timeouts: Mapping[str, float] | None = None,
        lock_timeout: float | None = None,
    ) -> EngineOptions:
        """Build options, filling unset values from the environment."""
        subscription_id = subscription_id or os.environ.get(SUBSCRIPTION_ENV_VAR) or None

        if lock_timeout is None:
            raw = os.environ.get(LOCK_TIMEOUT_ENV_VAR)
            if raw:
                try:
                    lock_timeout = float(raw)
                except ValueError as e:
                    raise ValidationError(LOCK_TIMEOUT_ENV_VAR, raw, "must be a number") from e

        return cls(
            subscription_id=subscription_id,
            timeouts=dict(timeouts or {}),
            lock_timeout=lock_timeout,
        )

    def require_subscription_id(self) -> str:
        """
        Return the subscription ID.

        Raises:
            ValidationError: If neither the argument nor the environment set it
        """
        if not self.subscription_id:
            raise ValidationError(
                "subscription_id",
                self.subscription_id,
                f"is required to create resources (set {SUBSCRIPTION_ENV_VAR})",
            )
        return self.subscription_id
