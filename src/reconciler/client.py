"""Remote client protocol for resource backends.

This module defines the RemoteClientProtocol that every per-resource
client adapter must implement. The protocol uses Python's
typing.Protocol with @runtime_checkable, enabling duck typing and
isinstance() checks at runtime.

Adapters own the transport: request retries, authentication, and the
polling of long-running operations all happen behind this protocol.
The engine only sees snapshots and RemoteError subclasses.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .context import OperationContext
    from .identifiers import ResourceIdentifier


@dataclass(frozen=True)
class RemoteSnapshot:
    """
    The remote API's view of one object at a point in time.

    Snapshots are fetched fresh for every reconciliation call and are
    never cached across calls.

    Attributes:
        resource_id: Canonical identifier the snapshot was fetched for
        present: False when the remote API reported not-found
        properties: Raw property bag returned by the remote API
    """

    resource_id: str
    present: bool = True
    properties: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def absent(cls, resource_id: str) -> "RemoteSnapshot":
        """Snapshot for an object the remote API does not know about."""
        return cls(resource_id=resource_id, present=False, properties={})


@runtime_checkable
class RemoteClientProtocol(Protocol):
    """
    Protocol for per-resource remote client adapters.

    Contract:

    - ``get`` returns ``RemoteSnapshot.absent(...)`` for not-found and
      raises ``RemoteError`` for anything else that goes wrong.
    - The ``*_and_poll`` methods submit a mutation and return only once
      it reached a terminal state, raising ``PollingFailed``,
      ``PollingTimedOut`` or ``PollingCanceled`` (all ``PollingError``)
      or ``RemoteRequestError``.
    - ``delete_and_poll`` treats not-found as success.

    Example:
        class WidgetClient:
            async def get(self, resource_id): ...
            async def create_or_update_and_poll(self, resource_id, payload, ctx): ...
            async def update_and_poll(self, resource_id, patch, ctx): ...
            async def delete_and_poll(self, resource_id, ctx): ...

        assert isinstance(WidgetClient(), RemoteClientProtocol)  # True at runtime
    """

    async def get(self, resource_id: "ResourceIdentifier") -> RemoteSnapshot:
        """Fetch the current remote state of ``resource_id``."""
        ...

    async def create_or_update_and_poll(
        self,
        resource_id: "ResourceIdentifier",
        payload: Mapping[str, Any],
        ctx: "OperationContext",
    ) -> None:
        """Submit a full-body create (or replace) and wait for it to finish."""
        ...

    async def update_and_poll(
        self,
        resource_id: "ResourceIdentifier",
        patch: Mapping[str, Any],
        ctx: "OperationContext",
    ) -> None:
        """Submit a partial update and wait for it to finish."""
        ...

    async def delete_and_poll(
        self,
        resource_id: "ResourceIdentifier",
        ctx: "OperationContext",
    ) -> None:
        """Submit a delete and wait for it to finish. Not-found is success."""
        ...
