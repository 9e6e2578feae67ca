"""
resource-reconciler: reconciliation core for infrastructure-as-code resources.

This library drives declared resources through idempotent CRUD against
eventually-consistent management APIs:
- Import detection (Create never adopts an existing object)
- Drift detection (Read refreshes state, drops vanished objects)
- Partial updates built from an explicit field-level diff
- Per-identifier mutation locks
- Long-running operation polling with deadlines and cancellation

Example:
    from reconciler import EngineOptions, ReconciliationEngine, ResourceData
    from reconciler_diskpools import DiskPoolResource, DiskPoolsClient

    engine = ReconciliationEngine(EngineOptions(subscription_id="..."))
    engine.register(DiskPoolResource(), DiskPoolsClient())

    state = ResourceData(desired={"name": "pool1", ...})
    await engine.create("azurerm_disk_pool", state)
    await engine.read("azurerm_disk_pool", state)
"""

from .client import RemoteClientProtocol, RemoteSnapshot
from .codec import StateCodec
from .config import EngineOptions
from .context import OperationContext
from .diff import FieldChange, ModelDiff, compute_diff
from .engine import Operation, ReconciliationEngine, ResourceBinding
from .exceptions import (
    ImportRequired,
    ImportTargetNotFound,
    LockAcquisitionFailed,
    MalformedIDError,
    OperationCanceled,
    OperationTimeout,
    PollingCanceled,
    PollingError,
    PollingFailed,
    PollingTimedOut,
    ReconcilerError,
    ReconciliationError,
    RemoteError,
    RemoteMutationFailed,
    RemoteQueryFailed,
    RemoteRequestError,
    UnknownResourceTypeError,
    UnsupportedOperationError,
    ValidationError,
)
from .identifiers import ResourceIdentifier
from .locks import MutationLockManager
from .polling import (
    OperationStatus,
    PendingOperation,
    PollPolicy,
    RemoteStatus,
    StatusCheck,
    poll_until_done,
)
from .resource import Resource, ResourceTimeouts
from .schema import Direction, FieldSpec, attribute
from .state import ResourceData, StateHandle

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Engine
    "ReconciliationEngine",
    "ResourceBinding",
    "Operation",
    "EngineOptions",
    "OperationContext",
    "MutationLockManager",
    # Resources
    "Resource",
    "ResourceTimeouts",
    "ResourceIdentifier",
    "Direction",
    "FieldSpec",
    "attribute",
    "StateCodec",
    "FieldChange",
    "ModelDiff",
    "compute_diff",
    # Host boundary
    "StateHandle",
    "ResourceData",
    # Remote boundary
    "RemoteClientProtocol",
    "RemoteSnapshot",
    "PendingOperation",
    "OperationStatus",
    "RemoteStatus",
    "StatusCheck",
    "PollPolicy",
    "poll_until_done",
    # Exceptions - Base
    "ReconcilerError",
    # Exceptions - Input
    "ValidationError",
    "MalformedIDError",
    "UnknownResourceTypeError",
    "UnsupportedOperationError",
    # Exceptions - Remote
    "RemoteError",
    "RemoteRequestError",
    "PollingError",
    "PollingFailed",
    "PollingTimedOut",
    "PollingCanceled",
    # Exceptions - Reconciliation
    "ReconciliationError",
    "RemoteQueryFailed",
    "ImportRequired",
    "ImportTargetNotFound",
    "RemoteMutationFailed",
    "OperationTimeout",
    "OperationCanceled",
    "LockAcquisitionFailed",
]


def __getattr__(name: str) -> type:
    """Lazy import for the httpx-backed transport.

    Hosts that bring their own RemoteClientProtocol adapters can import
    the engine without httpx installed.
    """
    if name == "HttpResourceClient":
        from .transport import HttpResourceClient

        return HttpResourceClient
    if name == "HttpClientConfig":
        from .transport import HttpClientConfig

        return HttpClientConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
