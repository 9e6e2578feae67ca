"""Host framework boundary.

The host (an infrastructure-as-code runtime) owns persisted state. For
each reconciliation call it hands the engine a StateHandle exposing the
desired configuration, the last recorded state, and the ID slot. The
engine never persists anything itself.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .exceptions import ImportRequired


@runtime_checkable
class StateHandle(Protocol):
    """
    Protocol for the mutable state container of one resource instance.

    ``config()`` and ``prior()`` return raw values keyed by external field
    name; the engine decodes them into typed models with a StateCodec.
    """

    @property
    def id(self) -> str | None:
        """The bound identifier, or None before Create/Import."""
        ...

    def config(self) -> Mapping[str, Any]:
        """Desired values from configuration."""
        ...

    def prior(self) -> Mapping[str, Any]:
        """Values recorded by the last successful Read."""
        ...

    def encode(self, values: Mapping[str, Any]) -> None:
        """Record values read from the remote API."""
        ...

    def set_id(self, resource_id: str) -> None:
        """Bind the identifier of a created or imported resource."""
        ...

    def mark_as_gone(self) -> None:
        """Tell the host to drop this resource from state."""
        ...

    def has_change(self, name: str) -> bool:
        """Whether configuration differs from recorded state for ``name``."""
        ...

    def resource_requires_import(self, type_name: str, resource_id: str) -> Exception:
        """Build the error returned when Create finds an existing object."""
        ...


@dataclass
class ResourceData:
    """
    In-memory StateHandle.

    Suitable for embedding the engine in tools that keep state
    themselves, and for tests.

    Attributes:
        desired: Configuration values
        recorded: Values from the last Read
        resource_id: Bound identifier
        gone: Set once the resource was deleted or found missing
    """

    desired: dict[str, Any] = field(default_factory=dict)
    recorded: dict[str, Any] = field(default_factory=dict)
    resource_id: str | None = None
    gone: bool = False

    @property
    def id(self) -> str | None:
        return self.resource_id

    def config(self) -> Mapping[str, Any]:
        return copy.deepcopy(self.desired)

    def prior(self) -> Mapping[str, Any]:
        return copy.deepcopy(self.recorded)

    def encode(self, values: Mapping[str, Any]) -> None:
        self.recorded = copy.deepcopy(dict(values))
        self.gone = False

    def set_id(self, resource_id: str) -> None:
        self.resource_id = resource_id
        self.gone = False

    def mark_as_gone(self) -> None:
        self.resource_id = None
        self.recorded = {}
        self.gone = True

    def has_change(self, name: str) -> bool:
        return self.desired.get(name) != self.recorded.get(name)

    def resource_requires_import(self, type_name: str, resource_id: str) -> Exception:
        return ImportRequired(type_name, resource_id)
