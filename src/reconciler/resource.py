"""Resource descriptors.

A Resource describes one resource type to the engine: its type name,
model, identifier type, timeouts, and how to turn models into remote
payloads and remote snapshots back into models.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from .codec import StateCodec
from .identifiers import ResourceIdentifier
from .schema import FieldSpec, arguments, attributes, update_schema

if TYPE_CHECKING:
    from .client import RemoteSnapshot
    from .diff import ModelDiff

M = TypeVar("M")
I = TypeVar("I", bound=ResourceIdentifier)  # noqa: E741


@dataclass(frozen=True)
class ResourceTimeouts:
    """Per-operation time budgets in seconds."""

    create: float = 30 * 60
    read: float = 5 * 60
    update: float = 30 * 60
    delete: float = 30 * 60

    def for_operation(self, operation: str) -> float:
        """Budget for ``operation``; import uses the read budget."""
        if operation == "import":
            operation = "read"
        return float(getattr(self, operation))


class Resource(ABC, Generic[M, I]):
    """
    Base class for resource descriptors.

    Subclasses set the class attributes and implement the payload and
    flattening hooks. A resource supports in-place updates when it
    overrides ``build_update_payload``.

    Class attributes:
        type_name: Host-facing resource type, e.g. ``azurerm_disk_pool``
        model: Dataclass declared with ``schema.attribute`` fields
        id_type: ResourceIdentifier subclass
        timeouts: Per-operation budgets
    """

    type_name: ClassVar[str]
    model: ClassVar[type[Any]]
    id_type: ClassVar[type[ResourceIdentifier]]
    timeouts: ClassVar[ResourceTimeouts] = ResourceTimeouts()

    def __init__(self) -> None:
        self.codec: StateCodec[M] = StateCodec(self.model)

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def arguments(self) -> dict[str, FieldSpec]:
        return arguments(self.model)

    def attributes(self) -> dict[str, FieldSpec]:
        return attributes(self.model)

    def update_schema(self) -> dict[str, FieldSpec]:
        return update_schema(self.model)

    def validate(self, model: M) -> None:
        """Validate a decoded model. Override to add cross-field checks."""
        self.codec.validate(model)

    # -------------------------------------------------------------------------
    # Identifiers
    # -------------------------------------------------------------------------

    def parse_id(self, value: str) -> I:
        return self.id_type.parse(value)  # type: ignore[return-value]

    def validate_id(self, value: Any, key: str = "id") -> None:
        self.id_type.validate(value, key)

    @abstractmethod
    def identifier_for(self, model: M, subscription_id: str) -> I:
        """Build the identifier of the object ``model`` describes."""

    # -------------------------------------------------------------------------
    # Payloads
    # -------------------------------------------------------------------------

    @abstractmethod
    def build_create_payload(self, model: M) -> dict[str, Any]:
        """Full creation body built from every input field."""

    def build_update_payload(self, model: M, diff: ModelDiff) -> dict[str, Any]:
        """
        Partial update body containing only the changed fields in ``diff``.

        ``diff`` never holds force-new fields. The default raises; override
        it to support in-place updates.
        """
        raise NotImplementedError(f"{self.type_name} does not support in-place updates")

    @property
    def supports_update(self) -> bool:
        return type(self).build_update_payload is not Resource.build_update_payload

    @abstractmethod
    def flatten(self, resource_id: I, snapshot: RemoteSnapshot) -> M:
        """
        Map a present snapshot into a fresh model.

        Identifying fields must come from ``resource_id``, not the
        snapshot, so recorded state stays canonical.
        """
