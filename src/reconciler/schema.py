"""Field metadata for resource models.

A resource model is a plain dataclass. Each field is declared with
``attribute()``, which records the field's external name and how the
field behaves during reconciliation:

    @dataclass
    class WidgetModel:
        name: str = attribute("name", required=True, force_new=True)
        size: int = attribute("size", default=1)
        status: str = attribute("status", direction=Direction.OUTPUT)

Fields whose ``force_new`` flag is set are excluded from the update
schema, so an update payload can never contain them.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

SCHEMA_KEY = "reconciler.schema"

Validator = Callable[[Any, str], None]
Normalizer = Callable[[Any], Any]


class Direction(Enum):
    """Which side of reconciliation owns a field."""

    INPUT = "input"  # set by configuration only
    OUTPUT = "output"  # computed by the remote API only
    BOTH = "both"  # configured, and read back from the remote API


@dataclass(frozen=True)
class FieldSpec:
    """Reconciliation metadata attached to one model field."""

    name: str
    attr: str = ""
    direction: Direction = Direction.BOTH
    force_new: bool = False
    required: bool = False
    validate: Validator | None = None
    normalize: Normalizer | None = None

    @property
    def is_input(self) -> bool:
        return self.direction is not Direction.OUTPUT

    @property
    def is_output(self) -> bool:
        return self.direction is not Direction.INPUT

    @property
    def updatable(self) -> bool:
        return self.is_input and not self.force_new


def attribute(
    name: str,
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    direction: Direction = Direction.BOTH,
    force_new: bool = False,
    required: bool = False,
    validate: Validator | None = None,
    normalize: Normalizer | None = None,
) -> Any:
    """
    Declare a model field with reconciliation metadata.

    Args:
        name: Stable external name used in configuration and state
        default: Zero value for the field (``""`` when neither default is given)
        default_factory: Factory for mutable zero values (lists, dicts)
        direction: Whether the field is input, output, or both
        force_new: Changing the field requires replacing the resource
        required: Configuration must provide a non-empty value
        validate: ``validate(value, key)`` raising ``ValidationError``
        normalize: Canonical form used when diffing, for fields the remote
            API rewrites (location casing, tag value types)
    """
    if direction is Direction.OUTPUT and (force_new or required):
        raise ValueError(f"output-only field {name!r} cannot be force_new or required")

    spec = FieldSpec(
        name=name,
        direction=direction,
        force_new=force_new,
        required=required,
        validate=validate,
        normalize=normalize,
    )
    if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
        default = ""
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={SCHEMA_KEY: spec},
    )


def fields_of(model: Any) -> list[FieldSpec]:
    """
    Return the FieldSpecs of a model class or instance, in declaration order.

    Raises:
        TypeError: If the model is not a dataclass or a field lacks metadata
    """
    if not dataclasses.is_dataclass(model):
        raise TypeError(f"{model!r} is not a dataclass model")

    specs = []
    for f in dataclasses.fields(model):
        spec = f.metadata.get(SCHEMA_KEY)
        if spec is None:
            raise TypeError(f"field {f.name!r} was not declared with attribute()")
        specs.append(dataclasses.replace(spec, attr=f.name))
    return specs


def arguments(model: Any) -> dict[str, FieldSpec]:
    """Fields that configuration may set, keyed by external name."""
    return {spec.name: spec for spec in fields_of(model) if spec.is_input}


def attributes(model: Any) -> dict[str, FieldSpec]:
    """Output-only (computed) fields, keyed by external name."""
    return {spec.name: spec for spec in fields_of(model) if spec.direction is Direction.OUTPUT}


def update_schema(model: Any) -> dict[str, FieldSpec]:
    """Fields an in-place update may change. Force-new fields are absent."""
    return {spec.name: spec for spec in fields_of(model) if spec.updatable}
