"""Diff engine for resource models.

Compares the previously recorded model against the desired model to
produce the set of changed fields. The engine builds update payloads
from this diff instead of asking the host which fields changed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .schema import FieldSpec, fields_of


@dataclass(frozen=True)
class FieldChange:
    """A single changed field."""

    name: str  # external field name
    old: Any
    new: Any
    force_new: bool = False


@dataclass(frozen=True)
class ModelDiff:
    """Field-level differences between two models of the same type."""

    changes: tuple[FieldChange, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __contains__(self, name: object) -> bool:
        return self.has_change(str(name))

    @property
    def names(self) -> set[str]:
        return {c.name for c in self.changes}

    def has_change(self, name: str) -> bool:
        return any(c.name == name for c in self.changes)

    @property
    def requires_replacement(self) -> bool:
        """True when any changed field is force-new."""
        return any(c.force_new for c in self.changes)

    @property
    def force_new_changes(self) -> tuple[FieldChange, ...]:
        return tuple(c for c in self.changes if c.force_new)

    def updatable(self) -> ModelDiff:
        """Return the subset of changes an in-place update may apply."""
        return ModelDiff(tuple(c for c in self.changes if not c.force_new))


def _normalized(value: Any) -> Any:
    # The host cannot tell an unset collection from an empty one.
    if value is None:
        return None
    if value == [] or value == {} or value == "":
        return None
    return value


def _comparable(spec: FieldSpec, value: Any) -> Any:
    if spec.normalize is not None and _normalized(value) is not None:
        value = spec.normalize(value)
    return _normalized(value)


def compute_diff(previous: Any, desired: Any) -> ModelDiff:
    """
    Compute changed input fields between two models.

    Output-only fields are never compared: they belong to the remote
    side and drift in them is reported by Read, not applied by Update.
    Fields declared with a ``normalize`` function are compared in their
    canonical form, so configuration written as ``"West Europe"`` matches
    a recorded ``"westeurope"``. The FieldChange keeps the raw values.

    Args:
        previous: Model decoded from the host's last recorded state
        desired: Model decoded from the host's configuration

    Returns:
        ModelDiff with one FieldChange per differing input field, in
        declaration order.
    """
    if type(previous) is not type(desired):
        raise TypeError(
            f"cannot diff {type(previous).__name__} against {type(desired).__name__}"
        )

    changes: list[FieldChange] = []
    for spec in fields_of(desired):
        if not spec.is_input:
            continue
        old = getattr(previous, spec.attr)
        new = getattr(desired, spec.attr)
        if _comparable(spec, old) == _comparable(spec, new):
            continue
        changes.append(FieldChange(name=spec.name, old=old, new=new, force_new=spec.force_new))

    return ModelDiff(tuple(changes))
