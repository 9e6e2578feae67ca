"""Mapping between typed resource models and the host's state values."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from .exceptions import ValidationError
from .schema import fields_of

M = TypeVar("M")


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


class StateCodec(Generic[M]):
    """
    Decode host values into a model and encode a model back.

    Decoding is the write path (configuration into the engine); encoding
    is the read path (remote truth back into host state). Keys the model
    does not declare are ignored on decode, so host bookkeeping such as
    ``id`` can share the mapping.
    """

    def __init__(self, model_type: type[M]) -> None:
        self.model_type = model_type
        self._specs = fields_of(model_type)

    def decode(self, values: Mapping[str, Any] | None) -> M:
        """
        Build a model from host values.

        Missing keys and ``None`` values fall back to the field's zero value.
        """
        values = values or {}
        kwargs: dict[str, Any] = {}
        for spec in self._specs:
            value = values.get(spec.name)
            if value is None:
                continue
            kwargs[spec.attr] = copy.deepcopy(value)
        return self.model_type(**kwargs)

    def encode(self, model: M) -> dict[str, Any]:
        """Render a model as host values keyed by external field name."""
        if not isinstance(model, self.model_type):
            raise TypeError(f"expected {self.model_type.__name__}, got {type(model).__name__}")
        return {spec.name: copy.deepcopy(getattr(model, spec.attr)) for spec in self._specs}

    def validate(self, model: M) -> None:
        """
        Check required input fields and run per-field validators.

        Raises:
            ValidationError: On the first field that fails
        """
        for spec in self._specs:
            if not spec.is_input:
                continue
            value = getattr(model, spec.attr)
            if _is_empty(value):
                if spec.required:
                    raise ValidationError(spec.name, value, "is required")
                continue
            if spec.validate is not None:
                spec.validate(value, spec.name)
