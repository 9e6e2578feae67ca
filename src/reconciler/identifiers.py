"""Structured resource identifiers.

A resource identifier is a composite key rendered as a slash-separated
path, e.g.::

    /subscriptions/{subscription_id}/resourceGroups/{resource_group_name}/...

Subclasses are frozen dataclasses that declare a ``TEMPLATE``. Every
``{placeholder}`` in the template must match a dataclass field; every
other segment is a literal that parsing must match.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

from .exceptions import MalformedIDError, ValidationError

_PLACEHOLDER = re.compile(r"^\{([a-z_][a-z0-9_]*)\}$")

IdT = TypeVar("IdT", bound="ResourceIdentifier")


def _split(value: str) -> list[str]:
    # Only the leading "/" is dropped: a doubled or trailing slash leaves an
    # empty segment behind and fails the segment count.
    return value[1:].split("/")


@dataclass(frozen=True)
class ResourceIdentifier:
    """Base class for structured resource identifiers."""

    TEMPLATE: ClassVar[str] = ""

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or not value:
                raise MalformedIDError(value, f"{f.name} must be a non-empty string")
            if "/" in value:
                raise MalformedIDError(value, f"{f.name} must not contain '/'")

    @classmethod
    def _segments(cls) -> list[tuple[str, bool]]:
        """Return ``(text, is_placeholder)`` pairs for the template."""
        segments = []
        for part in _split(cls.TEMPLATE):
            match = _PLACEHOLDER.match(part)
            if match:
                segments.append((match.group(1), True))
            else:
                segments.append((part, False))
        return segments

    @classmethod
    def parse(cls: type[IdT], value: Any, *, insensitive: bool = False) -> IdT:
        """
        Parse an identifier string.

        Args:
            value: Identifier string, e.g. from the host's state
            insensitive: Match literal segments case-insensitively. The
                parsed identifier always renders with canonical casing.

        Raises:
            MalformedIDError: If the string does not match ``TEMPLATE``
        """
        if not isinstance(value, str):
            raise MalformedIDError(value, "expected a string", expected=cls.TEMPLATE)
        if not value.startswith("/"):
            raise MalformedIDError(value, "must start with '/'", expected=cls.TEMPLATE)

        parts = _split(value)
        segments = cls._segments()
        if len(parts) != len(segments):
            raise MalformedIDError(
                value,
                f"expected {len(segments)} segments, got {len(parts)}",
                expected=cls.TEMPLATE,
            )

        values: dict[str, str] = {}
        for part, (text, is_placeholder) in zip(parts, segments, strict=True):
            if is_placeholder:
                if not part:
                    raise MalformedIDError(value, f"{text} is empty", expected=cls.TEMPLATE)
                values[text] = part
                continue
            matches = part.lower() == text.lower() if insensitive else part == text
            if not matches:
                raise MalformedIDError(
                    value,
                    f"expected segment {text!r}, got {part!r}",
                    expected=cls.TEMPLATE,
                )

        return cls(**values)

    @classmethod
    def validate(cls, value: Any, key: str = "id") -> None:
        """
        Validate an identifier as user input.

        Unlike ``parse``, failures are reported as ``ValidationError``
        against the configuration key that carried the value.

        Raises:
            ValidationError: If ``value`` is not a string or does not parse
        """
        if not isinstance(value, str):
            raise ValidationError(key, value, "expected type to be string")
        try:
            cls.parse(value)
        except MalformedIDError as e:
            raise ValidationError(key, value, e.reason) from e

    def id(self) -> str:
        """Return the canonical string form."""
        rendered = []
        for text, is_placeholder in self._segments():
            rendered.append(getattr(self, text) if is_placeholder else text)
        return "/" + "/".join(rendered)

    def __str__(self) -> str:
        return self.id()
