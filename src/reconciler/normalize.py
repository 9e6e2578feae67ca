"""Normalization helpers shared by resource implementations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .exceptions import ValidationError

MAX_TAGS = 50
MAX_TAG_KEY_LENGTH = 512
MAX_TAG_VALUE_LENGTH = 256


def normalize_location(location: str | None) -> str:
    """
    Normalize a region name to its canonical form.

    ``"West Europe"``, ``"westeurope"`` and ``"WestEurope"`` all become
    ``"westeurope"``.
    """
    if not location:
        return ""
    return location.replace(" ", "").lower()


def expand_tags(tags: Mapping[str, Any] | None) -> dict[str, str]:
    """Convert configured tags into the string map sent to the remote API."""
    if not tags:
        return {}
    return {str(key): "" if value is None else str(value) for key, value in tags.items()}


def flatten_tags(tags: Mapping[str, Any] | None) -> dict[str, Any]:
    """Convert a remote tag map into the configuration form (missing values become "")."""
    if not tags:
        return {}
    return {key: "" if value is None else value for key, value in tags.items()}


def validate_tags(tags: Any, key: str = "tags") -> None:
    """
    Validate a configured tag map.

    Raises:
        ValidationError: On a non-mapping value, too many tags, or an
            over-long key or value
    """
    if not isinstance(tags, Mapping):
        raise ValidationError(key, tags, "expected a map of strings")
    if len(tags) > MAX_TAGS:
        raise ValidationError(key, len(tags), f"a maximum of {MAX_TAGS} tags can be applied")
    for tag_key, tag_value in tags.items():
        if len(str(tag_key)) > MAX_TAG_KEY_LENGTH:
            raise ValidationError(
                key, tag_key, f"the maximum length for a tag key is {MAX_TAG_KEY_LENGTH}"
            )
        if not isinstance(tag_value, (str, int, float, bool)):
            raise ValidationError(f"{key}.{tag_key}", tag_value, "tag values must be strings")
        if len(str(tag_value)) > MAX_TAG_VALUE_LENGTH:
            raise ValidationError(
                f"{key}.{tag_key}",
                tag_value,
                f"the maximum length for a tag value is {MAX_TAG_VALUE_LENGTH}",
            )


def validate_location(value: Any, key: str = "location") -> None:
    if not isinstance(value, str) or not normalize_location(value):
        raise ValidationError(key, value, "must be a non-empty region name")
