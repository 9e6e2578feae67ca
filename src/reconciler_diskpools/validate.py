"""Input validation for disk pool arguments.

Validators take ``(value, key)`` and raise ValidationError with a
helpful message naming the offending configuration key.
"""

import re
from typing import Any

from reconciler.exceptions import ValidationError

# Disk pool names:
# - Letters, digits, underscores and hyphens
# - Must start with a letter or digit, must end with a letter, digit or underscore
# - At most 30 characters
DISK_POOL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9_-]{0,28}[A-Za-z0-9_])?$")

# SKU names are "<Tier>_<Size>", e.g. "Basic_B1", "Standard_S1", "Premium_P1".
SKU_TIERS = ("Basic", "Standard", "Premium")
SKU_NAME_PATTERN = re.compile(r"^(Basic|Standard|Premium)_[A-Za-z0-9]+$")

# Resource group names: 1-90 chars of letters, digits, "_", "-", ".", "(" and ")",
# not ending in a period.
RESOURCE_GROUP_NAME_PATTERN = re.compile(r"^[-\w._()]{0,89}[-\w_()]$")


def validate_disk_pool_name(value: Any, key: str = "name") -> None:
    """
    Validate a disk pool name.

    Raises:
        ValidationError: If the name is empty, too long, or contains
            invalid characters
    """
    if not isinstance(value, str) or not value:
        raise ValidationError(key, value, "Name cannot be empty")
    if len(value) > 30:
        raise ValidationError(key, value, "Too long. Name exceeds 30 character limit.")
    if "." in value or " " in value:
        raise ValidationError(
            key,
            value,
            "Contains periods or spaces. Only letters, digits, underscores and hyphens "
            "are allowed.",
        )
    if not DISK_POOL_NAME_PATTERN.match(value):
        raise ValidationError(
            key,
            value,
            "Must start with a letter or digit, end with a letter, digit or underscore, "
            "and contain only letters, digits, underscores and hyphens.",
        )


def validate_sku_name(value: Any, key: str = "sku_name") -> None:
    """
    Validate a disk pool SKU name.

    Raises:
        ValidationError: If the SKU is not ``<Tier>_<Size>`` with a known tier
    """
    if not isinstance(value, str) or not SKU_NAME_PATTERN.match(value):
        raise ValidationError(
            key,
            value,
            f"Must be '<Tier>_<Size>' with a tier of {', '.join(SKU_TIERS)} "
            "(e.g. 'Basic_B1').",
        )


def validate_resource_group_name(value: Any, key: str = "resource_group_name") -> None:
    if not isinstance(value, str) or not RESOURCE_GROUP_NAME_PATTERN.match(value):
        raise ValidationError(
            key,
            value,
            "May only contain alphanumeric characters, dash, underscores, parentheses "
            "and periods, must not end in a period, and must be 1-90 characters long.",
        )


def validate_zones(value: Any, key: str = "zones") -> None:
    """
    Validate availability zones.

    Raises:
        ValidationError: If no zone is given or any zone is empty
    """
    if not isinstance(value, list) or len(value) < 1:
        raise ValidationError(key, value, "At least one availability zone is required.")
    for index, zone in enumerate(value):
        if not isinstance(zone, str) or not zone.strip():
            raise ValidationError(f"{key}.{index}", zone, "must not be empty")
