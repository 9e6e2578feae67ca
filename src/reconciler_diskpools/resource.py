"""The ``azurerm_disk_pool`` resource."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from reconciler.normalize import (
    expand_tags,
    flatten_tags,
    normalize_location,
    validate_location,
    validate_tags,
)
from reconciler.resource import Resource, ResourceTimeouts
from reconciler.schema import attribute

from .ids import DiskPoolId, SubnetId
from .validate import (
    validate_disk_pool_name,
    validate_resource_group_name,
    validate_sku_name,
    validate_zones,
)

if TYPE_CHECKING:
    from reconciler.client import RemoteSnapshot
    from reconciler.diff import ModelDiff


@dataclass
class DiskPoolModel:
    """Configuration and state of one disk pool."""

    name: str = attribute(
        "name", required=True, force_new=True, validate=validate_disk_pool_name
    )
    resource_group_name: str = attribute(
        "resource_group_name",
        required=True,
        force_new=True,
        validate=validate_resource_group_name,
    )
    location: str = attribute(
        "location",
        required=True,
        force_new=True,
        validate=validate_location,
        normalize=normalize_location,
    )
    sku_name: str = attribute("sku_name", required=True, validate=validate_sku_name)
    subnet_id: str = attribute(
        "subnet_id", required=True, force_new=True, validate=SubnetId.validate
    )
    tags: dict[str, Any] = attribute(
        "tags", default_factory=dict, validate=validate_tags, normalize=expand_tags
    )
    zones: list[str] = attribute(
        "zones", default_factory=list, required=True, force_new=True, validate=validate_zones
    )


def expand_sku(sku_name: str) -> dict[str, str]:
    """
    Build the remote SKU object.

    The tier is the part of the name before the first underscore:
    ``"Basic_B1"`` -> ``{"name": "Basic_B1", "tier": "Basic"}``.
    """
    return {"name": sku_name, "tier": sku_name.split("_", 1)[0]}


class DiskPoolResource(Resource[DiskPoolModel, DiskPoolId]):
    """Managed disk pool."""

    type_name = "azurerm_disk_pool"
    model = DiskPoolModel
    id_type = DiskPoolId
    timeouts = ResourceTimeouts(create=30 * 60, read=5 * 60, update=30 * 60, delete=30 * 60)

    def identifier_for(self, model: DiskPoolModel, subscription_id: str) -> DiskPoolId:
        return DiskPoolId(subscription_id, model.resource_group_name, model.name)

    def build_create_payload(self, model: DiskPoolModel) -> dict[str, Any]:
        return {
            "location": normalize_location(model.location),
            "sku": expand_sku(model.sku_name),
            "properties": {
                "availabilityZones": list(model.zones),
                "subnetId": model.subnet_id,
            },
            "tags": expand_tags(model.tags),
        }

    def build_update_payload(self, model: DiskPoolModel, diff: ModelDiff) -> dict[str, Any]:
        patch: dict[str, Any] = {}
        if diff.has_change("sku_name"):
            patch["sku"] = expand_sku(model.sku_name)
        if diff.has_change("tags"):
            patch["tags"] = expand_tags(model.tags)
        return patch

    def flatten(self, resource_id: DiskPoolId, snapshot: RemoteSnapshot) -> DiskPoolModel:
        m = DiskPoolModel(
            name=resource_id.disk_pool_name,
            resource_group_name=resource_id.resource_group_name,
        )

        remote = snapshot.properties
        sku = remote.get("sku") or {}
        m.sku_name = sku.get("name", "")
        m.tags = flatten_tags(remote.get("tags"))
        m.location = normalize_location(remote.get("location"))

        properties = remote.get("properties") or {}
        m.subnet_id = properties.get("subnetId", "")
        m.zones = list(properties.get("availabilityZones") or [])
        return m
