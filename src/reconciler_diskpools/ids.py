"""Identifiers used by the disk pool resource."""

from dataclasses import dataclass
from typing import ClassVar

from reconciler.identifiers import ResourceIdentifier


@dataclass(frozen=True)
class DiskPoolId(ResourceIdentifier):
    """Identifier of a disk pool."""

    subscription_id: str
    resource_group_name: str
    disk_pool_name: str

    TEMPLATE: ClassVar[str] = (
        "/subscriptions/{subscription_id}"
        "/resourceGroups/{resource_group_name}"
        "/providers/Microsoft.StoragePool/diskPools/{disk_pool_name}"
    )


@dataclass(frozen=True)
class SubnetId(ResourceIdentifier):
    """Identifier of a virtual network subnet."""

    subscription_id: str
    resource_group_name: str
    virtual_network_name: str
    subnet_name: str

    TEMPLATE: ClassVar[str] = (
        "/subscriptions/{subscription_id}"
        "/resourceGroups/{resource_group_name}"
        "/providers/Microsoft.Network/virtualNetworks/{virtual_network_name}"
        "/subnets/{subnet_name}"
    )