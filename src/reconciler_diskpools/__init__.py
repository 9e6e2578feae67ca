"""Disk pool resource for resource-reconciler."""

from .client import API_VERSION, DiskPoolsClient
from .ids import DiskPoolId, SubnetId
from .resource import DiskPoolModel, DiskPoolResource, expand_sku

__all__ = [
    "API_VERSION",
    "DiskPoolId",
    "DiskPoolModel",
    "DiskPoolResource",
    "DiskPoolsClient",
    "SubnetId",
    "expand_sku",
]
