#!/usr/bin/env python3
"""
Disk Pool Lifecycle Example

Drives one disk pool through Create, Read, Update, and Delete against the
management API.

Setup:
    export ARM_SUBSCRIPTION_ID=...
    export ARM_ACCESS_TOKEN=$(az account get-access-token --query accessToken -o tsv)

    # Run this example
    uv run python examples/disk_pool_lifecycle.py

The resource group and subnet below must already exist, and the subnet
must be delegated to Microsoft.StoragePool/diskPools.
"""

import asyncio
import logging
import os

from reconciler import (
    EngineOptions,
    HttpClientConfig,
    ImportRequired,
    OperationContext,
    ReconciliationEngine,
    ResourceData,
)
from reconciler_diskpools import API_VERSION, DiskPoolResource, DiskPoolsClient

RESOURCE_GROUP = "reconciler-example"
SUBNET_ID = (
    "/subscriptions/{subscription}/resourceGroups/reconciler-example"
    "/providers/Microsoft.Network/virtualNetworks/example-vnet/subnets/diskpool"
)


async def main() -> None:
    """Create, refresh, retag, and delete a disk pool."""
    options = EngineOptions.from_env()
    subscription = options.require_subscription_id()

    client = DiskPoolsClient(
        HttpClientConfig(
            api_version=API_VERSION,
            headers={"Authorization": f"Bearer {os.environ['ARM_ACCESS_TOKEN']}"},
        )
    )
    engine = ReconciliationEngine(options)
    engine.register(DiskPoolResource(), client)

    state = ResourceData(
        desired={
            "name": "example-pool",
            "resource_group_name": RESOURCE_GROUP,
            "location": "West Europe",
            "sku_name": "Basic_B1",
            "subnet_id": SUBNET_ID.format(subscription=subscription),
            "zones": ["1"],
            "tags": {"purpose": "example"},
        }
    )

    # Give the whole example an hour; each operation also has its own budget
    ctx = OperationContext.with_deadline_in(60 * 60)

    async with client:
        try:
            resource_id = await engine.create("azurerm_disk_pool", state, ctx)
            print(f"Created {resource_id}")
        except ImportRequired as e:
            # Created out of band: adopt it instead
            print(f"Already exists, importing: {e.resource_id}")
            await engine.import_("azurerm_disk_pool", e.resource_id, state, ctx)

        model = await engine.read("azurerm_disk_pool", state, ctx)
        print(f"Read back: sku={model.sku_name} zones={model.zones} tags={model.tags}")

        state.desired["tags"] = {"purpose": "example", "stage": "updated"}
        diff = await engine.update("azurerm_disk_pool", state, ctx)
        print(f"Updated fields: {sorted(diff.names)}")

        await engine.delete("azurerm_disk_pool", state, ctx)
        print(f"Deleted, gone={state.gone}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
