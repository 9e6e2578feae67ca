"""Unit test fixtures using the in-memory remote API."""

import pytest

from reconciler import EngineOptions, ReconciliationEngine, ResourceData
from reconciler_diskpools import DiskPoolResource
from tests.fixtures.names import SUBSCRIPTION_ID, disk_pool_config
from tests.fixtures.remote import FakeRemoteClient


@pytest.fixture
def remote():
    """Empty in-memory remote API."""
    return FakeRemoteClient()


@pytest.fixture
def options():
    return EngineOptions(subscription_id=SUBSCRIPTION_ID)


@pytest.fixture
def engine(options, remote):
    """Engine with the disk pool resource registered against ``remote``."""
    engine = ReconciliationEngine(options)
    engine.register(DiskPoolResource(), remote)
    return engine


@pytest.fixture
def state():
    """State handle holding a valid disk pool configuration."""
    return ResourceData(desired=disk_pool_config())
