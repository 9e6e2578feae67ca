"""Tests for structured resource identifiers."""

import pytest

from reconciler.exceptions import MalformedIDError, ValidationError
from reconciler_diskpools.ids import DiskPoolId, SubnetId
from tests.fixtures.names import SUBNET_ID, SUBSCRIPTION_ID, disk_pool_id


class TestParse:
    """Tests for ResourceIdentifier.parse."""

    def test_parse_disk_pool_id(self):
        parsed = DiskPoolId.parse(disk_pool_id())
        assert parsed == DiskPoolId(SUBSCRIPTION_ID, "rg1", "pool1")

    def test_parse_subnet_id(self):
        parsed = SubnetId.parse(SUBNET_ID)
        assert parsed.virtual_network_name == "vnet1"
        assert parsed.subnet_name == "subnet1"

    @pytest.mark.parametrize(
        "identifier",
        [
            DiskPoolId("sub", "rg1", "pool1"),
            DiskPoolId(SUBSCRIPTION_ID, "my.resource-group(1)", "pool_2"),
            SubnetId("sub", "rg", "vnet", "default"),
        ],
    )
    def test_round_trip(self, identifier):
        """Parsing the rendered form yields the same identifier."""
        assert type(identifier).parse(str(identifier)) == identifier
        assert str(type(identifier).parse(identifier.id())) == identifier.id()

    @pytest.mark.parametrize(
        "value",
        [
            disk_pool_id() + "/",
            "/" + disk_pool_id(),
            disk_pool_id().replace("/resourceGroups", "//resourceGroups"),
        ],
    )
    def test_stray_slashes_rejected(self, value):
        with pytest.raises(MalformedIDError, match="expected 8 segments"):
            DiskPoolId.parse(value)

    def test_trailing_slash_is_not_a_name(self):
        value = disk_pool_id().rsplit("/", 1)[0] + "/"
        with pytest.raises(MalformedIDError, match="is empty"):
            DiskPoolId.parse(value)

    @pytest.mark.parametrize(
        "value,reason",
        [
            ("", "must start with '/'"),
            ("subscriptions/x", "must start with '/'"),
            ("/subscriptions/x/resourceGroups/rg1", "expected 8 segments"),
            (disk_pool_id() + "/extra", "expected 8 segments"),
            (
                "/subscriptions/x/resourceGroups/rg1/providers/Microsoft.Storage/diskPools/p",
                "expected segment 'Microsoft.StoragePool'",
            ),
            (
                "/subscriptions/x/resourceGroups//providers/Microsoft.StoragePool/diskPools/p",
                "resource_group_name is empty",
            ),
        ],
    )
    def test_malformed(self, value, reason):
        with pytest.raises(MalformedIDError) as exc_info:
            DiskPoolId.parse(value)
        assert reason in exc_info.value.reason
        assert exc_info.value.expected == DiskPoolId.TEMPLATE

    def test_non_string(self):
        with pytest.raises(MalformedIDError, match="expected a string"):
            DiskPoolId.parse(42)

    def test_case_sensitive_by_default(self):
        value = disk_pool_id().replace("resourceGroups", "resourcegroups")
        with pytest.raises(MalformedIDError):
            DiskPoolId.parse(value)

    def test_insensitive_renders_canonical(self):
        value = disk_pool_id().replace("resourceGroups", "RESOURCEGROUPS")
        parsed = DiskPoolId.parse(value, insensitive=True)
        assert str(parsed) == disk_pool_id()


class TestConstruct:
    """Tests for building identifiers from components."""

    def test_empty_component(self):
        with pytest.raises(MalformedIDError, match="disk_pool_name"):
            DiskPoolId("sub", "rg", "")

    def test_component_with_slash(self):
        with pytest.raises(MalformedIDError, match="must not contain"):
            DiskPoolId("sub", "rg/x", "pool")

    def test_frozen(self):
        identifier = DiskPoolId("sub", "rg", "pool")
        with pytest.raises(AttributeError):
            identifier.disk_pool_name = "other"  # type: ignore[misc]

    def test_hashable(self):
        assert len({DiskPoolId("s", "r", "p"), DiskPoolId("s", "r", "p")}) == 1


class TestValidate:
    """Tests for input-form validation."""

    def test_valid(self):
        SubnetId.validate(SUBNET_ID, "subnet_id")

    def test_not_a_string(self):
        with pytest.raises(ValidationError) as exc_info:
            SubnetId.validate(["a"], "subnet_id")
        assert exc_info.value.field == "subnet_id"
        assert "expected type to be string" in str(exc_info.value)

    def test_wrong_type_of_id(self):
        with pytest.raises(ValidationError) as exc_info:
            SubnetId.validate(disk_pool_id(), "subnet_id")
        assert exc_info.value.field == "subnet_id"
        assert isinstance(exc_info.value.__cause__, MalformedIDError)
