"""Tests for the in-memory state handle and normalization helpers."""

import pytest

from reconciler.exceptions import ImportRequired, ValidationError
from reconciler.normalize import (
    expand_tags,
    flatten_tags,
    normalize_location,
    validate_location,
    validate_tags,
)
from reconciler.state import ResourceData, StateHandle


class TestResourceData:
    """Tests for ResourceData."""

    def test_implements_protocol(self):
        assert isinstance(ResourceData(), StateHandle)

    def test_config_is_a_copy(self):
        state = ResourceData(desired={"tags": {"a": "b"}})
        state.config()["tags"]["a"] = "changed"
        assert state.desired == {"tags": {"a": "b"}}

    def test_encode_and_prior(self):
        state = ResourceData()
        state.encode({"name": "pool1"})
        assert state.prior() == {"name": "pool1"}

    def test_set_id(self):
        state = ResourceData(gone=True)
        state.set_id("/x/pool1")
        assert state.id == "/x/pool1"
        assert not state.gone

    def test_mark_as_gone(self):
        state = ResourceData(recorded={"name": "pool1"}, resource_id="/x/pool1")
        state.mark_as_gone()
        assert state.gone
        assert state.id is None
        assert state.recorded == {}

    def test_has_change(self):
        state = ResourceData(desired={"sku_name": "B"}, recorded={"sku_name": "A"})
        assert state.has_change("sku_name")
        assert not state.has_change("tags")

    def test_resource_requires_import(self):
        error = ResourceData().resource_requires_import("azurerm_disk_pool", "/x/pool1")
        assert isinstance(error, ImportRequired)


class TestNormalize:
    """Tests for location and tag helpers."""

    @pytest.mark.parametrize("value", ["West Europe", "westeurope", "WestEurope"])
    def test_normalize_location(self, value):
        assert normalize_location(value) == "westeurope"

    def test_normalize_empty_location(self):
        assert normalize_location(None) == ""

    def test_expand_tags(self):
        assert expand_tags({"a": 1, "b": None, "c": "x"}) == {"a": "1", "b": "", "c": "x"}
        assert expand_tags(None) == {}

    def test_flatten_tags(self):
        assert flatten_tags({"a": None, "b": "x"}) == {"a": "", "b": "x"}
        assert flatten_tags(None) == {}

    def test_validate_tags(self):
        validate_tags({"env": "prod"})
        with pytest.raises(ValidationError, match="maximum of 50"):
            validate_tags({str(i): "v" for i in range(51)})
        with pytest.raises(ValidationError, match="tag key"):
            validate_tags({"k" * 513: "v"})
        with pytest.raises(ValidationError, match="tag value"):
            validate_tags({"k": "v" * 257})
        with pytest.raises(ValidationError, match="map of strings"):
            validate_tags(["env"])

    def test_validate_location(self):
        validate_location("westeurope")
        with pytest.raises(ValidationError):
            validate_location("   ")
