"""Tests for the model diff engine."""

import pytest

from reconciler.diff import FieldChange, ModelDiff, compute_diff
from reconciler_diskpools import DiskPoolModel
from tests.fixtures.resources import WidgetModel


def pool(**overrides) -> DiskPoolModel:
    values = {
        "name": "pool1",
        "resource_group_name": "rg1",
        "location": "westeurope",
        "sku_name": "Basic_S1",
        "subnet_id": "/subnet",
        "zones": ["1"],
    }
    values.update(overrides)
    return DiskPoolModel(**values)


class TestComputeDiff:
    """Tests for compute_diff."""

    def test_no_changes(self):
        diff = compute_diff(pool(), pool())
        assert not diff
        assert diff.names == set()

    def test_updatable_change(self):
        diff = compute_diff(pool(), pool(sku_name="Standard_S1"))

        assert diff.names == {"sku_name"}
        assert "sku_name" in diff
        assert not diff.requires_replacement
        [change] = diff.changes
        assert change == FieldChange("sku_name", "Basic_S1", "Standard_S1", force_new=False)

    def test_force_new_change(self):
        diff = compute_diff(pool(), pool(zones=["2"], tags={"a": "b"}))

        assert diff.requires_replacement
        assert [c.name for c in diff.force_new_changes] == ["zones"]
        assert diff.updatable().names == {"tags"}

    def test_declaration_order(self):
        diff = compute_diff(pool(), pool(zones=["2"], sku_name="Premium_P1", location="eastus"))
        assert [c.name for c in diff.changes] == ["location", "sku_name", "zones"]

    @pytest.mark.parametrize("empty", [None, "", [], {}])
    def test_empty_values_are_equal(self, empty):
        previous = pool(tags={})
        previous.tags = empty
        assert not compute_diff(previous, pool(tags={}))

    def test_location_compared_in_canonical_form(self):
        assert not compute_diff(pool(location="westeurope"), pool(location="West Europe"))

        diff = compute_diff(pool(location="westeurope"), pool(location="North Europe"))
        [change] = diff.changes
        assert change == FieldChange("location", "westeurope", "North Europe", force_new=True)

    def test_tag_values_compared_as_strings(self):
        previous = pool(tags={"count": "1", "enabled": "True"})
        assert not compute_diff(previous, pool(tags={"count": 1, "enabled": True}))

        diff = compute_diff(previous, pool(tags={"count": 2, "enabled": True}))
        assert diff.names == {"tags"}
        assert not diff.requires_replacement

    def test_output_fields_ignored(self):
        diff = compute_diff(WidgetModel(name="w", serial="a"), WidgetModel(name="w", serial="b"))
        assert not diff

    def test_type_mismatch(self):
        with pytest.raises(TypeError, match="cannot diff"):
            compute_diff(pool(), WidgetModel(name="w"))


class TestModelDiff:
    """Tests for ModelDiff helpers."""

    def test_updatable_drops_force_new(self):
        diff = ModelDiff(
            (
                FieldChange("a", 1, 2, force_new=True),
                FieldChange("b", 1, 2),
            )
        )
        assert diff.updatable() == ModelDiff((FieldChange("b", 1, 2),))
        assert not diff.updatable().requires_replacement

    def test_empty(self):
        assert not ModelDiff()
        assert not ModelDiff().has_change("a")
