"""Tests for model schema metadata and the state codec."""

from dataclasses import dataclass

import pytest

from reconciler.codec import StateCodec
from reconciler.exceptions import ValidationError
from reconciler.schema import (
    Direction,
    arguments,
    attribute,
    attributes,
    fields_of,
    update_schema,
)
from reconciler_diskpools import DiskPoolModel
from tests.fixtures.resources import WidgetModel


class TestSchema:
    """Tests for attribute() metadata."""

    def test_fields_in_declaration_order(self):
        names = [spec.name for spec in fields_of(DiskPoolModel)]
        assert names == [
            "name",
            "resource_group_name",
            "location",
            "sku_name",
            "subnet_id",
            "tags",
            "zones",
        ]

    def test_update_schema_excludes_force_new(self):
        assert set(update_schema(DiskPoolModel)) == {"sku_name", "tags"}

    def test_normalizers(self):
        specs = {spec.name: spec for spec in fields_of(DiskPoolModel)}
        assert specs["location"].normalize("West Europe") == "westeurope"
        assert specs["tags"].normalize({"n": 1}) == {"n": "1"}
        assert specs["sku_name"].normalize is None

    def test_arguments_and_attributes(self):
        assert set(arguments(WidgetModel)) == {"name", "size"}
        assert set(attributes(WidgetModel)) == {"serial"}

    def test_output_field_cannot_be_force_new(self):
        with pytest.raises(ValueError, match="output-only"):
            attribute("status", direction=Direction.OUTPUT, force_new=True)

    def test_undeclared_field_rejected(self):
        @dataclass
        class Bare:
            name: str = ""

        with pytest.raises(TypeError, match="attribute"):
            fields_of(Bare)

    def test_not_a_dataclass(self):
        with pytest.raises(TypeError, match="not a dataclass"):
            fields_of(object)

    def test_external_name_differs_from_attr(self):
        @dataclass
        class Renamed:
            sku: str = attribute("sku_name")

        [spec] = fields_of(Renamed)
        assert spec.name == "sku_name"
        assert spec.attr == "sku"


class TestStateCodec:
    """Tests for StateCodec."""

    def test_decode_defaults(self):
        codec = StateCodec(DiskPoolModel)
        model = codec.decode({"name": "pool1", "tags": None})

        assert model.name == "pool1"
        assert model.location == ""
        assert model.tags == {}
        assert model.zones == []

    def test_decode_ignores_unknown_keys(self):
        model = StateCodec(DiskPoolModel).decode({"id": "/x", "name": "pool1"})
        assert model.name == "pool1"

    def test_decode_copies_values(self):
        values = {"zones": ["1"]}
        model = StateCodec(DiskPoolModel).decode(values)
        model.zones.append("2")
        assert values == {"zones": ["1"]}

    def test_encode(self):
        codec = StateCodec(WidgetModel)
        assert codec.encode(WidgetModel(name="w", size=3)) == {
            "name": "w",
            "size": 3,
            "serial": "",
        }

    def test_encode_wrong_type(self):
        with pytest.raises(TypeError, match="expected WidgetModel"):
            StateCodec(WidgetModel).encode(DiskPoolModel())

    def test_validate_required(self):
        codec = StateCodec(WidgetModel)
        with pytest.raises(ValidationError) as exc_info:
            codec.validate(WidgetModel())
        assert exc_info.value.field == "name"
        assert exc_info.value.reason == "is required"

    def test_validate_skips_output_fields(self):
        StateCodec(WidgetModel).validate(WidgetModel(name="w", serial=""))

    def test_validate_runs_validators(self):
        def positive(value, key):
            if value <= 0:
                raise ValidationError(key, value, "must be positive")

        @dataclass
        class Sized:
            size: int = attribute("size", default=0, validate=positive)

        codec = StateCodec(Sized)
        codec.validate(Sized(size=0))  # empty and optional: validator not run
        with pytest.raises(ValidationError, match="must be positive"):
            codec.validate(Sized(size=-1))
