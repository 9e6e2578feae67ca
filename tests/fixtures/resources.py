"""A minimal resource type used to exercise the engine generically."""

from dataclasses import dataclass
from typing import Any, ClassVar

from reconciler import Direction, Resource, ResourceIdentifier, ResourceTimeouts, attribute


@dataclass(frozen=True)
class WidgetId(ResourceIdentifier):
    subscription_id: str
    widget_name: str

    TEMPLATE: ClassVar[str] = "/subscriptions/{subscription_id}/widgets/{widget_name}"


@dataclass
class WidgetModel:
    name: str = attribute("name", required=True, force_new=True)
    size: int = attribute("size", default=0)
    serial: str = attribute("serial", direction=Direction.OUTPUT)


class WidgetResource(Resource[WidgetModel, WidgetId]):
    """Create/read/delete only: widgets cannot be updated in place."""

    type_name = "test_widget"
    model = WidgetModel
    id_type = WidgetId
    timeouts = ResourceTimeouts(create=5, read=5, update=5, delete=5)

    def identifier_for(self, model: WidgetModel, subscription_id: str) -> WidgetId:
        return WidgetId(subscription_id, model.name)

    def build_create_payload(self, model: WidgetModel) -> dict[str, Any]:
        return {"size": model.size}

    def flatten(self, resource_id: WidgetId, snapshot) -> WidgetModel:
        return WidgetModel(
            name=resource_id.widget_name,
            size=snapshot.properties.get("size", 0),
            serial=snapshot.properties.get("serial", ""),
        )
