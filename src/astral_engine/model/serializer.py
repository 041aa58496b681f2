"""Snapshot serialization for astral-engine.

Converts object/type/panel snapshots between the engine's frozen records
and plain dict/list structures that map naturally to both JSON and YAML.
The dict form uses the Astral desktop store's camelCase keys
(``namePlural``, ``createdAt``, ``relationTypeId`` ...) so exported stores
can be loaded directly.

Usage
-----
::

    from astral_engine.model.serializer import SnapshotSerializer

    serializer = SnapshotSerializer()
    snapshot = serializer.from_yaml(Path("snapshot.yaml").read_text())
    text = serializer.to_json(snapshot)
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import yaml

from astral_engine.errors import SchemaError
from astral_engine.model.clock import to_naive
from astral_engine.model.objects import AstralObject, ObjectType, PropertyDefinition, PropertyType
from astral_engine.model.panels import (
    ChartConfig,
    ChartType,
    DashboardPanel,
    DateRangeFilter,
    DisplayMode,
    FilterOperator,
    PanelQuery,
    PropertyFilter,
    SortDirection,
    SpecialFilter,
    TimelineGrouping,
)
from astral_engine.model.values import (
    BoolValue,
    DateValue,
    NumberValue,
    PropertyValue,
    RelationRef,
    RelationValue,
    StringListValue,
    TextValue,
)

logger = logging.getLogger(__name__)

# Property kinds written by the desktop store folded onto the engine's set.
PROPERTY_TYPE_ALIASES: dict[str, PropertyType] = {
    "multiselect": PropertyType.STRING_LIST,
    "tags": PropertyType.STRING_LIST,
    "rating": PropertyType.NUMBER,
    "url": PropertyType.TEXT,
    "email": PropertyType.TEXT,
    "image": PropertyType.TEXT,
}


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Everything the engine needs for one evaluation."""

    types: tuple[ObjectType, ...] = ()
    objects: tuple[AstralObject, ...] = ()
    panels: tuple[DashboardPanel, ...] = ()


def _require(data: Mapping[str, Any], key: str, kind: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise SchemaError(f"{kind} record is missing required key {key!r}") from None


def _parse_datetime(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return to_naive(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if isinstance(raw, (int, float)):
        # Epoch milliseconds, as the desktop store writes them.
        return datetime.fromtimestamp(raw / 1000)
    if isinstance(raw, str):
        try:
            return to_naive(datetime.fromisoformat(raw.replace("Z", "+00:00")))
        except ValueError:
            raise SchemaError(f"invalid timestamp {raw!r}") from None
    raise SchemaError(f"invalid timestamp {raw!r}")


def _date_bound(raw: Any) -> datetime | date | str | None:
    if raw is None or isinstance(raw, str):
        return raw
    if isinstance(raw, datetime):
        return to_naive(raw)
    if isinstance(raw, date):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return _parse_datetime(raw)
    raise SchemaError(f"invalid date range bound {raw!r}")


def _bound_to_raw(bound: datetime | date | str | None) -> str | None:
    if isinstance(bound, date):
        return bound.isoformat()
    return bound


def _is_plain(value: object) -> bool:
    """True for filter values already in plain (JSON/YAML) form."""
    return value is None or isinstance(value, (str, int, float, bool))


class SnapshotSerializer:
    """Converts between engine records and plain Python dicts."""

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def property_type_from_str(self, raw: str) -> PropertyType:
        if raw in PROPERTY_TYPE_ALIASES:
            return PROPERTY_TYPE_ALIASES[raw]
        try:
            return PropertyType(raw)
        except ValueError:
            raise SchemaError(f"unknown property type {raw!r}") from None

    def property_from_dict(self, data: Mapping[str, Any]) -> PropertyDefinition:
        prop_id = _require(data, "id", "property")
        return PropertyDefinition(
            id=str(prop_id),
            name=str(data.get("name", prop_id)),
            type=self.property_type_from_str(str(data.get("type", "text"))),
            options=tuple(str(o) for o in data.get("options") or ()),
            relation_type_id=data.get("relationTypeId"),
        )

    def type_from_dict(self, data: Mapping[str, Any]) -> ObjectType:
        type_id = str(_require(data, "id", "object type"))
        name = str(data.get("name", type_id))
        return ObjectType(
            id=type_id,
            name=name,
            name_plural=str(data.get("namePlural", name)),
            icon=str(data.get("icon", "")),
            color=str(data.get("color", "")),
            properties=tuple(
                self.property_from_dict(p) for p in data.get("properties") or ()
            ),
        )

    def type_to_dict(self, object_type: ObjectType) -> dict[str, object]:
        return {
            "id": object_type.id,
            "name": object_type.name,
            "namePlural": object_type.name_plural,
            "icon": object_type.icon,
            "color": object_type.color,
            "properties": [
                {
                    "id": p.id,
                    "name": p.name,
                    "type": p.type.value,
                    **({"options": list(p.options)} if p.options else {}),
                    **({"relationTypeId": p.relation_type_id} if p.relation_type_id else {}),
                }
                for p in object_type.properties
            ],
        }

    # ------------------------------------------------------------------
    # Property values
    # ------------------------------------------------------------------

    def value_from_raw(self, raw: Any, definition: PropertyDefinition | None = None) -> PropertyValue | None:
        """Build a typed value from a plain value, guided by ``definition``."""
        if raw is None:
            return None
        if isinstance(raw, bool):
            return BoolValue(raw)
        if isinstance(raw, (int, float)):
            return NumberValue(float(raw))
        if isinstance(raw, (datetime, date)):
            return DateValue(_parse_datetime(raw))
        if isinstance(raw, list):
            if all(isinstance(item, Mapping) and "id" in item for item in raw) and raw:
                return RelationValue(
                    tuple(RelationRef(str(i["id"]), str(i.get("title", i["id"]))) for i in raw)
                )
            return StringListValue(tuple(str(item) for item in raw))
        text = str(raw)
        if definition is not None and definition.type.is_temporal and text:
            try:
                return DateValue(_parse_datetime(text))
            except SchemaError:
                logger.debug("Keeping unparsable date %r for %r as text", text, definition.id)
        return TextValue(text)

    def value_to_raw(self, value: PropertyValue) -> object:
        if isinstance(value, DateValue):
            return value.value.isoformat()
        if isinstance(value, StringListValue):
            return list(value.items)
        if isinstance(value, RelationValue):
            return [{"id": r.id, "title": r.title} for r in value.refs]
        return value.value

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def object_from_dict(
        self,
        data: Mapping[str, Any],
        types: Mapping[str, ObjectType] | None = None,
    ) -> AstralObject:
        obj_id = str(_require(data, "id", "object"))
        type_id = str(_require(data, "type", "object"))
        object_type = (types or {}).get(type_id)
        properties: dict[str, PropertyValue] = {}
        for key, raw in (data.get("properties") or {}).items():
            definition = object_type.property_by_id(key) if object_type else None
            value = self.value_from_raw(raw, definition)
            if value is not None:
                properties[str(key)] = value
        created = data.get("createdAt")
        updated = data.get("updatedAt", created)
        embedding = data.get("embedding")
        return AstralObject(
            id=obj_id,
            type=type_id,
            title=str(data.get("title", "")),
            content=str(data.get("content", "")),
            properties=properties,
            tags=tuple(str(t) for t in data.get("tags") or ()),
            links=tuple(str(x) for x in data.get("links") or ()),
            backlinks=tuple(str(x) for x in data.get("backlinks") or ()),
            created_at=_parse_datetime(created) if created is not None else datetime.min,
            updated_at=_parse_datetime(updated) if updated is not None else datetime.min,
            embedding=tuple(float(x) for x in embedding) if embedding else None,
        )

    def object_to_dict(self, obj: AstralObject) -> dict[str, object]:
        data: dict[str, object] = {
            "id": obj.id,
            "type": obj.type,
            "title": obj.title,
            "content": obj.content,
            "properties": {k: self.value_to_raw(v) for k, v in obj.properties.items()},
            "tags": list(obj.tags),
            "links": list(obj.links),
            "backlinks": list(obj.backlinks),
            "createdAt": obj.created_at.isoformat(),
            "updatedAt": obj.updated_at.isoformat(),
        }
        if obj.embedding is not None:
            data["embedding"] = list(obj.embedding)
        return data

    # ------------------------------------------------------------------
    # Panels
    # ------------------------------------------------------------------

    def query_from_dict(self, data: Mapping[str, Any]) -> PanelQuery:
        try:
            special = data.get("specialFilter")
            date_range = data.get("dateRange")
            return PanelQuery(
                types=tuple(str(t) for t in data.get("types") or ()),
                special_filter=SpecialFilter(special) if special else None,
                property_filters=tuple(
                    PropertyFilter(
                        property_id=str(_require(f, "propertyId", "property filter")),
                        operator=FilterOperator(_require(f, "operator", "property filter")),
                        value=f.get("value"),
                    )
                    for f in data.get("propertyFilters") or ()
                ),
                date_range=self.date_range_from_dict(date_range) if date_range else None,
                sort_by=str(data.get("sortBy", "updatedAt")),
                sort_direction=SortDirection(data.get("sortDirection", "desc")),
            )
        except ValueError as exc:
            if isinstance(exc, SchemaError):
                raise
            raise SchemaError(f"invalid panel query: {exc}") from None

    def date_range_from_dict(self, data: Mapping[str, Any]) -> DateRangeFilter:
        if not isinstance(data, Mapping):
            raise SchemaError(f"date range must be a mapping, got {type(data).__name__}")
        return DateRangeFilter(
            field=str(data.get("field", "createdAt")),
            start=_date_bound(data.get("start")),
            end=_date_bound(data.get("end")),
        )

    def chart_from_dict(self, data: Mapping[str, Any]) -> ChartConfig:
        try:
            return ChartConfig(
                type=ChartType(_require(data, "type", "chart config")),
                group_by_property=str(data.get("groupByProperty", "type")),
                progress_property=data.get("progressProperty"),
                progress_completed_value=data.get("progressCompletedValue"),
                timeline_property=str(data.get("timelineProperty", "createdAt")),
                timeline_group_by=TimelineGrouping(data.get("timelineGroupBy", "day")),
                colors=tuple(str(c) for c in data.get("colors") or ()),
            )
        except ValueError as exc:
            if isinstance(exc, SchemaError):
                raise
            raise SchemaError(f"invalid chart config: {exc}") from None

    def panel_from_dict(self, data: Mapping[str, Any]) -> DashboardPanel:
        panel_id = str(_require(data, "id", "panel"))
        chart = data.get("chartConfig")
        try:
            display_mode = DisplayMode(data.get("displayMode", "list"))
        except ValueError:
            raise SchemaError(f"invalid display mode {data.get('displayMode')!r}") from None
        return DashboardPanel(
            id=panel_id,
            name=str(data.get("name", panel_id)),
            query=self.query_from_dict(data.get("query") or {}),
            icon=str(data.get("icon", "")),
            color=data.get("color"),
            display_mode=display_mode,
            chart_config=self.chart_from_dict(chart) if chart else None,
            max_items=int(data.get("maxItems", 8)),
        )

    def query_to_dict(self, query: PanelQuery) -> dict[str, object]:
        data: dict[str, object] = {
            "types": list(query.types),
            "propertyFilters": [
                {
                    "propertyId": f.property_id,
                    "operator": FilterOperator(f.operator).value,
                    "value": f.value if _is_plain(f.value) else self.value_to_raw(f.value),
                }
                for f in query.property_filters
            ],
            "sortBy": query.sort_by,
            "sortDirection": SortDirection(query.sort_direction).value,
        }
        if query.special_filter is not None:
            data["specialFilter"] = SpecialFilter(query.special_filter).value
        if query.date_range is not None:
            data["dateRange"] = self.date_range_to_dict(query.date_range)
        return data

    def date_range_to_dict(self, date_range: DateRangeFilter) -> dict[str, object]:
        return {
            "field": date_range.field,
            "start": _bound_to_raw(date_range.start),
            "end": _bound_to_raw(date_range.end),
        }

    def chart_to_dict(self, chart: ChartConfig) -> dict[str, object]:
        return {
            "type": ChartType(chart.type).value,
            "groupByProperty": chart.group_by_property,
            "progressProperty": chart.progress_property,
            "progressCompletedValue": chart.progress_completed_value,
            "timelineProperty": chart.timeline_property,
            "timelineGroupBy": TimelineGrouping(chart.timeline_group_by).value,
            "colors": list(chart.colors),
        }

    def panel_to_dict(self, panel: DashboardPanel) -> dict[str, object]:
        data: dict[str, object] = {
            "id": panel.id,
            "name": panel.name,
            "icon": panel.icon,
            "color": panel.color,
            "displayMode": DisplayMode(panel.display_mode).value,
            "maxItems": panel.max_items,
            "query": self.query_to_dict(panel.query),
        }
        if panel.chart_config is not None:
            data["chartConfig"] = self.chart_to_dict(panel.chart_config)
        return data

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def from_dict(self, data: Mapping[str, Any]) -> Snapshot:
        """Build a ``Snapshot`` from a plain dict.

        Raises
        ------
        SchemaError
            If any record is structurally invalid.
        """
        if not isinstance(data, Mapping):
            raise SchemaError("snapshot document must be a mapping")
        types = tuple(self.type_from_dict(t) for t in data.get("types") or ())
        by_id = {t.id: t for t in types}
        objects = tuple(self.object_from_dict(o, by_id) for o in data.get("objects") or ())
        panels = tuple(self.panel_from_dict(p) for p in data.get("panels") or ())
        logger.debug(
            "Loaded snapshot: %d type(s), %d object(s), %d panel(s)",
            len(types),
            len(objects),
            len(panels),
        )
        return Snapshot(types=types, objects=objects, panels=panels)

    def to_dict(self, snapshot: Snapshot) -> dict[str, object]:
        return {
            "types": [self.type_to_dict(t) for t in snapshot.types],
            "objects": [self.object_to_dict(o) for o in snapshot.objects],
            "panels": [self.panel_to_dict(p) for p in snapshot.panels],
        }

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, snapshot: Snapshot, indent: int = 2) -> str:
        return json.dumps(self.to_dict(snapshot), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> Snapshot:
        return self.from_dict(json.loads(text))

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, snapshot: Snapshot) -> str:
        return yaml.dump(self.to_dict(snapshot), default_flow_style=False, allow_unicode=True)

    def from_yaml(self, text: str) -> Snapshot:
        return self.from_dict(yaml.safe_load(text) or {})
