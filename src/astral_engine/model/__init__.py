"""Schema model for astral-engine.

Every record is a frozen dataclass.  Property values form a tagged union
(``TextValue``, ``NumberValue``, ``BoolValue``, ``DateValue``,
``StringListValue``, ``RelationValue``).
"""
from __future__ import annotations

from astral_engine.model.objects import (
    AstralObject,
    ObjectType,
    PropertyDefinition,
    PropertyType,
    TypeCatalog,
)
from astral_engine.model.panels import (
    ChartConfig,
    ChartDataPoint,
    ChartType,
    DashboardPanel,
    DateRangeFilter,
    DisplayMode,
    FilterOperator,
    PanelQuery,
    PropertyFilter,
    SortDirection,
    SpecialFilter,
    TimelineDataPoint,
    TimelineGrouping,
)
from astral_engine.model.results import (
    MatchField,
    ParsedCommand,
    RelationSuggestion,
    RelationSuggestionContext,
    SearchMatch,
    SearchResult,
)
from astral_engine.model.serializer import Snapshot, SnapshotSerializer
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

__all__ = [
    # Schema and objects
    "AstralObject",
    "ObjectType",
    "PropertyDefinition",
    "PropertyType",
    "TypeCatalog",
    # Values
    "PropertyValue",
    "TextValue",
    "NumberValue",
    "BoolValue",
    "DateValue",
    "StringListValue",
    "RelationRef",
    "RelationValue",
    # Panels
    "ChartConfig",
    "ChartDataPoint",
    "ChartType",
    "DashboardPanel",
    "DateRangeFilter",
    "DisplayMode",
    "FilterOperator",
    "PanelQuery",
    "PropertyFilter",
    "SortDirection",
    "SpecialFilter",
    "TimelineDataPoint",
    "TimelineGrouping",
    # Results
    "MatchField",
    "ParsedCommand",
    "RelationSuggestion",
    "RelationSuggestionContext",
    "SearchMatch",
    "SearchResult",
    # Serialization
    "Snapshot",
    "SnapshotSerializer",
]
