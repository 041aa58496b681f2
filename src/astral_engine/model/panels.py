"""Declarative dashboard queries, panels and chart output records."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from astral_engine.model.values import PropertyValue


class SpecialFilter(str, Enum):
    """Named, hard-coded predicates not expressible via property filters."""

    ORPHANS = "orphans"
    INBOX = "inbox"
    RECENTLY_MODIFIED = "recently_modified"
    FAVORITES = "favorites"


class FilterOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    IS_EMPTY = "is_empty"
    NOT_EMPTY = "not_empty"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# The filter value is either a typed value or the raw string/number/bool a
# panel definition carries (including semantic date tokens such as "@hoy").
FilterValue = PropertyValue | str | float | int | bool | None


@dataclass(frozen=True, slots=True)
class PropertyFilter:
    """One predicate over a property.  Filters in a query are ANDed."""

    property_id: str
    operator: FilterOperator
    value: FilterValue = None


@dataclass(frozen=True, slots=True)
class DateRangeFilter:
    """Inclusive bounds on one date field; either bound may be omitted.

    ``field`` is ``createdAt``, ``updatedAt`` or a date property id.  A
    bound is a ``datetime`` (an exact instant), a ``date`` (the whole day)
    or user text such as ``"2024-05-01"`` or ``"@mes_pasado"``: a start
    bound uses the beginning of its range and an end bound the end of it.
    Objects with no date in ``field`` are kept.
    """

    field: str = "createdAt"
    start: datetime | date | str | None = None
    end: datetime | date | str | None = None


@dataclass(frozen=True, slots=True)
class PanelQuery:
    """A declarative object query backing a dashboard panel.

    Parameters
    ----------
    types:
        Object type ids to keep; empty keeps every type.
    special_filter:
        Optional named predicate applied after the type filter.
    property_filters:
        Predicates ANDed after the special filter.
    date_range:
        Optional inclusive bounds applied after the property filters.
    sort_by:
        ``updatedAt``, ``createdAt``, ``title`` or any property id.
    sort_direction:
        Ascending or descending; missing values always sort last.
    """

    types: tuple[str, ...] = ()
    special_filter: SpecialFilter | None = None
    property_filters: tuple[PropertyFilter, ...] = ()
    date_range: DateRangeFilter | None = None
    sort_by: str = "updatedAt"
    sort_direction: SortDirection = SortDirection.DESC


class ChartType(str, Enum):
    PIE = "pie"
    BAR = "bar"
    PROGRESS = "progress"
    TIMELINE = "timeline"
    COUNT = "count"


class TimelineGrouping(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class DisplayMode(str, Enum):
    LIST = "list"
    CHART = "chart"


@dataclass(frozen=True, slots=True)
class ChartConfig:
    """How a chart-mode panel aggregates its query result."""

    type: ChartType
    group_by_property: str = "type"
    progress_property: str | None = None
    progress_completed_value: str | None = None
    timeline_property: str = "createdAt"
    timeline_group_by: TimelineGrouping = TimelineGrouping.DAY
    colors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DashboardPanel:
    """A configurable dashboard widget backed by a ``PanelQuery``."""

    id: str
    name: str
    query: PanelQuery = PanelQuery()
    icon: str = ""
    color: str | None = None
    display_mode: DisplayMode = DisplayMode.LIST
    chart_config: ChartConfig | None = None
    max_items: int = 8


@dataclass(frozen=True, slots=True)
class ChartDataPoint:
    name: str
    value: float
    color: str | None = None


@dataclass(frozen=True, slots=True)
class TimelineDataPoint:
    date: str
    count: int
