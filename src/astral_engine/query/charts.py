"""Chart aggregation for chart-mode dashboard panels.

``ChartBuilder`` runs a panel's query and reduces the result to data points:

* ``pie`` / ``bar`` -- one ``ChartDataPoint`` per bucket of
  ``group_by_property``, largest first, capped at ``MAX_CHART_BUCKETS`` with
  the remainder folded into an ``"Otros"`` bucket.  Bucket values always sum
  to the number of matching objects.
* ``progress`` -- two points, ``Completado`` and ``Pendiente``, holding
  whole percentages that sum to 100.
* ``timeline`` -- chronologically sorted ``TimelineDataPoint`` items
  bucketed by day, week or month.
* ``count`` -- a single point named after the panel.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime
from typing import Union

from astral_engine.dates.semantic import parse_user_date, week_start
from astral_engine.model.objects import AstralObject, ObjectType, TypeCatalog
from astral_engine.model.panels import (
    ChartConfig,
    ChartDataPoint,
    ChartType,
    DashboardPanel,
    TimelineDataPoint,
    TimelineGrouping,
)
from astral_engine.model.text import fold_text
from astral_engine.model.values import (
    DateValue,
    PropertyValue,
    StringListValue,
    TextValue,
    is_empty_value,
)
from astral_engine.query.engine import QueryEngine
from astral_engine.query.heuristics import (
    COMPLETED_STATUS_VALUES,
    DEFAULT_PALETTE,
    DEFAULT_PROGRESS_PROPERTY,
    EMPTY_BUCKET_LABEL,
    MAX_CHART_BUCKETS,
    OTHER_BUCKET_COLOR,
    OTHER_BUCKET_LABEL,
    PROGRESS_DONE_COLOR,
    PROGRESS_DONE_LABEL,
    PROGRESS_PENDING_COLOR,
    PROGRESS_PENDING_LABEL,
)

logger = logging.getLogger(__name__)

ChartData = Union[list[ChartDataPoint], list[TimelineDataPoint]]


class ChartBuilder:
    """Turns a chart-mode panel into chart data points.

    Parameters
    ----------
    now:
        Evaluation time forwarded to the query engine.
    max_buckets:
        Number of pie/bar buckets kept before folding into ``"Otros"``.
    """

    def __init__(self, now: datetime | None = None, max_buckets: int = MAX_CHART_BUCKETS) -> None:
        self._engine = QueryEngine(now=now)
        self._max_buckets = max_buckets

    def build(
        self,
        panel: DashboardPanel,
        objects: Sequence[AstralObject],
        types: Sequence[ObjectType],
    ) -> ChartData:
        """Return the chart data for ``panel``; ``[]`` without a chart config."""
        config = panel.chart_config
        if config is None:
            return []
        result = self._engine.execute(panel.query, objects, types)
        chart_type = ChartType(config.type)
        logger.debug("Building %s chart for panel %r over %d object(s)", chart_type, panel.id, len(result))

        if chart_type is ChartType.COUNT:
            return [ChartDataPoint(name=panel.name, value=float(len(result)), color=panel.color)]
        if chart_type is ChartType.PROGRESS:
            return self._progress(result, config)
        if chart_type is ChartType.TIMELINE:
            return self.timeline(result, config)
        return self._buckets(result, config, TypeCatalog(types))

    # ------------------------------------------------------------------
    # pie / bar
    # ------------------------------------------------------------------

    def _buckets(
        self,
        result: Sequence[AstralObject],
        config: ChartConfig,
        catalog: TypeCatalog,
    ) -> list[ChartDataPoint]:
        group_by = config.group_by_property or "type"
        counts: dict[str, int] = {}
        type_colors: dict[str, str] = {}
        for obj in result:
            if group_by == "type":
                object_type = catalog.get(obj.type)
                key = object_type.name if object_type and object_type.name else obj.type
                if object_type is not None and object_type.color:
                    type_colors.setdefault(key, object_type.color)
            else:
                key = _bucket_label(obj.properties.get(group_by))
            counts[key] = counts.get(key, 0) + 1

        # sorted() is stable: equal counts keep their first-seen order in the
        # query result, so ties follow the panel's sort order.
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        kept = ranked[: self._max_buckets]
        rest = ranked[self._max_buckets :]

        points = [
            ChartDataPoint(
                name=name,
                value=float(count),
                color=type_colors.get(name) or _palette_color(config, index),
            )
            for index, (name, count) in enumerate(kept)
        ]
        if rest:
            points.append(
                ChartDataPoint(
                    name=OTHER_BUCKET_LABEL,
                    value=float(sum(count for _name, count in rest)),
                    color=OTHER_BUCKET_COLOR,
                )
            )
        return points

    # ------------------------------------------------------------------
    # progress
    # ------------------------------------------------------------------

    def _progress(self, result: Sequence[AstralObject], config: ChartConfig) -> list[ChartDataPoint]:
        property_id = config.progress_property or DEFAULT_PROGRESS_PROPERTY
        if config.progress_completed_value:
            completed_values = frozenset({fold_text(config.progress_completed_value)})
        else:
            completed_values = COMPLETED_STATUS_VALUES

        completed = sum(
            1 for obj in result if _is_completed(obj.properties.get(property_id), completed_values)
        )
        total = len(result)
        percentage = math.floor(completed * 100 / total + 0.5) if total else 0
        return [
            ChartDataPoint(PROGRESS_DONE_LABEL, float(percentage), PROGRESS_DONE_COLOR),
            ChartDataPoint(PROGRESS_PENDING_LABEL, float(100 - percentage), PROGRESS_PENDING_COLOR),
        ]

    # ------------------------------------------------------------------
    # timeline
    # ------------------------------------------------------------------

    def timeline(self, result: Sequence[AstralObject], config: ChartConfig) -> list[TimelineDataPoint]:
        """Bucket ``result`` by the configured date property."""
        grouping = TimelineGrouping(config.timeline_group_by)
        counts: dict[str, int] = {}
        for obj in result:
            moment = _timeline_moment(obj, config.timeline_property or "createdAt")
            if moment is None:
                continue
            key = _timeline_key(moment, grouping)
            counts[key] = counts.get(key, 0) + 1
        return [TimelineDataPoint(date=key, count=counts[key]) for key in sorted(counts)]


def _palette_color(config: ChartConfig, index: int) -> str:
    if index < len(config.colors):
        return config.colors[index]
    return DEFAULT_PALETTE[index % len(DEFAULT_PALETTE)]


def _bucket_label(value: PropertyValue | None) -> str:
    if is_empty_value(value):
        return EMPTY_BUCKET_LABEL
    return value.display()


def _is_completed(value: PropertyValue | None, completed_values: frozenset[str]) -> bool:
    if isinstance(value, StringListValue):
        return any(fold_text(item) in completed_values for item in value.items)
    if is_empty_value(value):
        return False
    return fold_text(value.display()) in completed_values


def _timeline_moment(obj: AstralObject, property_id: str) -> datetime | None:
    if property_id == "createdAt":
        return obj.created_at
    if property_id == "updatedAt":
        return obj.updated_at
    value = obj.properties.get(property_id)
    if isinstance(value, DateValue):
        return value.value
    if isinstance(value, TextValue):
        return parse_user_date(value.value)
    return None


def _timeline_key(moment: datetime, grouping: TimelineGrouping) -> str:
    if grouping is TimelineGrouping.WEEK:
        return week_start(moment.date()).isoformat()
    if grouping is TimelineGrouping.MONTH:
        return f"{moment.year:04d}-{moment.month:02d}"
    return moment.date().isoformat()


def generate_chart_data(
    panel: DashboardPanel,
    objects: Sequence[AstralObject],
    types: Sequence[ObjectType],
    now: datetime | None = None,
) -> ChartData:
    """Convenience function: build chart data for ``panel``."""
    return ChartBuilder(now=now).build(panel, objects, types)
