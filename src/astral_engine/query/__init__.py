"""Filter / Query engine module.

Exports the ``QueryEngine`` and ``ChartBuilder`` classes, their convenience
functions, the filter predicates and the built-in dashboard panels.
"""
from __future__ import annotations

from astral_engine.query.charts import ChartBuilder, generate_chart_data
from astral_engine.query.defaults import DEFAULT_PANELS, default_panel
from astral_engine.query.engine import QueryEngine, execute_query, sort_objects
from astral_engine.query.filters import (
    is_daily_note,
    is_favorite,
    matches_date_range,
    matches_filter,
    special_filter_predicate,
)

__all__ = [
    "ChartBuilder",
    "generate_chart_data",
    "DEFAULT_PANELS",
    "default_panel",
    "QueryEngine",
    "execute_query",
    "sort_objects",
    "is_daily_note",
    "is_favorite",
    "matches_date_range",
    "matches_filter",
    "special_filter_predicate",
]
