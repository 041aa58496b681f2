"""Filter / Query engine: evaluate a ``PanelQuery`` over an object snapshot.

Pipeline, each stage working on the previous stage's output::

    type filter -> special filter -> AND of property filters -> date range -> sort

Truncation to a panel's ``max_items`` is left to the caller.

Usage
-----
::

    from astral_engine.query import QueryEngine
    from astral_engine.model import PanelQuery, SpecialFilter

    engine = QueryEngine(now=datetime(2024, 5, 1, 9, 0))
    inbox = engine.execute(PanelQuery(special_filter=SpecialFilter.INBOX), objects, types)
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from astral_engine.model.clock import resolve_now
from astral_engine.model.objects import AstralObject, ObjectType, TypeCatalog
from astral_engine.model.panels import PanelQuery, SortDirection
from astral_engine.model.text import fold_text
from astral_engine.model.values import (
    BoolValue,
    DateValue,
    NumberValue,
    RelationValue,
    StringListValue,
    TextValue,
    is_empty_value,
)
from astral_engine.query.filters import matches_date_range, matches_filter, special_filter_predicate
from astral_engine.query.heuristics import RECENT_DAYS

logger = logging.getLogger(__name__)

# Sort keys are (kind, value) so that values of different kinds never
# compare directly.
_KIND_DATE = 0
_KIND_TEXT = 1
_KIND_NUMBER = 2


class QueryEngine:
    """Evaluates panel queries against snapshots.

    Parameters
    ----------
    now:
        Fixed evaluation time for semantic dates and ``recently_modified``.
        ``None`` reads the wall clock on every call.
    recent_days:
        Look-back window of the ``recently_modified`` special filter.
    """

    def __init__(self, now: datetime | None = None, recent_days: int = RECENT_DAYS) -> None:
        self._now = now
        self._recent_days = recent_days

    def execute(
        self,
        query: PanelQuery,
        objects: Sequence[AstralObject],
        types: Sequence[ObjectType],
    ) -> list[AstralObject]:
        """Run ``query`` and return the matching objects in sort order."""
        now = resolve_now(self._now)
        catalog = TypeCatalog(types)
        result = list(objects)

        if query.types:
            wanted = set(query.types)
            result = [obj for obj in result if obj.type in wanted]
            logger.debug("Type filter %s kept %d object(s)", sorted(wanted), len(result))

        if query.special_filter is not None:
            predicate = special_filter_predicate(
                query.special_filter, catalog, now, self._recent_days
            )
            result = [obj for obj in result if predicate(obj)]
            logger.debug("Special filter %s kept %d object(s)", query.special_filter, len(result))

        for flt in query.property_filters:
            result = [obj for obj in result if matches_filter(obj, flt, catalog, now)]
        if query.property_filters:
            logger.debug(
                "%d property filter(s) kept %d object(s)", len(query.property_filters), len(result)
            )

        if query.date_range is not None:
            date_range = query.date_range
            result = [obj for obj in result if matches_date_range(obj, date_range, catalog, now)]
            logger.debug("Date range on %r kept %d object(s)", date_range.field, len(result))

        return sort_objects(result, query.sort_by, query.sort_direction)


def _sort_key(obj: AstralObject, sort_by: str) -> tuple[int, Any] | None:
    if sort_by == "updatedAt":
        return _KIND_DATE, obj.updated_at
    if sort_by == "createdAt":
        return _KIND_DATE, obj.created_at
    if sort_by == "title":
        title = fold_text(obj.title)
        return (_KIND_TEXT, title) if title else None

    value = obj.properties.get(sort_by)
    if is_empty_value(value):
        return None
    if isinstance(value, DateValue):
        return _KIND_DATE, value.value
    if isinstance(value, NumberValue):
        return _KIND_NUMBER, value.value
    if isinstance(value, BoolValue):
        return _KIND_NUMBER, float(value.value)
    if isinstance(value, (TextValue, StringListValue, RelationValue)):
        return _KIND_TEXT, fold_text(value.display())
    return None


def sort_objects(
    objects: Sequence[AstralObject],
    sort_by: str = "updatedAt",
    direction: SortDirection | str = SortDirection.DESC,
) -> list[AstralObject]:
    """Stable sort; objects without a value for ``sort_by`` go last."""
    descending = SortDirection(direction) is SortDirection.DESC
    keyed: list[tuple[tuple[int, Any], AstralObject]] = []
    missing: list[AstralObject] = []
    for obj in objects:
        key = _sort_key(obj, sort_by)
        if key is None:
            missing.append(obj)
        else:
            keyed.append((key, obj))
    keyed.sort(key=lambda pair: pair[0], reverse=descending)
    return [obj for _key, obj in keyed] + missing


def execute_query(
    query: PanelQuery,
    objects: Sequence[AstralObject],
    types: Sequence[ObjectType],
    now: datetime | None = None,
) -> list[AstralObject]:
    """Convenience function: run ``query`` with a one-off ``QueryEngine``."""
    return QueryEngine(now=now).execute(query, objects, types)
