"""astral-engine — query, ranking and command interpretation for a personal knowledge base.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Every operation is a pure function of the snapshot it is given
(``objects``, ``types`` and, where dates matter, ``now``).

Example
-------
::

    import astral_engine

    # Ranked search with inline filters
    results = astral_engine.search(objects, types, "pan #compras /tarea")
    groups = astral_engine.group_results_by_type(results, types)

    # Dashboard panels
    inbox = astral_engine.execute_query(PanelQuery(special_filter="inbox"), objects, types)
    slices = astral_engine.generate_chart_data(panel, objects, types)

    # Quick-entry commands
    command = astral_engine.parse_command("@tarea/Comprar pan > fecha = @mañana", types, objects)

    astral_engine.__version__
    '0.1.0'
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from astral_engine.command.coercion import ConvertedProperties
    from astral_engine.model.objects import AstralObject, ObjectType
    from astral_engine.model.panels import (
        ChartDataPoint,
        DashboardPanel,
        PanelQuery,
        TimelineDataPoint,
    )
    from astral_engine.model.results import (
        ParsedCommand,
        RelationSuggestionContext,
        SearchResult,
    )
    from astral_engine.ranking.ranker import SearchOptions


def search(
    objects: Sequence["AstralObject"],
    types: Sequence["ObjectType"],
    options: "SearchOptions | str",
) -> list["SearchResult"]:
    """Rank ``objects`` against a query.

    Parameters
    ----------
    objects:
        The object snapshot.
    types:
        The type snapshot.
    options:
        A ``SearchOptions`` record, or a bare query string such as
        ``"pan #compras /tarea estado:pendiente"``.

    Returns
    -------
    list[SearchResult]
        Results by score descending, ties by most recently updated.
    """
    from astral_engine.ranking.ranker import search as _search

    return _search(objects, types, options)


def group_results_by_type(
    results: Sequence["SearchResult"],
    types: Sequence["ObjectType"],
) -> dict[str, list["SearchResult"]]:
    """Partition search results by type id, groups ordered by type name."""
    from astral_engine.ranking.ranker import group_results_by_type as _group

    return _group(results, types)


def get_all_tags(objects: Sequence["AstralObject"]) -> list[str]:
    """Return the distinct tags of ``objects``, most frequent first."""
    from astral_engine.ranking.ranker import get_all_tags as _get_all_tags

    return _get_all_tags(objects)


def execute_query(
    query: "PanelQuery",
    objects: Sequence["AstralObject"],
    types: Sequence["ObjectType"],
    now: datetime | None = None,
) -> list["AstralObject"]:
    """Evaluate a panel query.

    Parameters
    ----------
    query:
        Type, special and property filters plus sort order.
    objects:
        The object snapshot.
    types:
        The type snapshot.
    now:
        Evaluation time for semantic dates; defaults to the wall clock.

    Returns
    -------
    list[AstralObject]
        Matching objects in sort order.
    """
    from astral_engine.query.engine import execute_query as _execute_query

    return _execute_query(query, objects, types, now=now)


def generate_chart_data(
    panel: "DashboardPanel",
    objects: Sequence["AstralObject"],
    types: Sequence["ObjectType"],
    now: datetime | None = None,
) -> "list[ChartDataPoint] | list[TimelineDataPoint]":
    """Aggregate a chart-mode panel's query result into data points."""
    from astral_engine.query.charts import generate_chart_data as _generate

    return _generate(panel, objects, types, now=now)


def parse_command(
    text: str,
    types: Sequence["ObjectType"],
    objects: Sequence["AstralObject"],
    now: datetime | None = None,
) -> "ParsedCommand | None":
    """Parse a ``@type/name > prop = value`` command.

    Returns ``None`` when ``text`` is not a well-formed command, in which
    case the caller treats it as ordinary search text.
    """
    from astral_engine.command.parser import parse_command as _parse_command

    return _parse_command(text, types, objects, now=now)


def convert_property_values(
    raw_properties: Mapping[str, str],
    object_type: "ObjectType | None",
    objects: Sequence["AstralObject"],
    now: datetime | None = None,
) -> "ConvertedProperties":
    """Coerce raw property strings into typed values plus warnings."""
    from astral_engine.command.coercion import convert_property_values as _convert

    return _convert(raw_properties, object_type, objects, now=now)


def format_properties_preview(
    raw_properties: Mapping[str, str],
    object_type: "ObjectType | None",
) -> str:
    """Return a one-line ``"Prop: value, …"`` preview of raw properties."""
    from astral_engine.command.coercion import format_properties_preview as _preview

    return _preview(raw_properties, object_type)


def get_relation_suggestions(
    text: str,
    types: Sequence["ObjectType"],
    objects: Sequence["AstralObject"],
    limit: int = 8,
    cursor: int | None = None,
) -> "RelationSuggestionContext | None":
    """Suggest relation targets while a command value is being typed."""
    from astral_engine.command.suggestions import get_relation_suggestions as _suggest

    return _suggest(text, types, objects, limit=limit, cursor=cursor)


__all__ = [
    "__version__",
    "search",
    "group_results_by_type",
    "get_all_tags",
    "execute_query",
    "generate_chart_data",
    "parse_command",
    "convert_property_values",
    "format_properties_preview",
    "get_relation_suggestions",
]
