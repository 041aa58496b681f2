"""Search & Ranker module.

Exports the ``SearchEngine`` class, its option/weight records, the
inline query-syntax parser, and the grouping and tag-inventory helpers.
"""
from __future__ import annotations

from astral_engine.ranking.ranker import (
    SearchEngine,
    SearchOptions,
    SearchWeights,
    get_all_tags,
    group_results_by_type,
    search,
)
from astral_engine.ranking.syntax import ParsedQuery, parse_query_syntax

__all__ = [
    "SearchEngine",
    "SearchOptions",
    "SearchWeights",
    "get_all_tags",
    "group_results_by_type",
    "search",
    "ParsedQuery",
    "parse_query_syntax",
]
