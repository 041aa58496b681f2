"""Semantic date module.

Exports clock helpers, the ``DateRange`` type and the token resolvers.
"""
from __future__ import annotations

from astral_engine.dates.semantic import (
    SEMANTIC_TOKENS,
    DateRange,
    is_semantic_token,
    parse_user_date,
    parse_user_range,
    resolve_now,
    resolve_semantic_range,
    to_naive,
    week_start,
)

__all__ = [
    "SEMANTIC_TOKENS",
    "DateRange",
    "is_semantic_token",
    "parse_user_date",
    "parse_user_range",
    "resolve_now",
    "resolve_semantic_range",
    "to_naive",
    "week_start",
]
