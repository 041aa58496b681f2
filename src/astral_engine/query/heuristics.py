"""Heuristic tables and policy constants for the query engine.

The favourite and status checks match property names and values against
synonym lists.  They are fuzzy by construction and kept here, in one
place, as a known heuristic.  Every entry is written in folded form
(lower case, no accents) because lookups fold their input first.
"""
from __future__ import annotations

from typing import Final

# A property whose folded name or id *contains* one of these marks favourites.
FAVORITE_PROPERTY_NAMES: Final[tuple[str, ...]] = (
    "favorito",
    "favorite",
    "isfavorite",
    "fav",
    "starred",
    "destacado",
)

# Text values that count as "true" for favourite-like flags.
TRUTHY_TOKENS: Final[frozenset[str]] = frozenset({"true", "si", "yes", "1"})

# The daily-note type is recognised by id or by display name.
DAILY_NOTE_TYPE_IDS: Final[frozenset[str]] = frozenset({"daily", "daily_note", "nota_diaria"})
DAILY_NOTE_TYPE_NAMES: Final[frozenset[str]] = frozenset({"nota diaria", "daily note"})

# Status values treated as "completed" when a progress chart names none.
COMPLETED_STATUS_VALUES: Final[frozenset[str]] = frozenset(
    {"completada", "completado", "hecha", "hecho", "terminada", "terminado", "done", "completed"}
)
DEFAULT_PROGRESS_PROPERTY: Final[str] = "status"

# recently_modified looks back this many days from "now".
RECENT_DAYS: Final[int] = 7

# Pie and bar charts keep this many buckets; the rest fold into OTHER_BUCKET.
MAX_CHART_BUCKETS: Final[int] = 8
OTHER_BUCKET_LABEL: Final[str] = "Otros"
OTHER_BUCKET_COLOR: Final[str] = "#94a3b8"
EMPTY_BUCKET_LABEL: Final[str] = "Sin valor"

PROGRESS_DONE_LABEL: Final[str] = "Completado"
PROGRESS_PENDING_LABEL: Final[str] = "Pendiente"
PROGRESS_DONE_COLOR: Final[str] = "#22c55e"
PROGRESS_PENDING_COLOR: Final[str] = "#e5e7eb"

DEFAULT_PALETTE: Final[tuple[str, ...]] = (
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#f43f5e",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#10b981",
    "#06b6d4",
    "#3b82f6",
)


def is_favorite_property_name(token: str) -> bool:
    """Return True if the folded ``token`` contains a favourite synonym."""
    return any(name in token for name in FAVORITE_PROPERTY_NAMES)
