"""Result records returned by the search ranker and the command parser."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from astral_engine.model.objects import AstralObject, ObjectType
from astral_engine.model.values import PropertyValue


class MatchField(str, Enum):
    """Which part of an object a search term matched."""

    TITLE = "title"
    TAG = "tag"
    PROPERTY = "property"
    CONTENT = "content"


@dataclass(frozen=True, slots=True)
class SearchMatch:
    """A single highlighted match.

    ``match_start`` and ``match_end`` index into ``context``.
    """

    field: MatchField
    term: str
    context: str
    match_start: int
    match_end: int
    property_id: str | None = None

    @property
    def matched_text(self) -> str:
        return self.context[self.match_start:self.match_end]


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A ranked search hit."""

    object: AstralObject
    score: float
    matches: tuple[SearchMatch, ...] = ()


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    """A create-or-update intent parsed from the quick-entry micro-syntax.

    Parameters
    ----------
    type:
        The resolved object type, or ``None`` if the type token did not
        resolve to exactly one type.
    name:
        Trimmed object name.
    properties:
        Typed values keyed by property id (resolved properties only).
    raw_properties:
        Every ``name = value`` pair exactly as typed.
    is_update:
        True when an object of the resolved type already has this title.
    existing_object_id:
        Id of that object when ``is_update`` is True.
    warnings:
        Soft, user-facing messages about unresolved names or values.
    """

    type: ObjectType | None
    name: str
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    raw_properties: Mapping[str, str] = field(default_factory=dict)
    is_update: bool = False
    existing_object_id: str | None = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RelationSuggestion:
    """An autocomplete candidate for a relation-valued property."""

    id: str
    title: str
    type_id: str
    type_name: str | None = None
    type_color: str | None = None


@dataclass(frozen=True, slots=True)
class RelationSuggestionContext:
    """Relation autocomplete state for the current input.

    ``insert_position`` is the offset in the input where the partial value
    starts; a consumer replaces ``text[insert_position:]`` with the chosen
    title.
    """

    insert_position: int
    suggestions: tuple[RelationSuggestion, ...]
    property_name: str
    partial_value: str
