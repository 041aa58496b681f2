"""Relation autocomplete for the quick-entry line.

While the user types a value after ``>`` and ``=``, the engine proposes
existing objects whose titles contain the partial value.  Inside a list
value (``[a, b`` or ``a, b``) only the text after the last comma counts.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

from astral_engine.command.coercion import resolve_property
from astral_engine.command.parser import CommandScanner, ParseState
from astral_engine.model.objects import AstralObject, ObjectType, PropertyType, TypeCatalog
from astral_engine.model.results import RelationSuggestion, RelationSuggestionContext
from astral_engine.model.text import fold_text

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT: Final[int] = 8


def _partial_start(text: str, value_start: int) -> int:
    """Offset where the partial item begins within the value region."""
    start = _skip_spaces(text, value_start)
    if text[start : start + 1] == "[":
        start += 1
    comma = text.rfind(",", start)
    if comma != -1:
        start = comma + 1
    return _skip_spaces(text, start)


def _skip_spaces(text: str, start: int) -> int:
    while start < len(text) and text[start].isspace():
        start += 1
    return start


def get_relation_suggestions(
    text: str,
    types: Sequence[ObjectType],
    objects: Sequence[AstralObject],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    cursor: int | None = None,
) -> RelationSuggestionContext | None:
    """Suggest relation targets for the value under the cursor.

    Parameters
    ----------
    text:
        The quick-entry line.
    types:
        Current type snapshot.
    objects:
        Candidate objects.
    limit:
        Maximum number of suggestions.
    cursor:
        Caret offset; defaults to the end of ``text``.  Only the text before
        the cursor is considered.

    Returns
    -------
    RelationSuggestionContext | None
        ``None`` unless the cursor sits in an unfinished value whose property
        is relation-typed or does not resolve.
    """
    head = text if cursor is None else text[: max(0, min(cursor, len(text)))]
    scanner = CommandScanner(head)
    if scanner.scan() is None or scanner.state is not ParseState.SCANNING_VALUE:
        return None
    if "]" in head[scanner.segment_start :]:
        return None

    catalog = TypeCatalog(types)
    property_name = scanner.pending_property or ""
    object_type = catalog.resolve(scanner.type_token)
    definition = resolve_property(object_type, property_name) if object_type else None
    if definition is not None and definition.type is not PropertyType.RELATION:
        return None

    insert_position = _partial_start(head, scanner.segment_start)
    partial_value = head[insert_position:].strip()
    if partial_value.startswith("@"):
        partial_value = partial_value[1:]
    folded = fold_text(partial_value)

    candidates = list(objects)
    if definition is not None and definition.relation_type_id:
        candidates = [obj for obj in candidates if obj.type == definition.relation_type_id]
    if folded:
        candidates = [obj for obj in candidates if folded in fold_text(obj.title)]

    # Two stable passes: recency first, then prefix matches ahead of the rest.
    candidates.sort(key=lambda obj: obj.updated_at, reverse=True)
    candidates.sort(key=lambda obj: not fold_text(obj.title).startswith(folded))

    suggestions: list[RelationSuggestion] = []
    for obj in candidates[: max(0, limit)]:
        target_type = catalog.get(obj.type)
        suggestions.append(
            RelationSuggestion(
                id=obj.id,
                title=obj.title,
                type_id=obj.type,
                type_name=target_type.name if target_type else None,
                type_color=(target_type.color or None) if target_type else None,
            )
        )
    logger.debug("%d relation suggestion(s) for %r", len(suggestions), partial_value)
    return RelationSuggestionContext(
        insert_position=insert_position,
        suggestions=tuple(suggestions),
        property_name=property_name,
        partial_value=partial_value,
    )
