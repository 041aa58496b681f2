"""Coercion of raw ``name = value`` strings into typed property values.

``convert_property_values`` is the single, centralised coercion table for
quick-entry input.  Each raw pair is matched to a ``PropertyDefinition`` of
the target type and its value is converted according to the property kind:

==============  ==========================================================
kind            rule
==============  ==========================================================
date/datetime   semantic token (``@hoy`` or ``hoy``), ISO 8601,
                ``DD/MM/YYYY`` or ``DD-MM-YYYY``
boolean         ``sí si true 1 yes`` / ``no false 0``
select          folded match against the declared options
relation        titles of existing objects, optionally as ``[a, b]``
number          locale-aware: ``1.234,5``, ``1,234.5``, ``3,5``, ``1.500``
text            trimmed text
stringList      comma-separated items, optionally in brackets
==============  ==========================================================

A value that cannot be converted is kept as a ``TextValue`` holding the raw
text and a Spanish, user-facing warning is emitted.  Unresolved relation
titles are the exception: they stay raw without a warning, because the
user is expected to pick one from the relation suggestions.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final

from astral_engine.dates.semantic import parse_user_date
from astral_engine.model.objects import AstralObject, ObjectType, PropertyDefinition, PropertyType
from astral_engine.model.text import fold_text, truncate
from astral_engine.model.values import (
    BOOLEAN_FALSE_TOKENS,
    BOOLEAN_TRUE_TOKENS,
    BoolValue,
    DateValue,
    NumberValue,
    PropertyValue,
    RelationRef,
    RelationValue,
    StringListValue,
    TextValue,
)

logger = logging.getLogger(__name__)

PREVIEW_VALUE_WIDTH: Final[int] = 30

_NUMBER_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
# One separator followed by exactly three digits groups thousands ("1.500").
_THOUSANDS_GROUP_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?[1-9]\d{0,2}[.,]\d{3}$")

# A fuzzy property-name match needs at least this many folded characters.
_MIN_FUZZY_LENGTH: Final[int] = 3


@dataclass(frozen=True, slots=True)
class ConvertedProperties:
    """Typed values keyed by property id plus user-facing warnings."""

    properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Property name resolution
# ---------------------------------------------------------------------------


def resolve_property(object_type: ObjectType, token: str) -> PropertyDefinition | None:
    """Resolve a user-typed property name against ``object_type``.

    An exact folded match on id or name wins.  Otherwise a unique property
    whose folded id or name contains the token, or is contained in it,
    is accepted (``organizacion`` finds ``Organizaciones``).
    """
    exact = object_type.find_property(token)
    if exact is not None:
        return exact
    folded = fold_text(token)
    if len(folded) < _MIN_FUZZY_LENGTH:
        return None
    candidates = [
        prop
        for prop in object_type.properties
        if any(
            folded in key or key in folded
            for key in (fold_text(prop.id), fold_text(prop.name))
            if len(key) >= _MIN_FUZZY_LENGTH
        )
    ]
    return candidates[0] if len(candidates) == 1 else None


# ---------------------------------------------------------------------------
# Scalar parsers
# ---------------------------------------------------------------------------


def parse_locale_number(text: str) -> float | None:
    """Parse a number written with Spanish or English separators.

    With both ``.`` and ``,`` present, the last one is the decimal mark.
    A single separator of either kind followed by exactly three digits,
    after a non-zero integer part, groups thousands (``1.500`` and
    ``1,500`` are both 1500); any other single separator is a decimal
    mark.  Several commas or several dots group thousands.
    """
    cleaned = text.strip().replace(" ", "").replace("\u00a0", "")
    if not cleaned:
        return None
    commas = cleaned.count(",")
    dots = cleaned.count(".")

    if commas and dots:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif _THOUSANDS_GROUP_RE.match(cleaned):
        cleaned = cleaned.replace(",", "").replace(".", "")
    elif commas == 1:
        cleaned = cleaned.replace(",", ".")
    elif commas > 1:
        cleaned = cleaned.replace(",", "")
    elif dots > 1:
        cleaned = cleaned.replace(".", "")

    if not _NUMBER_RE.match(cleaned):
        return None
    return float(cleaned)


def split_list(text: str) -> list[str]:
    """Split ``a, b`` or ``[a, b]`` into trimmed, non-empty items."""
    stripped = text.strip()
    if stripped.startswith("[") and stripped.endswith("]"):
        stripped = stripped[1:-1]
    return [item.strip() for item in stripped.split(",") if item.strip()]


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


# ---------------------------------------------------------------------------
# Relation resolution
# ---------------------------------------------------------------------------


def _find_by_title(candidates: Sequence[AstralObject], fragment: str) -> AstralObject | None:
    """Exact folded title first, else a unique title containing ``fragment``."""
    folded = fold_text(fragment)
    if not folded:
        return None
    for obj in candidates:
        if fold_text(obj.title) == folded:
            return obj
    partial = [obj for obj in candidates if folded in fold_text(obj.title)]
    return partial[0] if len(partial) == 1 else None


def resolve_relation_target(
    fragment: str,
    definition: PropertyDefinition,
    objects: Sequence[AstralObject],
) -> AstralObject | None:
    """Resolve a title fragment, preferring the property's target type."""
    fragment = fragment.strip()
    if fragment.startswith("@"):
        fragment = fragment[1:]
    if definition.relation_type_id:
        compatible = [obj for obj in objects if obj.type == definition.relation_type_id]
        found = _find_by_title(compatible, fragment)
        if found is not None:
            return found
    return _find_by_title(objects, fragment)


# ---------------------------------------------------------------------------
# Coercion table
# ---------------------------------------------------------------------------


class _Unconvertible(Exception):
    """Internal signal: keep the raw text and report ``message``."""

    def __init__(self, message: str | None) -> None:
        super().__init__(message or "")
        self.message = message


def _coerce(
    raw: str,
    definition: PropertyDefinition,
    objects: Sequence[AstralObject],
    now: datetime | None,
) -> PropertyValue:
    kind = definition.type

    if kind.is_temporal:
        parsed = parse_user_date(raw, now)
        if parsed is None:
            raise _Unconvertible(f'{definition.name}: "{raw}" no es una fecha válida')
        if kind is PropertyType.DATE:
            parsed = parsed.replace(hour=0, minute=0, second=0, microsecond=0)
        return DateValue(parsed)

    if kind is PropertyType.BOOLEAN:
        folded = fold_text(raw)
        if folded in BOOLEAN_TRUE_TOKENS:
            return BoolValue(True)
        if folded in BOOLEAN_FALSE_TOKENS:
            return BoolValue(False)
        raise _Unconvertible(f'{definition.name}: "{raw}" no es un valor booleano válido')

    if kind is PropertyType.NUMBER:
        number = parse_locale_number(raw)
        if number is None:
            raise _Unconvertible(f'{definition.name}: "{raw}" no es un número válido')
        return NumberValue(number)

    if kind is PropertyType.SELECT:
        if not definition.options:
            return TextValue(raw)
        folded = fold_text(raw)
        for option in definition.options:
            if fold_text(option) == folded:
                return TextValue(option)
        raise _Unconvertible(f'{definition.name}: "{raw}" no es una opción válida')

    if kind is PropertyType.RELATION:
        refs: list[RelationRef] = []
        for fragment in split_list(raw):
            target = resolve_relation_target(fragment, definition, objects)
            if target is None:
                logger.debug("Relation %r left unresolved for %r", fragment, definition.id)
                raise _Unconvertible(None)
            refs.append(RelationRef(id=target.id, title=target.title))
        return RelationValue(tuple(refs))

    if kind is PropertyType.STRING_LIST:
        return StringListValue(tuple(split_list(raw)))

    return TextValue(raw)


def convert_property_values(
    raw_properties: Mapping[str, str],
    object_type: ObjectType | None,
    objects: Sequence[AstralObject],
    now: datetime | None = None,
) -> ConvertedProperties:
    """Convert raw ``name -> value`` strings into typed values.

    Parameters
    ----------
    raw_properties:
        Property names and values exactly as typed.
    object_type:
        Target schema.  ``None`` yields no typed properties.
    objects:
        Snapshot used to resolve relation titles.
    now:
        Evaluation time for semantic date tokens.

    Returns
    -------
    ConvertedProperties
        Typed values keyed by property id, and warnings in input order.
    """
    if object_type is None:
        return ConvertedProperties()

    properties: dict[str, PropertyValue] = {}
    warnings: list[str] = []
    for name, raw_value in raw_properties.items():
        definition = resolve_property(object_type, name)
        if definition is None:
            warnings.append(f'Propiedad desconocida: "{name.strip()}"')
            continue
        value = _strip_quotes(raw_value.strip())
        if not value:
            continue
        try:
            properties[definition.id] = _coerce(value, definition, objects, now)
        except _Unconvertible as exc:
            properties[definition.id] = TextValue(value)
            if exc.message:
                warnings.append(exc.message)
    return ConvertedProperties(properties=properties, warnings=tuple(warnings))


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


def format_properties_preview(
    raw_properties: Mapping[str, str],
    object_type: ObjectType | None,
) -> str:
    """Return ``"Prop: value, Prop2: value2"`` for display under the input.

    Property names are shown with their display name when they resolve;
    each value is truncated to ``PREVIEW_VALUE_WIDTH`` characters.
    """
    parts: list[str] = []
    for name, raw_value in raw_properties.items():
        display_name = name.strip()
        if object_type is not None:
            definition = resolve_property(object_type, name)
            if definition is not None:
                display_name = definition.name
        value = _strip_quotes(raw_value.strip())
        parts.append(f"{display_name}: {truncate(value, PREVIEW_VALUE_WIDTH)}")
    return ", ".join(parts)
