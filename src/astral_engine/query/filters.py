"""Predicate evaluation for panel queries.

Three families of predicates live here:

* **Property filters**: ``PropertyFilter(property_id, operator, value)``.
  Evaluation never raises: an unknown property id or a filter value that
  cannot be read as the property's kind makes the predicate false, which
  excludes the object.
* **Special filters**: the named predicates ``orphans``, ``inbox``,
  ``recently_modified`` and ``favorites``.
* **Date ranges**: ``DateRangeFilter(field, start, end)`` keeps objects
  whose date in ``field`` lies within the inclusive bounds.

Besides schema properties, the pseudo-properties ``title``, ``type``,
``createdAt`` and ``updatedAt`` are filterable on every object.

Date comparisons go through ``DateRange``: a semantic token such as
``@esta_semana`` or a plain date covers a whole inclusive interval, so
``equals`` tests membership, ``gt`` means "after the end" and ``lt``
"before the start".
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

from astral_engine.dates.semantic import DateRange, parse_user_date, parse_user_range
from astral_engine.model.clock import to_naive
from astral_engine.model.objects import AstralObject, PropertyDefinition, PropertyType, TypeCatalog
from astral_engine.model.panels import (
    DateRangeFilter,
    FilterOperator,
    FilterValue,
    PropertyFilter,
    SpecialFilter,
)
from astral_engine.model.text import fold_text
from astral_engine.model.values import (
    BOOLEAN_FALSE_TOKENS,
    BOOLEAN_TRUE_TOKENS,
    BoolValue,
    DateValue,
    NumberValue,
    PropertyValue,
    RelationValue,
    StringListValue,
    TextValue,
    is_empty_value,
)
from astral_engine.query.heuristics import (
    DAILY_NOTE_TYPE_IDS,
    DAILY_NOTE_TYPE_NAMES,
    TRUTHY_TOKENS,
    is_favorite_property_name,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Value readers
# ---------------------------------------------------------------------------


def _lookup(
    obj: AstralObject,
    property_id: str,
    catalog: TypeCatalog,
) -> tuple[bool, PropertyValue | None, PropertyDefinition | None]:
    """Return ``(known, value, definition)`` for a property of ``obj``."""
    if property_id == "title":
        return True, TextValue(obj.title), None
    if property_id == "type":
        return True, TextValue(obj.type), None
    if property_id == "createdAt":
        return True, DateValue(obj.created_at), None
    if property_id == "updatedAt":
        return True, DateValue(obj.updated_at), None
    definition = catalog.property_for(obj, property_id)
    value = obj.properties.get(property_id)
    known = definition is not None or property_id in obj.properties
    if value is not None and definition is not None:
        value = _align_with_definition(value, definition)
    return known, value, definition


def _align_with_definition(value: PropertyValue, definition: PropertyDefinition) -> PropertyValue:
    """Read stale text values as the kind the schema now declares."""
    if not isinstance(value, TextValue):
        return value
    if definition.type is PropertyType.NUMBER:
        number = to_number(value.value)
        return NumberValue(number) if number is not None else value
    if definition.type.is_temporal:
        parsed = parse_user_date(value.value)
        return DateValue(parsed) if parsed is not None else value
    if definition.type is PropertyType.BOOLEAN:
        flag = to_bool(value.value)
        return BoolValue(flag) if flag is not None else value
    return value


def _raw(value: FilterValue) -> object:
    if isinstance(value, (TextValue, NumberValue, BoolValue, DateValue)):
        return value.value
    if isinstance(value, StringListValue):
        return ", ".join(value.items)
    if isinstance(value, RelationValue):
        return ", ".join(ref.title for ref in value.refs)
    return value


def to_number(raw: object) -> float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            return float(raw.strip().replace(",", "."))
        except ValueError:
            return None
    return None


def to_bool(raw: object) -> bool | None:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    if isinstance(raw, str):
        folded = fold_text(raw)
        if folded in BOOLEAN_TRUE_TOKENS:
            return True
        if folded in BOOLEAN_FALSE_TOKENS:
            return False
    return None


def to_range(raw: object, now: datetime) -> DateRange | None:
    if isinstance(raw, datetime):
        moment = to_naive(raw)
        return DateRange(moment, moment)
    if isinstance(raw, date):
        return DateRange.for_day(raw)
    if isinstance(raw, str):
        return parse_user_range(raw, now)
    return None


# ---------------------------------------------------------------------------
# Property filters
# ---------------------------------------------------------------------------


def _equals(value: PropertyValue | None, expected: object, now: datetime) -> bool | None:
    """Equality test; ``None`` means the expected value is unreadable."""
    if expected is None:
        return value is None
    if value is None:
        return False
    if isinstance(value, DateValue):
        window = to_range(expected, now)
        return None if window is None else window.contains(value.value)
    if isinstance(value, NumberValue):
        number = to_number(expected)
        return None if number is None else value.value == number
    if isinstance(value, BoolValue):
        flag = to_bool(expected)
        return None if flag is None else value.value == flag
    wanted = fold_text(str(expected))
    if isinstance(value, TextValue):
        return fold_text(value.value) == wanted
    if isinstance(value, StringListValue):
        return any(fold_text(item) == wanted for item in value.items)
    if isinstance(value, RelationValue):
        return any(ref.id == str(expected) or fold_text(ref.title) == wanted for ref in value.refs)
    return None


def _contains(value: PropertyValue | None, expected: object) -> bool:
    if value is None or expected is None:
        return False
    wanted = fold_text(str(expected))
    if isinstance(value, TextValue):
        return wanted in fold_text(value.value)
    if isinstance(value, StringListValue):
        return any(fold_text(item) == wanted for item in value.items)
    if isinstance(value, RelationValue):
        return any(ref.id == str(expected) or wanted in fold_text(ref.title) for ref in value.refs)
    return False


def _compare(
    value: PropertyValue | None,
    expected: object,
    operator: FilterOperator,
    now: datetime,
) -> bool:
    if isinstance(value, NumberValue):
        number = to_number(expected)
        if number is None:
            return False
        return {
            FilterOperator.GT: value.value > number,
            FilterOperator.LT: value.value < number,
            FilterOperator.GTE: value.value >= number,
            FilterOperator.LTE: value.value <= number,
        }[operator]
    if isinstance(value, DateValue):
        window = to_range(expected, now)
        if window is None:
            return False
        moment = value.value
        return {
            FilterOperator.GT: moment > window.end,
            FilterOperator.LT: moment < window.start,
            FilterOperator.GTE: moment >= window.start,
            FilterOperator.LTE: moment <= window.end,
        }[operator]
    return False


def matches_filter(
    obj: AstralObject,
    flt: PropertyFilter,
    catalog: TypeCatalog,
    now: datetime,
) -> bool:
    """Evaluate one property filter against ``obj``.

    Returns ``False`` (exclude) for unknown properties and unreadable
    filter values instead of raising.
    """
    known, value, _definition = _lookup(obj, flt.property_id, catalog)
    if not known:
        return False

    try:
        operator = FilterOperator(flt.operator)
    except ValueError:
        logger.debug("Unknown filter operator %r on %r", flt.operator, flt.property_id)
        return False
    expected = _raw(flt.value)

    if operator is FilterOperator.IS_EMPTY:
        return is_empty_value(value)
    if operator is FilterOperator.NOT_EMPTY:
        return not is_empty_value(value)
    if operator is FilterOperator.EQUALS:
        return _equals(value, expected, now) is True
    if operator is FilterOperator.NOT_EQUALS:
        return _equals(value, expected, now) is False
    if operator is FilterOperator.CONTAINS:
        return _contains(value, expected)
    return _compare(value, expected, operator, now)


def matches_date_range(
    obj: AstralObject,
    date_range: DateRangeFilter,
    catalog: TypeCatalog,
    now: datetime,
) -> bool:
    """Test ``obj`` against the inclusive bounds of ``date_range``.

    Objects without a date in ``date_range.field`` pass.  A bound that
    cannot be read as a date excludes every object.
    """
    _known, value, _definition = _lookup(obj, date_range.field, catalog)
    if not isinstance(value, DateValue):
        return True
    moment = value.value
    if date_range.start is not None:
        window = to_range(date_range.start, now)
        if window is None or moment < window.start:
            return False
    if date_range.end is not None:
        window = to_range(date_range.end, now)
        if window is None or moment > window.end:
            return False
    return True


# ---------------------------------------------------------------------------
# Special filters
# ---------------------------------------------------------------------------


def is_daily_note(obj: AstralObject, catalog: TypeCatalog) -> bool:
    object_type = catalog.get(obj.type)
    if fold_text(obj.type) in DAILY_NOTE_TYPE_IDS:
        return True
    return object_type is not None and fold_text(object_type.name) in DAILY_NOTE_TYPE_NAMES


def _is_truthy(value: PropertyValue | None) -> bool:
    if isinstance(value, BoolValue):
        return value.value
    if isinstance(value, TextValue):
        return fold_text(value.value) in TRUTHY_TOKENS
    return False


def is_favorite(obj: AstralObject, catalog: TypeCatalog) -> bool:
    """Heuristic: any favourite-named property holds a truthy value."""
    object_type = catalog.get(obj.type)
    for key, value in obj.properties.items():
        definition = object_type.property_by_id(key) if object_type else None
        names = (key,) if definition is None else (definition.id, definition.name)
        if any(is_favorite_property_name(fold_text(n)) for n in names) and _is_truthy(value):
            return True
    return False


def special_filter_predicate(
    special: SpecialFilter,
    catalog: TypeCatalog,
    now: datetime,
    recent_days: int,
) -> Callable[[AstralObject], bool]:
    """Return the predicate implementing ``special``."""
    special = SpecialFilter(special)
    if special is SpecialFilter.ORPHANS:
        return lambda obj: not obj.backlinks and not obj.tags and not is_daily_note(obj, catalog)
    if special is SpecialFilter.INBOX:
        return lambda obj: not obj.tags and not obj.links and not obj.backlinks
    if special is SpecialFilter.RECENTLY_MODIFIED:
        cutoff = now - timedelta(days=recent_days)
        return lambda obj: obj.updated_at >= cutoff
    return lambda obj: is_favorite(obj, catalog)
