"""Property values: a tagged union keyed by ``PropertyDefinition.type``.

Every value stored in ``AstralObject.properties`` is one of the frozen
variants below.  Downstream code dispatches with ``isinstance`` checks,
the same way the rest of the engine treats other union types.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from astral_engine.model.clock import to_naive


@dataclass(frozen=True, slots=True)
class TextValue:
    """A free-text or select value."""

    value: str

    def display(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class NumberValue:
    """A numeric value (integers are stored as floats)."""

    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    def display(self) -> str:
        if self.value.is_integer():
            return str(int(self.value))
        return str(self.value)


@dataclass(frozen=True, slots=True)
class BoolValue:
    """A boolean flag."""

    value: bool

    def display(self) -> str:
        return "sí" if self.value else "no"


@dataclass(frozen=True, slots=True)
class DateValue:
    """A date or date-time.  Date-only values sit at midnight."""

    value: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", to_naive(self.value))

    def display(self) -> str:
        if (self.value.hour, self.value.minute, self.value.second) == (0, 0, 0):
            return self.value.date().isoformat()
        return self.value.isoformat(timespec="minutes")


@dataclass(frozen=True, slots=True)
class StringListValue:
    """An ordered list of strings (multi-select, tag lists)."""

    items: tuple[str, ...]

    def display(self) -> str:
        return ", ".join(self.items)


@dataclass(frozen=True, slots=True)
class RelationRef:
    """A resolved link to another object."""

    id: str
    title: str


@dataclass(frozen=True, slots=True)
class RelationValue:
    """One or more resolved links to other objects."""

    refs: tuple[RelationRef, ...]

    def display(self) -> str:
        return ", ".join(ref.title for ref in self.refs)


PropertyValue = Union[
    TextValue,
    NumberValue,
    BoolValue,
    DateValue,
    StringListValue,
    RelationValue,
]


def is_empty_value(value: PropertyValue | None) -> bool:
    """Return True for missing values, blank text and empty lists."""
    if value is None:
        return True
    if isinstance(value, TextValue):
        return value.value.strip() == ""
    if isinstance(value, StringListValue):
        return len(value.items) == 0
    if isinstance(value, RelationValue):
        return len(value.refs) == 0
    return False


def value_to_text(value: PropertyValue) -> str:
    """Stringify a value for free-text matching and chart bucketing."""
    return value.display()


# Folded user tokens accepted for boolean values.
BOOLEAN_TRUE_TOKENS = frozenset({"si", "true", "1", "yes"})
BOOLEAN_FALSE_TOKENS = frozenset({"no", "false", "0"})
