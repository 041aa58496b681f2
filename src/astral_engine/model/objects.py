"""Schema and object records for astral-engine.

Every record is a frozen dataclass so that snapshots handed to the engine
cannot be mutated by it.  ``ObjectType`` and ``PropertyDefinition`` form
the user-defined schema vocabulary; ``AstralObject`` is one knowledge item
instantiating a type.

The ``TypeCatalog`` helper indexes a type list once per call so that
search, query and command components share the same lookup and fallback
rules.  An object whose ``type`` has no matching ``ObjectType`` is never an
error: ``TypeCatalog.display`` returns a generic placeholder type instead.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from astral_engine.errors import SchemaError
from astral_engine.model.clock import to_naive
from astral_engine.model.text import fold_text
from astral_engine.model.values import PropertyValue

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class PropertyType(str, Enum):
    """Kinds of typed fields a schema may declare."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    RELATION = "relation"
    STRING_LIST = "stringList"

    @property
    def is_temporal(self) -> bool:
        return self in (PropertyType.DATE, PropertyType.DATETIME)


@dataclass(frozen=True, slots=True)
class PropertyDefinition:
    """One typed field within an ``ObjectType``.

    Parameters
    ----------
    id:
        Stable identifier, unique within the owning type.
    name:
        Display name, used when resolving user-typed property names.
    type:
        The ``PropertyType`` of stored values.
    options:
        Allowed values for ``select`` properties.
    relation_type_id:
        For ``relation`` properties, restricts targets to this type id.
    """

    id: str
    name: str
    type: PropertyType
    options: tuple[str, ...] = ()
    relation_type_id: str | None = None

    def matches(self, token: str) -> bool:
        """Return True if ``token`` names this property (folded id or name)."""
        folded = fold_text(token)
        return folded != "" and folded in (fold_text(self.id), fold_text(self.name))


@dataclass(frozen=True, slots=True)
class ObjectType:
    """A user-defined schema.

    Raises
    ------
    SchemaError
        If two property definitions share an id.
    """

    id: str
    name: str
    name_plural: str = ""
    icon: str = ""
    color: str = ""
    properties: tuple[PropertyDefinition, ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise SchemaError("object type id must not be empty")
        seen: set[str] = set()
        for prop in self.properties:
            if prop.id in seen:
                raise SchemaError("duplicate property id", type_id=self.id, property_id=prop.id)
            seen.add(prop.id)

    def property_by_id(self, property_id: str) -> PropertyDefinition | None:
        for prop in self.properties:
            if prop.id == property_id:
                return prop
        return None

    def find_property(self, token: str) -> PropertyDefinition | None:
        """Resolve a user-typed property token against names and ids."""
        for prop in self.properties:
            if prop.matches(token):
                return prop
        return None

    def matches(self, token: str) -> bool:
        """Return True if ``token`` names this type (folded id, name or plural)."""
        folded = fold_text(token)
        if not folded:
            return False
        return folded in (fold_text(self.id), fold_text(self.name), fold_text(self.name_plural))


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AstralObject:
    """A user-created knowledge item.

    ``links`` are outgoing object ids and ``backlinks`` incoming ones; the
    engine only reads them.  ``content`` is the editor's HTML.
    """

    id: str
    type: str
    title: str
    content: str = ""
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    tags: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    backlinks: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    embedding: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "created_at", to_naive(self.created_at))
        object.__setattr__(self, "updated_at", to_naive(self.updated_at))


# ---------------------------------------------------------------------------
# Type lookup
# ---------------------------------------------------------------------------

FALLBACK_TYPE_NAME = "Objeto"
FALLBACK_TYPE_ICON = "📄"
FALLBACK_TYPE_COLOR = "#94a3b8"


class TypeCatalog:
    """Read-only index over an ``ObjectType`` snapshot.

    Parameters
    ----------
    types:
        The current type snapshot.  Later duplicates of an id are ignored.
    """

    def __init__(self, types: Iterable[ObjectType]) -> None:
        self._types: dict[str, ObjectType] = {}
        for object_type in types:
            self._types.setdefault(object_type.id, object_type)

    def __iter__(self):
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def get(self, type_id: str) -> ObjectType | None:
        return self._types.get(type_id)

    def display(self, type_id: str) -> ObjectType:
        """Return the type for ``type_id`` or a generic placeholder."""
        found = self._types.get(type_id)
        if found is not None:
            return found
        return ObjectType(
            id=type_id or "unknown",
            name=type_id or FALLBACK_TYPE_NAME,
            name_plural=type_id or FALLBACK_TYPE_NAME,
            icon=FALLBACK_TYPE_ICON,
            color=FALLBACK_TYPE_COLOR,
        )

    def resolve(self, token: str) -> ObjectType | None:
        """Resolve a user-typed type token.

        Returns ``None`` when nothing matches or when the token is
        ambiguous (names more than one type).
        """
        candidates = [t for t in self._types.values() if t.matches(token)]
        if len(candidates) != 1:
            return None
        return candidates[0]

    def property_for(self, obj: AstralObject, property_id: str) -> PropertyDefinition | None:
        object_type = self._types.get(obj.type)
        if object_type is None:
            return None
        return object_type.property_by_id(property_id)
