"""Error types for astral-engine.

Malformed *user* input never raises: the search, query and command
components degrade to "no match", raw values or ``None``.  The only
exception the engine raises is ``SchemaError``, which signals a
structurally invalid schema or snapshot record; it is a programmer error that
callers should treat as fatal and non-retryable.
"""
from __future__ import annotations


class SchemaError(ValueError):
    """Raised when an ObjectType or snapshot record is structurally invalid.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    type_id:
        Id of the offending object type, when known.
    property_id:
        Id of the offending property definition, when known.
    """

    def __init__(
        self,
        message: str,
        type_id: str | None = None,
        property_id: str | None = None,
    ) -> None:
        self.schema_message = message
        self.type_id = type_id
        self.property_id = property_id
        location = ""
        if type_id is not None:
            location = f" [type {type_id!r}"
            if property_id is not None:
                location += f", property {property_id!r}"
            location += "]"
        super().__init__(f"SchemaError{location}: {message}")
