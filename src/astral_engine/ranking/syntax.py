"""Inline filter syntax for search queries.

A search query may mix free text with three filter forms::

    /tarea            keep objects of type "tarea" (id, name or plural)
    #urgente          keep objects tagged "urgente"
    estado:activo     keep objects whose "estado" property contains "activo"
    autor:"Ana Gil"   quoted values may contain spaces

Everything else is free text.  Tokens are split on whitespace, keeping
double-quoted runs together.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

_TOKEN_RE: Final[re.Pattern[str]] = re.compile(r'(?:[^\s"]+|"[^"]*")+')
_PROPERTY_RE: Final[re.Pattern[str]] = re.compile(r'^([^:"]+):(.+)$')


@dataclass(frozen=True, slots=True)
class ParsedQuery:
    """A search query split into free text and inline filters."""

    text: str = ""
    type_filters: tuple[str, ...] = ()
    tag_filters: tuple[str, ...] = ()
    property_filters: dict[str, str] = field(default_factory=dict)

    @property
    def terms(self) -> tuple[str, ...]:
        return tuple(self.text.split())


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def _is_property_token(name: str, value: str) -> bool:
    # "10:30" is a time and "http://x" a URL, not filters.
    return not name.isdigit() and not value.startswith("//")


def parse_query_syntax(query: str) -> ParsedQuery:
    """Split ``query`` into free text and ``/type``, ``#tag``, ``prop:value`` filters."""
    type_filters: list[str] = []
    tag_filters: list[str] = []
    property_filters: dict[str, str] = {}
    text_parts: list[str] = []

    for token in _TOKEN_RE.findall(query):
        if token.startswith("/") and len(token) > 1:
            type_filters.append(_unquote(token[1:]))
            continue
        if token.startswith("#") and len(token) > 1:
            tag_filters.append(_unquote(token[1:]))
            continue
        match = _PROPERTY_RE.match(token)
        if match and _is_property_token(match.group(1), match.group(2)):
            property_filters[match.group(1)] = _unquote(match.group(2))
            continue
        text_parts.append(_unquote(token))

    return ParsedQuery(
        text=" ".join(text_parts),
        type_filters=tuple(type_filters),
        tag_filters=tuple(tag_filters),
        property_filters=property_filters,
    )
