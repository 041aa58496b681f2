"""Command parser for the quick-entry micro-syntax.

Parsing happens in two layers:

1. ``CommandScanner`` walks the token list with a four-state machine and
   produces a purely syntactic ``CommandSyntax``::

       SCANNING_TYPE --'/'--> SCANNING_NAME --'>'--> SCANNING_PROPERTY
       SCANNING_PROPERTY --'='--> SCANNING_VALUE --'>'--> SCANNING_PROPERTY

   There is no backtracking.  Any deviation (missing ``@`` or ``/``, an
   empty type, name or property token, a non-final ``>`` segment without
   ``=``) makes the scan fail and the caller treats the input as plain
   search text.  A final segment without ``=`` is still being typed and is
   ignored.

2. ``CommandParser`` resolves the type token against the schema, detects
   updates of existing objects and coerces the property values.

Usage
-----
::

    from astral_engine.command import parse_command

    command = parse_command("@tarea/Comprar pan > fecha = @mañana", types, objects)
    if command is not None and command.is_update:
        ...
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from astral_engine.command.coercion import convert_property_values
from astral_engine.command.lexer import tokenize
from astral_engine.command.tokens import Token, TokenType
from astral_engine.model.objects import AstralObject, ObjectType, TypeCatalog
from astral_engine.model.results import ParsedCommand
from astral_engine.model.text import fold_text

logger = logging.getLogger(__name__)


class ParseState(Enum):
    """States of the command scanner."""

    SCANNING_TYPE = auto()
    SCANNING_NAME = auto()
    SCANNING_PROPERTY = auto()
    SCANNING_VALUE = auto()


@dataclass(frozen=True, slots=True)
class CommandSyntax:
    """The syntactic parts of a command, all trimmed.

    ``assignments`` keeps input order; a repeated property name keeps its
    last value.
    """

    type_token: str
    name: str
    assignments: tuple[tuple[str, str], ...] = ()


class CommandScanner:
    """State machine over the command token list.

    After ``scan`` returns, ``state``, ``segment_start`` and
    ``pending_property`` describe where the input ended, which the relation
    autocomplete uses to locate an unfinished value.

    Parameters
    ----------
    source:
        The command text.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._tokens: list[Token] = tokenize(source)
        self.state: ParseState = ParseState.SCANNING_TYPE
        self.segment_start: int = 0
        self.type_token: str = ""
        self.name: str = ""
        self.pending_property: str | None = None

    def _segment(self, token: Token) -> str:
        return self._source[self.segment_start : token.offset].strip()

    def _begin_segment(self, token: Token, state: ParseState) -> None:
        self.state = state
        self.segment_start = token.end

    def scan(self) -> CommandSyntax | None:
        """Run the state machine; return ``None`` on any deviation."""
        tokens = list(self._tokens)
        while tokens and tokens[0].type is TokenType.WS:
            tokens.pop(0)
        if not tokens or tokens[0].type is not TokenType.AT:
            return None
        self._begin_segment(tokens[0], ParseState.SCANNING_TYPE)

        assignments: dict[str, str] = {}
        for token in tokens[1:]:
            kind = token.type

            if self.state is ParseState.SCANNING_TYPE:
                if kind is TokenType.SLASH:
                    self.type_token = self._segment(token)
                    if not self.type_token:
                        return None
                    self._begin_segment(token, ParseState.SCANNING_NAME)
                elif kind is not TokenType.TEXT and kind is not TokenType.WS:
                    return None

            elif self.state is ParseState.SCANNING_NAME:
                if kind is TokenType.GT or kind is TokenType.EOF:
                    self.name = self._segment(token)
                    if not self.name:
                        return None
                    self._begin_segment(token, ParseState.SCANNING_PROPERTY)

            elif self.state is ParseState.SCANNING_PROPERTY:
                if kind is TokenType.EQUALS:
                    self.pending_property = self._segment(token)
                    if not self.pending_property:
                        return None
                    self._begin_segment(token, ParseState.SCANNING_VALUE)
                elif kind is TokenType.GT:
                    return None

            elif kind is TokenType.GT or kind is TokenType.EOF:
                property_name = self.pending_property or ""
                assignments.pop(property_name, None)
                assignments[property_name] = self._segment(token)
                if kind is TokenType.GT:
                    self.pending_property = None
                    self._begin_segment(token, ParseState.SCANNING_PROPERTY)

        return CommandSyntax(
            type_token=self.type_token,
            name=self.name,
            assignments=tuple(assignments.items()),
        )


def scan_command(text: str) -> CommandSyntax | None:
    """Convenience function: scan ``text`` into its syntactic parts."""
    return CommandScanner(text).scan()


class CommandParser:
    """Parses quick-entry commands into create/update intents.

    Parameters
    ----------
    now:
        Evaluation time for semantic date values; ``None`` reads the clock.
    """

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now

    def parse(
        self,
        text: str,
        types: Sequence[ObjectType],
        objects: Sequence[AstralObject],
    ) -> ParsedCommand | None:
        """Parse ``text``; ``None`` means "not a command, search instead"."""
        syntax = scan_command(text)
        if syntax is None:
            logger.debug("Not a command: %r", text)
            return None

        catalog = TypeCatalog(types)
        object_type = catalog.resolve(syntax.type_token)
        warnings: list[str] = []
        if object_type is None:
            warnings.append(f'Tipo desconocido: "{syntax.type_token}"')

        existing = _find_existing(syntax.name, object_type, objects)
        raw_properties = dict(syntax.assignments)
        converted = convert_property_values(raw_properties, object_type, objects, self._now)
        warnings.extend(converted.warnings)

        logger.debug(
            "Parsed command type=%r name=%r update=%s properties=%d",
            object_type.id if object_type else None,
            syntax.name,
            existing is not None,
            len(raw_properties),
        )
        return ParsedCommand(
            type=object_type,
            name=syntax.name,
            properties=converted.properties,
            raw_properties=raw_properties,
            is_update=existing is not None,
            existing_object_id=existing.id if existing is not None else None,
            warnings=tuple(warnings),
        )


def _find_existing(
    name: str,
    object_type: ObjectType | None,
    objects: Sequence[AstralObject],
) -> AstralObject | None:
    if object_type is None:
        return None
    folded = fold_text(name)
    for obj in objects:
        if obj.type == object_type.id and fold_text(obj.title) == folded:
            return obj
    return None


def parse_command(
    text: str,
    types: Sequence[ObjectType],
    objects: Sequence[AstralObject],
    now: datetime | None = None,
) -> ParsedCommand | None:
    """Convenience function: parse ``text`` with a one-off ``CommandParser``.

    Parameters
    ----------
    text:
        The quick-entry line, e.g. ``"@tarea/Comprar pan > prioridad = alta"``.
    types:
        Current type snapshot.
    objects:
        Current object snapshot, used for update detection and relations.
    now:
        Evaluation time for semantic date values.

    Returns
    -------
    ParsedCommand | None
        The parsed intent, or ``None`` if ``text`` is not a command.
    """
    return CommandParser(now=now).parse(text, types, objects)
