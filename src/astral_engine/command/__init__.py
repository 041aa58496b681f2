"""Command parser module.

Exports the micro-syntax lexer and parser, the value coercion table, the
properties preview and relation autocomplete.
"""
from __future__ import annotations

from astral_engine.command.coercion import (
    ConvertedProperties,
    convert_property_values,
    format_properties_preview,
    parse_locale_number,
    resolve_property,
)
from astral_engine.command.grammar import COMMAND_GRAMMAR
from astral_engine.command.lexer import Lexer, tokenize
from astral_engine.command.parser import (
    CommandParser,
    CommandScanner,
    CommandSyntax,
    ParseState,
    parse_command,
    scan_command,
)
from astral_engine.command.suggestions import get_relation_suggestions
from astral_engine.command.tokens import Token, TokenType

__all__ = [
    "ConvertedProperties",
    "convert_property_values",
    "format_properties_preview",
    "parse_locale_number",
    "resolve_property",
    "COMMAND_GRAMMAR",
    "Lexer",
    "tokenize",
    "CommandParser",
    "CommandScanner",
    "CommandSyntax",
    "ParseState",
    "parse_command",
    "scan_command",
    "get_relation_suggestions",
    "Token",
    "TokenType",
]
