"""Unit tests for astral_engine.command.grammar — EBNF reference constants."""
from __future__ import annotations

import pytest

from astral_engine.command.grammar import (
    COMMAND_GRAMMAR,
    GRAMMAR_ASSIGNMENT,
    GRAMMAR_COMMAND,
    GRAMMAR_NOTES,
    GRAMMAR_VALUES,
)


class TestGrammarConstants:
    def test_command_rule(self) -> None:
        assert "command" in GRAMMAR_COMMAND
        assert "'@' type_token '/' name_token" in GRAMMAR_COMMAND

    def test_assignment_rule(self) -> None:
        assert "prop_name '=' prop_value" in GRAMMAR_ASSIGNMENT

    @pytest.mark.parametrize("token", [
        "hoy", "ayer", "mañana", "esta_semana", "semana_pasada", "este_mes", "mes_pasado",
    ])
    def test_semantic_dates_documented(self, token: str) -> None:
        assert token in GRAMMAR_VALUES

    def test_notes_mention_unfinished_segment(self) -> None:
        assert "last segment" in GRAMMAR_NOTES


class TestCommandGrammar:
    def test_contains_every_section(self) -> None:
        for section in (GRAMMAR_COMMAND, GRAMMAR_ASSIGNMENT, GRAMMAR_VALUES, GRAMMAR_NOTES):
            assert section in COMMAND_GRAMMAR

    def test_sections_in_order(self) -> None:
        assert COMMAND_GRAMMAR.index("command    ::=") < COMMAND_GRAMMAR.index("assignment ::=")
        assert COMMAND_GRAMMAR.index("assignment ::=") < COMMAND_GRAMMAR.index("list_value")
