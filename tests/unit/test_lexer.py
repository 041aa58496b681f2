"""Unit tests for astral_engine.command.lexer — tokenization of quick-entry commands."""
from __future__ import annotations

import pytest

from astral_engine.command.lexer import Lexer, tokenize
from astral_engine.command.tokens import Token, TokenType


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def types_of(tokens: list[Token]) -> list[TokenType]:
    """Return just the token types, excluding EOF."""
    return [t.type for t in tokens if t.type != TokenType.EOF]


# ---------------------------------------------------------------------------
# Empty and whitespace-only inputs
# ---------------------------------------------------------------------------


class TestEmptyInputs:
    def test_empty_string_produces_only_eof(self) -> None:
        tokens = tokenize("")
        assert tokens == [Token(TokenType.EOF, "", 0)]

    def test_whitespace_run_is_one_token(self) -> None:
        tokens = tokenize("  \t ")
        assert types_of(tokens) == [TokenType.WS]
        assert tokens[0].value == "  \t "

    def test_eof_offset_is_source_length(self) -> None:
        source = "@nota/Hola"
        assert tokenize(source)[-1].offset == len(source)


# ---------------------------------------------------------------------------
# Punctuation and text runs
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("source, expected_type", [
    ("@", TokenType.AT),
    ("/", TokenType.SLASH),
    (">", TokenType.GT),
    ("=", TokenType.EQUALS),
])
def test_punctuation_tokens(source: str, expected_type: TokenType) -> None:
    assert types_of(tokenize(source)) == [expected_type]


class TestFullCommand:
    def test_token_sequence(self) -> None:
        tokens = tokenize("@tarea/Comprar pan > fecha = hoy")
        assert types_of(tokens) == [
            TokenType.AT,
            TokenType.TEXT,
            TokenType.SLASH,
            TokenType.TEXT,
            TokenType.WS,
            TokenType.TEXT,
            TokenType.WS,
            TokenType.GT,
            TokenType.WS,
            TokenType.TEXT,
            TokenType.WS,
            TokenType.EQUALS,
            TokenType.WS,
            TokenType.TEXT,
        ]

    def test_offsets_point_into_source(self) -> None:
        source = "@tarea/Comprar pan"
        for token in tokenize(source)[:-1]:
            assert source[token.offset : token.end] == token.value

    def test_text_run_stops_at_punctuation(self) -> None:
        tokens = tokenize("a=b/c")
        assert [t.value for t in tokens[:-1]] == ["a", "=", "b", "/", "c"]

    def test_accented_text_is_one_run(self) -> None:
        tokens = tokenize("mañana")
        assert tokens[0] == Token(TokenType.TEXT, "mañana", 0)

    def test_brackets_and_commas_are_text(self) -> None:
        tokens = tokenize("[a,b]")
        assert types_of(tokens) == [TokenType.TEXT]

    def test_lexer_class_matches_function(self) -> None:
        source = "@proyecto/Astral > estado = Activo"
        assert Lexer(source).tokenize() == tokenize(source)
