"""Unit tests for astral_engine.command.tokens — TokenType enum and Token dataclass."""
from __future__ import annotations

import pytest

from astral_engine.command.tokens import PUNCTUATION, Token, TokenType


# ---------------------------------------------------------------------------
# TokenType enum membership
# ---------------------------------------------------------------------------


class TestTokenTypeEnum:
    def test_token_type_members_are_unique(self) -> None:
        values = [t.value for t in TokenType]
        assert len(values) == len(set(values))

    def test_punctuation_map_covers_all_marks(self) -> None:
        assert set(PUNCTUATION) == {"@", "/", ">", "="}
        assert set(PUNCTUATION.values()) == {
            TokenType.AT,
            TokenType.SLASH,
            TokenType.GT,
            TokenType.EQUALS,
        }

    def test_structural_tokens_exist(self) -> None:
        for ttype in (TokenType.TEXT, TokenType.WS, TokenType.EOF):
            assert isinstance(ttype, TokenType)


# ---------------------------------------------------------------------------
# Token dataclass
# ---------------------------------------------------------------------------


class TestToken:
    def test_repr(self) -> None:
        assert repr(Token(TokenType.AT, "@", 0)) == "Token(AT, '@', @0)"

    def test_end_offset(self) -> None:
        assert Token(TokenType.TEXT, "pan", 8).end == 11

    def test_eof_end_equals_offset(self) -> None:
        assert Token(TokenType.EOF, "", 5).end == 5

    def test_is_frozen(self) -> None:
        token = Token(TokenType.TEXT, "x", 0)
        with pytest.raises(AttributeError):
            token.value = "y"  # type: ignore[misc]

    def test_equality(self) -> None:
        assert Token(TokenType.WS, " ", 3) == Token(TokenType.WS, " ", 3)
        assert Token(TokenType.WS, " ", 3) != Token(TokenType.WS, " ", 4)
