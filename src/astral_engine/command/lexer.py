"""Command lexer: converts a quick-entry line into a flat list of tokens.

Every character is valid input, so scanning never fails.  Punctuation
characters (``@ / > =``) become single-character tokens, whitespace runs
become ``WS`` and everything else is grouped into ``TEXT`` runs.  The list
always ends with an ``EOF`` token whose offset is ``len(source)``.
"""
from __future__ import annotations

from astral_engine.command.tokens import PUNCTUATION, Token, TokenType


class Lexer:
    """Single-pass command lexer.

    Parameters
    ----------
    source:
        The complete command text to tokenize.
    """

    __slots__ = ("_source", "_pos", "_tokens")

    def __init__(self, source: str) -> None:
        self._source: str = source
        self._pos: int = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Scan the entire source and return the token list."""
        while self._pos < len(self._source):
            self._scan_one()
        self._tokens.append(Token(TokenType.EOF, "", len(self._source)))
        return self._tokens

    def _scan_one(self) -> None:
        start = self._pos
        ch = self._source[start]

        if ch in PUNCTUATION:
            self._pos += 1
            self._tokens.append(Token(PUNCTUATION[ch], ch, start))
            return

        if ch.isspace():
            while self._pos < len(self._source) and self._source[self._pos].isspace():
                self._pos += 1
            self._tokens.append(Token(TokenType.WS, self._source[start : self._pos], start))
            return

        while self._pos < len(self._source):
            ch = self._source[self._pos]
            if ch in PUNCTUATION or ch.isspace():
                break
            self._pos += 1
        self._tokens.append(Token(TokenType.TEXT, self._source[start : self._pos], start))


def tokenize(source: str) -> list[Token]:
    """Convenience function: tokenize ``source`` and return the token list."""
    return Lexer(source).tokenize()
