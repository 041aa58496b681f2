"""Token definitions for the command micro-syntax.

The vocabulary is tiny: four punctuation marks, runs of text, runs of
whitespace and an end marker.  Every ``Token`` carries the offset of its
first character so the parser can slice names and values straight out of
the source, whitespace included.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Exhaustive enumeration of command token types."""

    AT = auto()       # @
    SLASH = auto()    # /
    GT = auto()       # >
    EQUALS = auto()   # =
    TEXT = auto()
    WS = auto()
    EOF = auto()


PUNCTUATION: dict[str, TokenType] = {
    "@": TokenType.AT,
    "/": TokenType.SLASH,
    ">": TokenType.GT,
    "=": TokenType.EQUALS,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token.

    Parameters
    ----------
    type:
        The ``TokenType`` variant for this token.
    value:
        The raw text as it appeared in the source.
    offset:
        0-based offset of the first character in the source string.
    """

    type: TokenType
    value: str
    offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, @{self.offset})"

    @property
    def end(self) -> int:
        """Offset one past the last character of the token."""
        return self.offset + len(self.value)
