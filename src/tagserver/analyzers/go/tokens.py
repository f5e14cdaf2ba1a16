"""Token definitions for the Go lexer.

Only the distinctions the declaration scanner needs are modelled: the
declaration keywords, brackets, and a handful of punctuation marks get
their own type; every other operator is an ``OPERATOR`` token.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Enumeration of Go token types."""

    # -----------------------------------------------------------------
    # Keywords: declarations
    # -----------------------------------------------------------------
    PACKAGE = auto()
    IMPORT = auto()
    FUNC = auto()
    TYPE = auto()
    VAR = auto()
    CONST = auto()

    # -----------------------------------------------------------------
    # Keywords: type literals
    # -----------------------------------------------------------------
    STRUCT = auto()
    INTERFACE = auto()

    # Any other reserved word (if, for, return, map, chan, ...)
    KEYWORD = auto()

    # -----------------------------------------------------------------
    # Brackets and punctuation
    # -----------------------------------------------------------------
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    SEMICOLON = auto()
    DOT = auto()
    ASSIGN = auto()     # =
    OPERATOR = auto()   # everything else, e.g. := * <- ...

    # -----------------------------------------------------------------
    # Literals
    # -----------------------------------------------------------------
    STRING = auto()
    RAW_STRING = auto()
    RUNE = auto()
    NUMBER = auto()

    # -----------------------------------------------------------------
    # Identifiers
    # -----------------------------------------------------------------
    IDENT = auto()

    # -----------------------------------------------------------------
    # Structural
    # -----------------------------------------------------------------
    COMMENT = auto()
    NEWLINE = auto()
    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "package": TokenType.PACKAGE,
    "import": TokenType.IMPORT,
    "func": TokenType.FUNC,
    "type": TokenType.TYPE,
    "var": TokenType.VAR,
    "const": TokenType.CONST,
    "struct": TokenType.STRUCT,
    "interface": TokenType.INTERFACE,
    "break": TokenType.KEYWORD,
    "case": TokenType.KEYWORD,
    "chan": TokenType.KEYWORD,
    "continue": TokenType.KEYWORD,
    "default": TokenType.KEYWORD,
    "defer": TokenType.KEYWORD,
    "else": TokenType.KEYWORD,
    "fallthrough": TokenType.KEYWORD,
    "for": TokenType.KEYWORD,
    "go": TokenType.KEYWORD,
    "goto": TokenType.KEYWORD,
    "if": TokenType.KEYWORD,
    "map": TokenType.KEYWORD,
    "range": TokenType.KEYWORD,
    "return": TokenType.KEYWORD,
    "select": TokenType.KEYWORD,
    "switch": TokenType.KEYWORD,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token with its source position.

    Parameters
    ----------
    type:
        The token's type.
    value:
        Raw source text of the token (string literals keep their quotes).
    line:
        1-based line number of the first character.
    col:
        1-based column number of the first character.
    offset:
        0-based character offset of the first character.
    """

    type: TokenType
    value: str
    line: int
    col: int
    offset: int

    @property
    def end(self) -> int:
        """Offset one past the last character of the token."""
        return self.offset + len(self.value)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.col})"
