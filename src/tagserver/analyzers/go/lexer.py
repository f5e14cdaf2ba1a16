"""Go lexer: converts Go source text into a flat list of tokens.

The lexer is a single-pass character scanner that produces a
``list[Token]`` from Go source.  It tracks line and column numbers for
every token so the declaration scanner can report definition lines.

Comment styles supported:
    - ``//`` single-line comments (run to end of line)
    - ``/* ... */`` block comments (may span multiple lines)

Literals:
    - interpreted strings ``"..."`` with backslash escapes
    - raw strings delimited by backquotes (may span multiple lines)
    - rune literals ``'x'``
    - numbers in any base, with ``_`` separators, fractions and exponents

Token values hold the raw source text, so slicing the source between two
token offsets reproduces it exactly.
"""
from __future__ import annotations

from typing import Final

from tagserver.analyzers.go.tokens import KEYWORDS, Token, TokenType

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Longest first so that the scan is greedy.
_OPERATORS: Final[tuple[str, ...]] = (
    "<<=", ">>=", "&^=", "...",
    "&&", "||", "<-", "++", "--", "==", "!=", "<=", ">=", ":=",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "&^",
    "+", "-", "*", "/", "%", "&", "|", "^", "<", ">", "!", ":", "~",
)

_PUNCTUATION: Final[dict[str, TokenType]] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    ".": TokenType.DOT,
    "=": TokenType.ASSIGN,
}


class LexError(Exception):
    """Raised when the lexer encounters invalid input.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    line:
        1-based line number where the error occurred.
    col:
        1-based column number where the error occurred.
    offset:
        0-based offset in the source where the error occurred.
    """

    def __init__(self, message: str, line: int, col: int, offset: int) -> None:
        super().__init__(f"LexError at {line}:{col}: {message}")
        self.lex_message = message
        self.line = line
        self.col = col
        self.offset = offset


class Lexer:
    """Single-pass Go lexer.

    Parameters
    ----------
    source:
        The complete Go source text to tokenize.
    """

    __slots__ = ("_source", "_pos", "_line", "_col", "_tokens", "_token_line", "_token_col")

    def __init__(self, source: str) -> None:
        self._source: str = source
        self._pos: int = 0
        self._line: int = 1
        self._col: int = 1
        self._tokens: list[Token] = []
        self._token_line: int = 1
        self._token_col: int = 1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Scan the entire source and return the complete token list.

        The list always ends with an ``EOF`` token.

        Raises
        ------
        LexError
            On unterminated literals or comments, or on a character that
            cannot begin any Go token.
        """
        while self._pos < len(self._source):
            self._scan_one()
        self._token_line = self._line
        self._token_col = self._col
        self._emit(TokenType.EOF, "", self._pos)
        return self._tokens

    # ------------------------------------------------------------------
    # Internal scanner
    # ------------------------------------------------------------------

    def _current(self) -> str:
        return self._source[self._pos] if self._pos < len(self._source) else ""

    def _peek(self, offset: int = 1) -> str:
        idx = self._pos + offset
        return self._source[idx] if idx < len(self._source) else ""

    def _advance(self) -> str:
        """Consume and return the current character, updating line/col."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(self, token_type: TokenType, value: str, start_offset: int) -> None:
        """Append a token positioned at the snapshot taken in ``_scan_one``."""
        self._tokens.append(
            Token(
                type=token_type,
                value=value,
                line=self._token_line,
                col=self._token_col,
                offset=start_offset,
            )
        )

    def _error(self, message: str, start: int) -> LexError:
        return LexError(message, self._token_line, self._token_col, start)

    def _scan_one(self) -> None:
        """Scan exactly one token (or skip whitespace)."""
        self._token_line = self._line
        self._token_col = self._col
        start = self._pos
        ch = self._current()

        if ch in (" ", "\t", "\r", "\ufeff"):
            self._advance()
            return

        if ch == "\n":
            self._advance()
            self._emit(TokenType.NEWLINE, "\n", start)
            return

        if ch == "/" and self._peek() == "/":
            self._scan_line_comment(start)
            return
        if ch == "/" and self._peek() == "*":
            self._scan_block_comment(start)
            return

        if ch == '"':
            self._scan_quoted(start, '"', TokenType.STRING, "string literal")
            return
        if ch == "'":
            self._scan_quoted(start, "'", TokenType.RUNE, "rune literal")
            return
        if ch == "`":
            self._scan_raw_string(start)
            return

        if ch.isdigit() or (ch == "." and self._peek().isdigit()):
            self._scan_number(start)
            return

        if ch == "_" or ch.isalpha():
            self._scan_ident_or_keyword(start)
            return

        for op in _OPERATORS:
            if self._source.startswith(op, self._pos):
                for _ in op:
                    self._advance()
                self._emit(TokenType.OPERATOR, op, start)
                return

        if ch in _PUNCTUATION:
            self._advance()
            self._emit(_PUNCTUATION[ch], ch, start)
            return

        raise self._error(f"Unexpected character {ch!r}", start)

    # ------------------------------------------------------------------
    # Token-specific scanners
    # ------------------------------------------------------------------

    def _scan_line_comment(self, start: int) -> None:
        while self._pos < len(self._source) and self._current() != "\n":
            self._advance()
        self._emit(TokenType.COMMENT, self._source[start : self._pos], start)

    def _scan_block_comment(self, start: int) -> None:
        self._advance()  # /
        self._advance()  # *
        while self._pos < len(self._source):
            if self._current() == "*" and self._peek() == "/":
                self._advance()
                self._advance()
                self._emit(TokenType.COMMENT, self._source[start : self._pos], start)
                return
            self._advance()
        raise self._error("Unterminated block comment", start)

    def _scan_quoted(self, start: int, quote: str, token_type: TokenType, what: str) -> None:
        """Consume a string or rune literal with backslash escapes."""
        self._advance()  # opening quote
        while self._pos < len(self._source):
            ch = self._current()
            if ch == quote:
                self._advance()
                self._emit(token_type, self._source[start : self._pos], start)
                return
            if ch == "\n":
                raise self._error(f"Unterminated {what} (newline in literal)", start)
            if ch == "\\" and self._pos + 1 < len(self._source):
                self._advance()
            self._advance()
        raise self._error(f"Unterminated {what} (EOF)", start)

    def _scan_raw_string(self, start: int) -> None:
        self._advance()  # opening backquote
        while self._pos < len(self._source):
            if self._advance() == "`":
                self._emit(TokenType.RAW_STRING, self._source[start : self._pos], start)
                return
        raise self._error("Unterminated raw string literal (EOF)", start)

    def _scan_number(self, start: int) -> None:
        """Consume a numeric literal in any base, including exponents."""
        # In a hex literal ``e`` is a digit; only ``p`` starts an exponent.
        is_hex = self._source[start : start + 2].lower() == "0x"
        exponent_marks = "pP" if is_hex else "eE"
        while self._pos < len(self._source):
            ch = self._current()
            if not (ch.isalnum() or ch == "_" or ch == "."):
                break
            self._advance()
            if ch in exponent_marks and self._current() in ("+", "-"):
                self._advance()
        self._emit(TokenType.NUMBER, self._source[start : self._pos], start)

    def _scan_ident_or_keyword(self, start: int) -> None:
        while self._pos < len(self._source):
            ch = self._current()
            if ch == "_" or ch.isalnum():
                self._advance()
                continue
            break
        word = self._source[start : self._pos]
        self._emit(KEYWORDS.get(word, TokenType.IDENT), word, start)


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def tokenize(source: str) -> list[Token]:
    """Tokenize Go source text and return the complete token list.

    Example
    -------
    ::

        from tagserver.analyzers.go.lexer import tokenize
        tokens = tokenize("package main")
    """
    return Lexer(source).tokenize()
