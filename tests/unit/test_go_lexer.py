"""Unit tests for tagserver.analyzers.go.lexer — tokenization of Go source."""
from __future__ import annotations

import pytest

from tagserver.analyzers.go.lexer import LexError, Lexer, tokenize
from tagserver.analyzers.go.tokens import TokenType


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def types_of(tokens: list) -> list[TokenType]:
    """Return just the token types, excluding EOF."""
    return [t.type for t in tokens if t.type != TokenType.EOF]


def values_of(tokens: list) -> list[str]:
    """Return token values, excluding NEWLINE, COMMENT and EOF."""
    excluded = {TokenType.NEWLINE, TokenType.COMMENT, TokenType.EOF}
    return [t.value for t in tokens if t.type not in excluded]


# ---------------------------------------------------------------------------
# Empty and whitespace-only inputs
# ---------------------------------------------------------------------------


class TestEmptyInputs:
    def test_empty_string_produces_only_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.EOF

    def test_whitespace_only_produces_only_eof(self) -> None:
        assert types_of(tokenize("  \t \r ")) == []

    def test_newline_produces_newline_token(self) -> None:
        assert types_of(tokenize("\n")) == [TokenType.NEWLINE]

    def test_byte_order_mark_skipped(self) -> None:
        assert values_of(tokenize("\ufeffpackage main")) == ["package", "main"]


# ---------------------------------------------------------------------------
# Keywords and identifiers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("source, expected_type", [
    ("package", TokenType.PACKAGE),
    ("import", TokenType.IMPORT),
    ("func", TokenType.FUNC),
    ("type", TokenType.TYPE),
    ("var", TokenType.VAR),
    ("const", TokenType.CONST),
    ("struct", TokenType.STRUCT),
    ("interface", TokenType.INTERFACE),
    ("return", TokenType.KEYWORD),
    ("map", TokenType.KEYWORD),
    ("chan", TokenType.KEYWORD),
])
def test_keyword_produces_correct_token_type(source: str, expected_type: TokenType) -> None:
    tokens = tokenize(source)
    assert types_of(tokens) == [expected_type]
    assert tokens[0].value == source


@pytest.mark.parametrize("ident", ["main", "_", "camelCase", "Exported", "x1", "ünïcode", "packages"])
def test_identifier_tokenized_as_ident(ident: str) -> None:
    tokens = tokenize(ident)
    assert types_of(tokens) == [TokenType.IDENT]
    assert tokens[0].value == ident


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------


class TestLiterals:
    def test_string_keeps_quotes_and_escapes(self) -> None:
        tokens = tokenize(r'"a\"b\n"')
        assert tokens[0].type is TokenType.STRING
        assert tokens[0].value == r'"a\"b\n"'

    def test_raw_string_spans_lines(self) -> None:
        tokens = tokenize("`line1\nline2` x")
        assert tokens[0].type is TokenType.RAW_STRING
        assert tokens[0].value == "`line1\nline2`"
        assert tokens[1].line == 2

    def test_rune(self) -> None:
        tokens = tokenize(r"'\''")
        assert tokens[0].type is TokenType.RUNE

    @pytest.mark.parametrize("number", ["0", "42", "1_000", "0x1F", "0b1010", "0o17", "3.14", ".5", "1e-9", "0x1p+3", "2i"])
    def test_numbers(self, number: str) -> None:
        tokens = tokenize(number)
        assert types_of(tokens) == [TokenType.NUMBER]
        assert tokens[0].value == number

    def test_hex_e_is_a_digit(self) -> None:
        assert values_of(tokenize("0x1e-1")) == ["0x1e", "-", "1"]

    def test_unterminated_string_raises(self) -> None:
        with pytest.raises(LexError, match="Unterminated string"):
            tokenize('"abc')

    def test_newline_in_string_raises(self) -> None:
        with pytest.raises(LexError):
            tokenize('"abc\n"')

    def test_unterminated_raw_string_raises(self) -> None:
        with pytest.raises(LexError):
            tokenize("`abc")


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class TestComments:
    def test_line_comment(self) -> None:
        tokens = tokenize("x // trailing\ny")
        assert types_of(tokens) == [
            TokenType.IDENT, TokenType.COMMENT, TokenType.NEWLINE, TokenType.IDENT,
        ]
        assert tokens[1].value == "// trailing"

    def test_block_comment_spans_lines(self) -> None:
        tokens = tokenize("/* a\nb */ func")
        assert tokens[0].type is TokenType.COMMENT
        assert tokens[1].type is TokenType.FUNC
        assert tokens[1].line == 2

    def test_comment_markers_inside_string_are_text(self) -> None:
        assert values_of(tokenize('"// not a comment"')) == ['"// not a comment"']

    def test_unterminated_block_comment_raises(self) -> None:
        with pytest.raises(LexError, match="block comment"):
            tokenize("/* never closed")


# ---------------------------------------------------------------------------
# Operators and punctuation
# ---------------------------------------------------------------------------


class TestOperators:
    def test_longest_match(self) -> None:
        assert values_of(tokenize("a := b <<= c ... d &^ e")) == [
            "a", ":=", "b", "<<=", "c", "...", "d", "&^", "e",
        ]

    def test_assign_is_punctuation(self) -> None:
        tokens = tokenize("x = 1")
        assert tokens[1].type is TokenType.ASSIGN

    def test_equality_is_operator(self) -> None:
        tokens = tokenize("x == 1")
        assert tokens[1].type is TokenType.OPERATOR

    @pytest.mark.parametrize("char, expected", [
        ("{", TokenType.LBRACE),
        ("}", TokenType.RBRACE),
        ("(", TokenType.LPAREN),
        (")", TokenType.RPAREN),
        ("[", TokenType.LBRACKET),
        ("]", TokenType.RBRACKET),
        (",", TokenType.COMMA),
        (";", TokenType.SEMICOLON),
        (".", TokenType.DOT),
    ])
    def test_punctuation(self, char: str, expected: TokenType) -> None:
        assert types_of(tokenize(char)) == [expected]

    def test_unexpected_character_raises(self) -> None:
        with pytest.raises(LexError) as info:
            tokenize("x @ y")
        assert info.value.col == 3


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


class TestPositions:
    def test_line_and_column(self) -> None:
        tokens = [t for t in tokenize("package main\n\nfunc f()") if t.type is not TokenType.NEWLINE]
        func = tokens[2]
        assert (func.line, func.col) == (3, 1)
        assert tokens[3].col == 6

    def test_offsets_slice_source(self) -> None:
        source = 'var s = "x"  // c'
        for tok in tokenize(source):
            assert source[tok.offset : tok.end] == tok.value

    def test_lexer_class_matches_function(self) -> None:
        assert Lexer("a b").tokenize() == tokenize("a b")
