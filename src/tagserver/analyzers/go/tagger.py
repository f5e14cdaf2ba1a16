"""Go tag generation.

A declaration scanner walks the token list from ``tokenize`` and reports
top-level declarations only; function bodies and composite literals are
skipped as balanced bracket runs.

Kinds emitted follow universal-ctags' Go parser:

    package, func, method, struct, interface, type, talias,
    field, methodSpec, const, var

Methods are scoped to their receiver's base type name.  The receiver's
``scopeKind`` is resolved against the types declared in the same file and
falls back to ``type`` when the receiver type is declared elsewhere.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace

from tagserver.analyzers.base import LanguageAnalyzer, SourceLines, Tag
from tagserver.analyzers.go.lexer import LexError, tokenize
from tagserver.analyzers.go.tokens import Token, TokenType
from tagserver.analyzers.registry import default_registry

logger = logging.getLogger(__name__)

_OPENERS = frozenset({TokenType.LBRACE, TokenType.LPAREN, TokenType.LBRACKET})
_CLOSERS = frozenset({TokenType.RBRACE, TokenType.RPAREN, TokenType.RBRACKET})
_LINE_ENDS = frozenset({TokenType.NEWLINE, TokenType.SEMICOLON, TokenType.EOF})
# Tokens after a lone struct member name that mark it as an embedded field.
_EMBEDDED_FOLLOWERS = frozenset({
    TokenType.DOT,
    TokenType.NEWLINE,
    TokenType.SEMICOLON,
    TokenType.RBRACE,
    TokenType.STRING,
    TokenType.RAW_STRING,
    TokenType.EOF,
})


@dataclass(frozen=True, slots=True)
class GoDecl:
    """A declaration found by the scanner, before it becomes a ``Tag``."""

    name: str
    kind: str
    line: int
    scope: str | None = None
    scope_kind: str | None = None
    signature: str | None = None


class DeclarationScanner:
    """Collects top-level Go declarations from a token list.

    Parameters
    ----------
    tokens:
        Token list produced by the lexer, terminated by ``EOF``.
    source:
        The text the tokens were scanned from; used to slice signatures.
    """

    def __init__(self, tokens: list[Token], source: str) -> None:
        # Comments never affect declarations; newlines do, as statement ends.
        self._tokens = [t for t in tokens if t.type is not TokenType.COMMENT]
        self._source = source
        self._pos = 0
        self._decls: list[GoDecl] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def scan(self) -> list[GoDecl]:
        """Scan all tokens and return declarations in source order."""
        while not self._check(TokenType.EOF):
            tok = self._current()
            if tok.type in _LINE_ENDS or tok.type in _CLOSERS:
                self._advance()
            elif tok.type is TokenType.PACKAGE:
                self._advance()
                name = self._match(TokenType.IDENT)
                if name is not None:
                    self._add(name, "package")
            elif tok.type is TokenType.FUNC:
                self._func_decl()
            elif tok.type is TokenType.TYPE:
                self._group(self._type_spec)
            elif tok.type is TokenType.VAR:
                self._group(lambda: self._value_spec("var"))
            elif tok.type is TokenType.CONST:
                self._group(lambda: self._value_spec("const"))
            else:
                self._skip_to_line_end()
                self._ensure_progress(tok)
        return self._resolve_receivers()

    # ------------------------------------------------------------------
    # Navigation helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return self._tokens[-1]

    def _peek(self, offset: int = 1) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]

    def _advance(self) -> Token:
        tok = self._current()
        if tok.type is not TokenType.EOF:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Token | None:
        if self._check(*types):
            return self._advance()
        return None

    def _skip_newlines(self) -> None:
        while self._check(TokenType.NEWLINE, TokenType.SEMICOLON):
            self._advance()

    def _skip_balanced(self) -> Token:
        """Consume a bracketed run starting at an opener; return its last token."""
        depth = 0
        tok = self._current()
        while not self._check(TokenType.EOF):
            tok = self._advance()
            if tok.type in _OPENERS:
                depth += 1
            elif tok.type in _CLOSERS:
                depth -= 1
                if depth <= 0:
                    break
        return tok

    def _skip_to_line_end(self) -> None:
        """Consume tokens up to, not including, the end of the statement.

        An unmatched closer also ends the statement, so group and body
        parsers see their own closing bracket.
        """
        while True:
            tok = self._current()
            if tok.type in _LINE_ENDS or tok.type in _CLOSERS:
                return
            if tok.type in _OPENERS:
                self._skip_balanced()
            else:
                self._advance()

    def _ensure_progress(self, start: Token) -> None:
        if self._current() is start:
            self._advance()

    def _add(self, tok: Token, kind: str, **extra: str | None) -> None:
        self._decls.append(GoDecl(name=tok.value, kind=kind, line=tok.line, **extra))

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _group(self, spec: Callable[[], None]) -> None:
        """Parse ``KEYWORD spec`` or ``KEYWORD ( spec; spec; ... )``."""
        self._advance()  # type / var / const
        if not self._match(TokenType.LPAREN):
            spec()
            return
        while True:
            self._skip_newlines()
            if self._check(TokenType.EOF):
                return
            if self._match(TokenType.RPAREN):
                return
            start = self._current()
            spec()
            self._ensure_progress(start)

    def _value_spec(self, kind: str) -> None:
        """Parse ``a, b, c Type = values`` and tag every name."""
        while True:
            name = self._match(TokenType.IDENT)
            if name is None:
                break
            self._add(name, kind)
            if not self._match(TokenType.COMMA):
                break
        self._skip_to_line_end()

    def _type_spec(self) -> None:
        name = self._match(TokenType.IDENT)
        if name is None:
            self._skip_to_line_end()
            return
        if self._has_type_params():
            self._skip_balanced()

        if self._match(TokenType.ASSIGN):
            self._add(name, "talias")
            self._skip_to_line_end()
        elif self._match(TokenType.STRUCT):
            self._add(name, "struct")
            if self._check(TokenType.LBRACE):
                self._struct_body(name.value)
        elif self._match(TokenType.INTERFACE):
            self._add(name, "interface")
            if self._check(TokenType.LBRACE):
                self._interface_body(name.value)
        else:
            self._add(name, "type")
            self._skip_to_line_end()

    def _has_type_params(self) -> bool:
        """Tell ``Name[T any]`` (type parameters) from ``Name [N]T`` (array)."""
        if not self._check(TokenType.LBRACKET):
            return False
        first, second = self._peek(1), self._peek(2)
        return first.type is TokenType.IDENT and second.type is not TokenType.RBRACKET

    def _struct_body(self, struct_name: str) -> None:
        self._advance()  # {
        while True:
            self._skip_newlines()
            if self._check(TokenType.EOF):
                return
            if self._match(TokenType.RBRACE):
                return
            start = self._current()
            names: list[Token] = []
            while self._check(TokenType.IDENT):
                names.append(self._advance())
                if not self._match(TokenType.COMMA):
                    break
            embedded = len(names) == 1 and self._current().type in _EMBEDDED_FOLLOWERS
            if names and not embedded:
                for name in names:
                    self._add(name, "field", scope=struct_name, scope_kind="struct")
            self._skip_to_line_end()
            self._ensure_progress(start)

    def _interface_body(self, interface_name: str) -> None:
        self._advance()  # {
        while True:
            self._skip_newlines()
            if self._check(TokenType.EOF):
                return
            if self._match(TokenType.RBRACE):
                return
            start = self._current()
            if self._check(TokenType.IDENT) and self._peek().type is TokenType.LPAREN:
                name = self._advance()
                sig_start = self._current()
                sig_end = self._skip_balanced()
                self._add(
                    name,
                    "methodSpec",
                    scope=interface_name,
                    scope_kind="interface",
                    signature=self._slice(sig_start, sig_end),
                )
            self._skip_to_line_end()
            self._ensure_progress(start)

    def _func_decl(self) -> None:
        self._advance()  # func
        receiver: str | None = None
        if self._check(TokenType.LPAREN):
            receiver = self._receiver_type()
        name = self._match(TokenType.IDENT)
        if name is None:
            self._skip_to_line_end()
            return
        if self._check(TokenType.LBRACKET):
            self._skip_balanced()
        signature = None
        if self._check(TokenType.LPAREN):
            sig_start = self._current()
            signature = self._slice(sig_start, self._skip_balanced())

        if receiver is None:
            self._add(name, "func", signature=signature)
        else:
            self._add(name, "method", scope=receiver, signature=signature)
        self._skip_to_line_end()

    def _receiver_type(self) -> str | None:
        """Consume ``(r *T[P])`` and return ``T``."""
        self._advance()  # (
        depth = 1
        base: str | None = None
        while depth > 0 and not self._check(TokenType.EOF):
            tok = self._advance()
            if tok.type in _OPENERS:
                depth += 1
            elif tok.type in _CLOSERS:
                depth -= 1
            elif depth == 1 and tok.type is TokenType.IDENT:
                base = tok.value
        return base

    def _slice(self, start: Token, end: Token) -> str:
        return " ".join(self._source[start.offset : end.end].split())

    def _resolve_receivers(self) -> list[GoDecl]:
        type_kinds = {
            d.name: d.kind
            for d in self._decls
            if d.kind in ("struct", "interface", "type", "talias")
        }
        return [
            replace(d, scope_kind=type_kinds.get(d.scope, "type")) if d.kind == "method" else d
            for d in self._decls
        ]


@default_registry.register("go")
class GoAnalyzer(LanguageAnalyzer):
    """Tag generator for Go source files."""

    language = "Go"
    extensions = (".go",)

    def tags(self, filename: str, content: bytes) -> Iterator[Tag]:
        source = content.decode("utf-8", errors="replace")
        try:
            tokens = tokenize(source)
        except LexError as exc:
            logger.warning("Cannot tokenize %s as Go: %s", filename, exc)
            return
        lines = SourceLines(source)
        for decl in DeclarationScanner(tokens, source).scan():
            yield Tag(
                name=decl.name,
                path=filename,
                language=self.language,
                line=decl.line,
                kind=decl.kind,
                pattern=lines.pattern(decl.line),
                scope=decl.scope,
                scope_kind=decl.scope_kind,
                signature=decl.signature,
            )
