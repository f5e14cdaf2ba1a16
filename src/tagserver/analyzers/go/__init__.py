"""Go language support: lexer, token types, and the declaration scanner."""
from __future__ import annotations

from tagserver.analyzers.go.lexer import LexError, Lexer, tokenize
from tagserver.analyzers.go.tagger import DeclarationScanner, GoAnalyzer, GoDecl

__all__ = ["Lexer", "tokenize", "LexError", "DeclarationScanner", "GoAnalyzer", "GoDecl"]
