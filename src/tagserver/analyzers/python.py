"""Python tag generation built on the standard ``ast`` module.

Kinds emitted follow universal-ctags' Python parser:

- ``class`` for class definitions,
- ``function`` for functions outside a class body,
- ``member`` for functions defined directly in a class body,
- ``variable`` for names bound at module or class level.

Definitions nested inside compound statements (``if``, ``try``,
``with``, loops) at module or class level are still reported; bindings
local to a function body are not.
"""
from __future__ import annotations

import ast
import logging
from collections.abc import Iterator

from tagserver.analyzers.base import LanguageAnalyzer, SourceLines, Tag
from tagserver.analyzers.registry import default_registry

logger = logging.getLogger(__name__)

_Scope = tuple[tuple[str, str], ...]

_TRAILING_BODIES = ("orelse", "finalbody")


@default_registry.register("python")
class PythonAnalyzer(LanguageAnalyzer):
    """Tag generator for Python source and stub files."""

    language = "Python"
    extensions = (".py", ".pyi")

    def tags(self, filename: str, content: bytes) -> Iterator[Tag]:
        try:
            tree = ast.parse(content, filename=filename)
        except (SyntaxError, ValueError, RecursionError, MemoryError) as exc:
            logger.warning("Cannot parse %s as Python: %s", filename, exc)
            return
        lines = SourceLines(content.decode("utf-8", errors="replace"))
        yield from self._visit_body(tree.body, filename, lines, ())

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _visit_body(
        self,
        body: list[ast.stmt],
        filename: str,
        lines: SourceLines,
        scope: _Scope,
    ) -> Iterator[Tag]:
        in_function = bool(scope) and scope[-1][1] in ("function", "member")
        for node in body:
            if isinstance(node, ast.ClassDef):
                yield self._tag(node.name, "class", node.lineno, filename, lines, scope)
                yield from self._visit_body(
                    node.body, filename, lines, scope + ((node.name, "class"),)
                )
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                kind = "member" if scope and scope[-1][1] == "class" else "function"
                signature = f"({ast.unparse(node.args)})"
                yield self._tag(
                    node.name, kind, node.lineno, filename, lines, scope, signature
                )
                yield from self._visit_body(
                    node.body, filename, lines, scope + ((node.name, kind),)
                )
            elif in_function:
                continue
            elif isinstance(node, (ast.Assign, ast.AnnAssign)):
                targets = node.targets if isinstance(node, ast.Assign) else [node.target]
                for name, lineno in _bound_names(targets):
                    yield self._tag(name, "variable", lineno, filename, lines, scope)
            else:
                for nested in _nested_bodies(node):
                    yield from self._visit_body(nested, filename, lines, scope)

    def _tag(
        self,
        name: str,
        kind: str,
        lineno: int,
        filename: str,
        lines: SourceLines,
        scope: _Scope,
        signature: str | None = None,
    ) -> Tag:
        return Tag(
            name=name,
            path=filename,
            language=self.language,
            line=lineno,
            kind=kind,
            pattern=lines.pattern(lineno),
            scope=".".join(part for part, _ in scope) if scope else None,
            scope_kind=scope[-1][1] if scope else None,
            signature=signature,
        )


def _bound_names(targets: list[ast.expr]) -> Iterator[tuple[str, int]]:
    """Yield ``(name, line)`` for each plain name bound by assignment targets."""
    for target in targets:
        if isinstance(target, ast.Name):
            yield target.id, target.lineno
        elif isinstance(target, (ast.Tuple, ast.List)):
            yield from _bound_names(target.elts)
        elif isinstance(target, ast.Starred):
            yield from _bound_names([target.value])


def _nested_bodies(node: ast.stmt) -> Iterator[list[ast.stmt]]:
    """Yield the statement lists nested in a compound statement, in source order."""
    body = getattr(node, "body", None)
    if isinstance(body, list):
        yield body
    for handler in getattr(node, "handlers", ()):
        yield handler.body
    for attr in _TRAILING_BODIES:
        trailing = getattr(node, attr, None)
        if isinstance(trailing, list):
            yield trailing
