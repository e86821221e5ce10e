"""
Lathe Symbols - Declaration scanner for Java-family sources

A light lexer rather than a compiler front end: comments and string
literals are masked out, then package and type declarations are found with
regular expressions. Enough to drive declaration-site and reference-site
rewriting; no semantic resolution is attempted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Literal

from lathe.config import LatheConfig
from lathe.tree import File, ProjectTree


_NON_CODE = re.compile(
    r'//[^\n]*'
    r'|/\*[\s\S]*?\*/'
    r'|"""[\s\S]*?"""'
    r'|"(?:\\.|[^"\\\n])*"'
    r"|'(?:\\.|[^'\\\n])*'"
)

_PACKAGE_DECL = re.compile(
    r"^[ \t]*package[ \t]+([A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)[ \t]*;?",
    re.MULTILINE,
)

# `enum class Foo` must capture Foo, and `record instanceof Foo` is an expression.
_KEYWORDS = r"(?:class|interface|instanceof|extends|implements|permits|in|is|as)"

_TYPE_DECL = re.compile(
    r"(?<![\w$@.])(?:class|interface|enum|record|object)\s+"
    rf"(?!{_KEYWORDS}\b)([A-Za-z_$][\w$]*)"
    r"|@interface\s+([A-Za-z_$][\w$]*)"
)

SymbolKind = Literal["package", "type"]


def mask_non_code(source: str) -> str:
    """Blank out comments and string literals, keeping offsets and newlines."""
    return _NON_CODE.sub(lambda m: re.sub(r"[^\n]", " ", m.group()), source)


def rewrite_code(source: str, pattern: re.Pattern[str], repl: Callable[[re.Match[str]], str]) -> str:
    """
    Apply ``pattern`` to the code regions of ``source`` only.

    Matches are found on the masked text and spliced into the original, so
    comments and string literals are never rewritten.
    """
    masked = mask_non_code(source)
    pieces: list[str] = []
    last = 0
    for match in pattern.finditer(masked):
        pieces.append(source[last:match.start()])
        pieces.append(repl(match))
        last = match.end()
    if not pieces:
        return source
    pieces.append(source[last:])
    return "".join(pieces)


@dataclass(frozen=True)
class SymbolDeclaration:
    """A package or type declaration found in a source file."""

    kind: SymbolKind
    name: str
    qualified_name: str
    file: File
    span: tuple[int, int]  # Offsets of the name token in file.content


# ═══════════════════════════════════════════════════════════════════════════
# INDEX
# ═══════════════════════════════════════════════════════════════════════════


class SymbolIndex:
    """
    Answers structural queries over the source files of a tree.

    Nothing is cached: every query rescans the current file contents, so
    results always reflect earlier mutations in the pipeline.
    """

    def __init__(self, suffixes: Iterable[str] = (".java", ".kt")):
        self.suffixes = tuple(suffixes)

    @classmethod
    def from_config(cls, config: LatheConfig) -> "SymbolIndex":
        return cls(config.source_suffixes)

    def is_source(self, file: File) -> bool:
        return file.suffix in self.suffixes

    def source_files(self, tree: ProjectTree) -> list[File]:
        return tree.all_files(self.is_source)

    def scan(self, file: File) -> list[SymbolDeclaration]:
        """Return the package declaration (if any) and type declarations of a file."""
        masked = mask_non_code(file.content)
        declarations: list[SymbolDeclaration] = []

        package = ""
        match = _PACKAGE_DECL.search(masked)
        if match:
            package = match.group(1)
            declarations.append(SymbolDeclaration(
                kind="package",
                name=package,
                qualified_name=package,
                file=file,
                span=match.span(1),
            ))

        for match in _TYPE_DECL.finditer(masked):
            group = 1 if match.group(1) else 2
            name = match.group(group)
            declarations.append(SymbolDeclaration(
                kind="type",
                name=name,
                qualified_name=f"{package}.{name}" if package else name,
                file=file,
                span=match.span(group),
            ))

        return declarations

    def query(
        self,
        tree: ProjectTree,
        predicate: Callable[[SymbolDeclaration], bool] | None = None,
    ) -> list[SymbolDeclaration]:
        """Scan every source file and return the declarations matching ``predicate``."""
        results: list[SymbolDeclaration] = []
        for file in self.source_files(tree):
            for decl in self.scan(file):
                if predicate is None or predicate(decl):
                    results.append(decl)
        return results

    def files_in_package(self, tree: ProjectTree, package: str) -> list[File]:
        """Source files whose declared package equals ``package`` exactly."""
        decls = self.query(tree, lambda d: d.kind == "package" and d.name == package)
        return [d.file for d in decls]

    def types(
        self,
        tree: ProjectTree,
        predicate: Callable[[SymbolDeclaration], bool] | None = None,
    ) -> list[SymbolDeclaration]:
        return self.query(
            tree,
            lambda d: d.kind == "type" and (predicate is None or predicate(d)),
        )
