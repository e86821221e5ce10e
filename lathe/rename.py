"""
Lathe Rename - Structural package moves and class renames

Structural passes go through the SymbolIndex and touch code only. The
class rename then runs a blanket textual pass over the whole tree to catch
mentions the index cannot see (docs, manifests, comments, strings). The two
stages are separate functions so each can be run and tested on its own.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, field_validator

from lathe.logging_config import logger
from lathe.symbols import SymbolIndex, rewrite_code
from lathe.text import replace_in_tree
from lathe.tree import File, ProjectTree


class RenameSpec(BaseModel):
    """An ``{old, new}`` pair for a package path or a type name."""

    old: str
    new: str

    @field_validator("old", "new")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("rename values must not be empty")
        return v


def _alternation(names: list[str]) -> str:
    # Longest first so FooService wins over Foo
    return "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))


# ═══════════════════════════════════════════════════════════════════════════
# PACKAGE MOVE
# ═══════════════════════════════════════════════════════════════════════════


def _relocated_path(file: File, old_dir: str, new_dir: str) -> str | None:
    """Path implied by the new package, or None if the file is not laid out by package."""
    directory = file.directory
    if directory == old_dir:
        return f"{new_dir}/{file.name}"
    if directory.endswith("/" + old_dir):
        source_root = directory[: -len(old_dir)]
        return f"{source_root}{new_dir}/{file.name}"
    return None


def move_package(
    tree: ProjectTree,
    old_package: str,
    new_package: str,
    index: SymbolIndex | None = None,
) -> list[str]:
    """
    Move every source file declaring exactly ``old_package`` to ``new_package``.

    Each file gets its package declaration rewritten and is relocated to the
    directory implied by the new package. Qualified references to the moved
    types (and ``old_package.*`` imports) are then fixed across the tree.
    Moving a package nothing declares is a no-op.

    Returns:
        Paths of the moved files
    """
    index = index or SymbolIndex()
    if old_package == new_package:
        return []

    files = index.files_in_package(tree, old_package)
    if not files:
        logger.debug(f"No files declare package {old_package}; nothing to move")
        return []

    old_dir = old_package.replace(".", "/")
    new_dir = new_package.replace(".", "/")
    moved_types: set[str] = set()
    new_paths: list[str] = []

    for file in files:
        decls = index.scan(file)
        moved_types.update(d.name for d in decls if d.kind == "type")
        package_decl = next(d for d in decls if d.kind == "package")
        start, end = package_decl.span
        file.content = file.content[:start] + new_package + file.content[end:]

        target = _relocated_path(file, old_dir, new_dir)
        if target is None:
            logger.warning(f"{file.path} is not under {old_dir}/; package updated in place")
            new_paths.append(file.path)
        else:
            new_paths.append(tree.move_file(file.path, target).path)

    alternatives = [_alternation(list(moved_types))] if moved_types else []
    alternatives.append(r"\*")
    reference = re.compile(
        rf"(?<![\w$.]){re.escape(old_package)}\.(?=(?:{'|'.join(alternatives)})(?![\w$]))"
    )
    for file in tree.all_files():
        content, made = reference.subn(new_package + ".", file.content)
        if made:
            file.content = content
            logger.debug(f"{file.path}: {made} reference(s) to {old_package} updated")

    logger.debug(f"Moved {len(new_paths)} file(s) from {old_package} to {new_package}")
    return new_paths


# ═══════════════════════════════════════════════════════════════════════════
# CLASS RENAME
# ═══════════════════════════════════════════════════════════════════════════


def rename_types(
    tree: ProjectTree,
    old_class: str,
    new_class: str,
    index: SymbolIndex | None = None,
) -> list[tuple[str, str]]:
    """
    Structural pass: rename every declared type whose name contains ``old_class``.

    ``MyFooImpl`` becomes ``MyBarImpl`` for Foo -> Bar. Declarations and
    identifier references in code are rewritten; comments and strings are
    left for the textual pass. A file named after a renamed type is renamed
    along with it.

    Returns:
        Sorted ``(old_name, new_name)`` pairs that were renamed
    """
    if not old_class:
        raise ValueError("old_class must not be empty")
    index = index or SymbolIndex()

    mapping: dict[str, str] = {}
    for decl in index.types(tree, lambda d: old_class in d.name):
        mapping.setdefault(decl.name, decl.name.replace(old_class, new_class))
    mapping = {old: new for old, new in mapping.items() if old != new}
    if not mapping:
        return []

    identifier = re.compile(rf"(?<![\w$])({_alternation(list(mapping))})(?![\w$])")
    for file in index.source_files(tree):
        file.content = rewrite_code(file.content, identifier, lambda m: mapping[m.group(1)])

    for file in index.source_files(tree):
        if file.stem in mapping:
            directory = f"{file.directory}/" if file.directory else ""
            tree.move_file(file.path, f"{directory}{mapping[file.stem]}{file.suffix}")

    logger.debug(f"Renamed types: {', '.join(f'{o} -> {n}' for o, n in sorted(mapping.items()))}")
    return sorted(mapping.items())


def rename_class(
    tree: ProjectTree,
    old_class: str,
    new_class: str,
    index: SymbolIndex | None = None,
) -> list[tuple[str, str]]:
    """
    Rename a class structurally, then replace ``old_class`` in every file.

    The textual pass is blunt: any unrelated text containing ``old_class``
    is rewritten too, so pick a specific name. It is also not idempotent
    when ``new_class`` contains ``old_class``.
    """
    renamed = rename_types(tree, old_class, new_class, index)
    replace_in_tree(tree, old_class, new_class)
    return renamed
