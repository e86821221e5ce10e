"""
Lathe Text - File-scoped textual rewriting

Whole-content replacement, literal substring replacement and regex-scoped
replacement. Replacements that find nothing to replace are no-ops, so a
pipeline can be re-run over a tree it has already transformed.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Callable

from lathe.errors import UnsafePattern
from lathe.logging_config import logger
from lathe.tree import File, ProjectTree


# ═══════════════════════════════════════════════════════════════════════════
# PATTERN SAFETY
# ═══════════════════════════════════════════════════════════════════════════


def _skip_class(pattern: str, i: int) -> int:
    """Return the index just past the character class opening at ``i``."""
    i += 1
    if i < len(pattern) and pattern[i] == "^":
        i += 1
    if i < len(pattern) and pattern[i] == "]":
        i += 1
    while i < len(pattern):
        if pattern[i] == "\\":
            i += 2
            continue
        if pattern[i] == "]":
            return i + 1
        i += 1
    return i


def _is_quantifier(pattern: str, i: int) -> bool:
    ch = pattern[i]
    if ch in "*+":
        return True
    return ch == "{" and re.match(r"\{\d*,?\d*\}", pattern[i:]) is not None


def check_pattern(pattern: str) -> None:
    """
    Reject patterns whose quantified groups can match the same text many ways.

    Two shapes backtrack exponentially on non-matching input: a quantified
    group that itself contains a quantifier (``(a+)+``, ``(\\w*\\s)*``) and a
    quantified group containing an alternation (``(a|aa)*``).
    Single-level quantifiers such as ``[\\S\\s]*`` are fine; write ``[ab]*``
    rather than ``(a|b)*``.

    Raises:
        UnsafePattern: if either shape is found
    """
    # One [has_quantifier, has_alternation] entry per open group
    stack: list[list[bool]] = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "[":
            i = _skip_class(pattern, i)
            continue
        if ch == "(":
            stack.append([False, False])
        elif ch == ")":
            inner, alternation = stack.pop() if stack else (False, False)
            quantified = i + 1 < n and _is_quantifier(pattern, i + 1)
            if quantified and inner:
                raise UnsafePattern(pattern, "nested quantifier")
            if quantified and alternation:
                raise UnsafePattern(pattern, "quantified alternation")
            if stack:
                stack[-1][0] |= inner or quantified
                stack[-1][1] |= alternation
        elif ch == "|" and stack:
            stack[-1][1] = True
        elif stack and _is_quantifier(pattern, i):
            stack[-1][0] = True
        i += 1


@lru_cache(maxsize=128)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Validate and compile a replacement pattern."""
    check_pattern(pattern)
    return re.compile(pattern)


# ═══════════════════════════════════════════════════════════════════════════
# REWRITES
# ═══════════════════════════════════════════════════════════════════════════


def set_content(file: File, text: str) -> None:
    """Overwrite the whole file. Earlier edits to the same file are lost."""
    file.content = text


def replace(file: File, literal: str, replacement: str) -> int:
    """
    Replace every non-overlapping occurrence of ``literal``, left to right.

    Returns:
        Number of substitutions made (0 is not an error)
    """
    if not literal:
        raise ValueError("Cannot replace an empty string")
    count = file.content.count(literal)
    if count:
        file.content = file.content.replace(literal, replacement)
        logger.debug(f"{file.path}: replaced {count} x {literal!r}")
    return count


def regexp_replace(file: File, pattern: str, replacement: str, count: int = 1) -> int:
    """
    Replace regex matches in a file.

    Args:
        file: File to rewrite
        pattern: Python regex; capture groups may be referenced as ``\\1``
        replacement: Replacement template
        count: 1 for first match only, 0 for every match

    Returns:
        Number of substitutions made (0 is not an error)
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    compiled = compile_pattern(pattern)
    content, made = compiled.subn(replacement, file.content, count=count)
    if made:
        file.content = content
        logger.debug(f"{file.path}: {made} regex substitution(s) for {pattern!r}")
    return made


def replace_in_tree(
    tree: ProjectTree,
    literal: str,
    replacement: str,
    predicate: Callable[[File], bool] | None = None,
) -> int:
    """Literal replace across every file of the tree."""
    total = 0
    for file in tree.all_files(predicate):
        total += replace(file, literal, replacement)
    if total:
        logger.debug(f"Replaced {literal!r} -> {replacement!r} {total} time(s) in {tree.name}")
    return total
