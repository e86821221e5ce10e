"""
Lathe Operations - Host-facing operation table

Each operation takes the tree explicitly, runs to completion or raises,
and never calls another operation. Recipes reach these through their step
models; Python hosts can call them directly.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from lathe.logging_config import logger
from lathe.manifest import update_manifest
from lathe.rename import move_package, rename_class
from lathe.templating import render_file
from lathe.text import regexp_replace, replace, set_content
from lathe.tree import ProjectTree


# Placeholders carried by the stock skeleton
TEMPLATE_PROJECT_NAME = "spring-rugs"
TEMPLATE_OWNER = "atomist-rugs"
TEMPLATE_ARTIFACT_ID = "my-company-domain"
BASELINE_VERSION = "0.1.0"

UNNECESSARY_FILES = [
    "LICENSE",
    "CODE_OF_CONDUCT.md",
    "CONTRIBUTING.md",
    ".travis.yml",
]


# ═══════════════════════════════════════════════════════════════════════════
# CORE OPERATIONS
# ═══════════════════════════════════════════════════════════════════════════


def replace_file_content(tree: ProjectTree, path: str, text: str) -> None:
    """Overwrite an existing file. Must come before any other edit to it."""
    set_content(tree.find_file(path), text)


def literal_replace(tree: ProjectTree, path: str, literal: str, replacement: str) -> int:
    return replace(tree.find_file(path), literal, replacement)


def regex_replace(
    tree: ProjectTree,
    path: str,
    pattern: str,
    replacement: str,
    count: int = 1,
) -> int:
    """First-match substitution by default; ``count=0`` replaces every match."""
    return regexp_replace(tree.find_file(path), pattern, replacement, count=count)


def delete_files(tree: ProjectTree, paths: Iterable[str], missing_ok: bool = False) -> list[str]:
    """
    Remove each named file.

    Args:
        tree: Tree to mutate
        paths: Paths to delete
        missing_ok: Skip absent paths instead of raising NotFound

    Returns:
        Paths actually deleted
    """
    deleted: list[str] = []
    for path in paths:
        if missing_ok and not tree.has_file(path):
            logger.debug(f"{path} already absent")
            continue
        tree.delete_file(path)
        deleted.append(path)
    return deleted


def render_template(
    tree: ProjectTree,
    path: str,
    template: str,
    context: dict[str, Any],
) -> None:
    """Render a packaged Jinja2 template into ``path``, creating the file if needed."""
    content = render_file(template, context)
    if tree.has_file(path):
        set_content(tree.find_file(path), content)
    else:
        tree.add_file(path, content)


# ═══════════════════════════════════════════════════════════════════════════
# SKELETON CLEAN-UP
# ═══════════════════════════════════════════════════════════════════════════


def clean_readme(tree: ProjectTree, description: str, owner: str, path: str = "README.md") -> None:
    """Replace the skeleton's README with one describing the new project."""
    render_template(tree, path, "README.md.j2", {
        "project_name": tree.name,
        "description": description,
        "owner": owner,
    })


def clean_changelog(
    tree: ProjectTree,
    owner: str,
    path: str = "CHANGELOG.md",
    baseline: str = BASELINE_VERSION,
    template_name: str = TEMPLATE_PROJECT_NAME,
    template_owner: str = TEMPLATE_OWNER,
) -> None:
    """
    Drop the skeleton's release history.

    The compare link region between the latest release and ``baseline`` is
    collapsed first; only then is everything under the ``### Added`` heading
    replaced, since that match depends on what the collapse removed. Both
    patterns silently do nothing if the changelog layout differs.
    """
    changelog = tree.find_file(path)
    baseline_re = re.escape(baseline)
    regexp_replace(
        changelog,
        rf"\d+\.\d+\.\d+\.\.\.HEAD\n\n[\S\s]*## \[{baseline_re}\]",
        f"{baseline}...HEAD\n\n## [{baseline}]",
    )
    regexp_replace(changelog, r"(\n### Added\n)[\S\s]*", r"\1\nAdded\n\n-   Everything\n")
    replace(changelog, template_name, tree.name)
    replace(changelog, template_owner, owner)


def update_ci_config(
    tree: ProjectTree,
    artifact_id: str,
    path: str = ".circleci/config.yml",
    placeholder: str = TEMPLATE_ARTIFACT_ID,
) -> int:
    return replace(tree.find_file(path), placeholder, artifact_id)


def remove_unnecessary_files(tree: ProjectTree, paths: Iterable[str] = UNNECESSARY_FILES) -> list[str]:
    """Delete skeleton-only files that exist; absent ones are skipped."""
    return delete_files(tree, paths, missing_ok=True)


__all__ = [
    "BASELINE_VERSION",
    "TEMPLATE_ARTIFACT_ID",
    "TEMPLATE_OWNER",
    "TEMPLATE_PROJECT_NAME",
    "UNNECESSARY_FILES",
    "clean_changelog",
    "clean_readme",
    "delete_files",
    "literal_replace",
    "move_package",
    "regex_replace",
    "remove_unnecessary_files",
    "rename_class",
    "render_template",
    "replace_file_content",
    "update_ci_config",
    "update_manifest",
]
