"""
Lathe - Project skeleton population engine

Turns a freshly instantiated project template into a concrete project by
substituting placeholder identifiers throughout the tree.
"""

__version__ = "0.1.0"

from lathe.errors import InvalidPath, LatheError, ManifestNotFound, NotFound, PathConflict, UnsafePattern
from lathe.tree import File, ProjectTree
from lathe.symbols import SymbolDeclaration, SymbolIndex
from lathe.manifest import PomManifest, find_manifest
from lathe.operations import (
    delete_files,
    literal_replace,
    move_package,
    regex_replace,
    rename_class,
    replace_file_content,
    update_manifest,
)
from lathe.recipe import Recipe
from lathe.pipeline import Pipeline, PipelineResult, run_recipe

__all__ = [
    "File",
    "InvalidPath",
    "LatheError",
    "ManifestNotFound",
    "NotFound",
    "PathConflict",
    "Pipeline",
    "PipelineResult",
    "PomManifest",
    "ProjectTree",
    "Recipe",
    "SymbolDeclaration",
    "SymbolIndex",
    "UnsafePattern",
    "delete_files",
    "find_manifest",
    "literal_replace",
    "move_package",
    "regex_replace",
    "rename_class",
    "replace_file_content",
    "run_recipe",
    "update_manifest",
]
