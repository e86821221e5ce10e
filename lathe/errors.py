"""
Lathe Errors - Exception hierarchy for tree transformations

Structural and existence errors abort a pipeline. A pattern that does not
match is never an error.
"""

from __future__ import annotations


class LatheError(Exception):
    """Base exception for all Lathe errors."""


class NotFound(LatheError):
    """Raised when an operation needs a path that is not in the tree."""

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"File not found: {path}")


class ManifestNotFound(NotFound):
    """Raised when the build manifest is absent or cannot be parsed."""

    def __init__(self, path: str, reason: str):
        self.reason = reason
        super().__init__(path, f"Manifest {path} unavailable: {reason}")


class PathConflict(LatheError):
    """Raised when a file would be created or moved onto an existing path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path already exists: {path}")


class InvalidPath(LatheError, ValueError):
    """Raised for a tree path that is absolute, empty or escapes the root."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid tree path {path!r}: {reason}")


class UnsafePattern(LatheError, ValueError):
    """Raised for regex patterns prone to catastrophic backtracking."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Refusing pattern {pattern!r}: {reason}")


class RecipeError(LatheError):
    """Raised when a recipe cannot be loaded, validated or rendered."""
