"""
Lathe Tree - In-memory model of a project skeleton

A ProjectTree holds every text file of a project keyed by its POSIX
relative path. Operations mutate it in place; the host loads it from disk
before the pipeline and saves it afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator

from lathe.config import LatheConfig
from lathe.errors import InvalidPath, NotFound, PathConflict
from lathe.logging_config import logger


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Normalize a tree path to ``a/b/c`` form."""
    raw = str(path).replace("\\", "/")
    pure = PurePosixPath(raw)
    if pure.is_absolute():
        raise InvalidPath(raw, "must be relative")
    parts = [p for p in pure.parts if p not in ("", ".")]
    if not parts:
        raise InvalidPath(raw, "empty")
    if ".." in parts:
        raise InvalidPath(raw, "must not contain '..'")
    return "/".join(parts)


# ═══════════════════════════════════════════════════════════════════════════
# FILE
# ═══════════════════════════════════════════════════════════════════════════


class File:
    """A text file owned by a ProjectTree. The path never changes."""

    __slots__ = ("_path", "content")

    def __init__(self, path: str, content: str = ""):
        self._path = normalize_path(path)
        self.content = content

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        return PurePosixPath(self._path).name

    @property
    def stem(self) -> str:
        return PurePosixPath(self._path).stem

    @property
    def suffix(self) -> str:
        return PurePosixPath(self._path).suffix

    @property
    def directory(self) -> str:
        parent = str(PurePosixPath(self._path).parent)
        return "" if parent == "." else parent

    def __repr__(self) -> str:
        return f"File({self._path!r}, {len(self.content)} chars)"


@dataclass
class TreeChanges:
    """Paths that differ from the snapshot the tree was loaded with."""

    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.added or self.modified or self.deleted)


# ═══════════════════════════════════════════════════════════════════════════
# PROJECT TREE
# ═══════════════════════════════════════════════════════════════════════════


class ProjectTree:
    """
    Mutable file-tree model shared by every operation of a pipeline.

    Every mutation is visible immediately to later calls; nothing is
    batched and nothing is rolled back.
    """

    def __init__(
        self,
        name: str,
        files: dict[str, str] | None = None,
        root: Path | None = None,
        encoding: str = "utf-8",
    ):
        self.name = name
        self.root = root
        self.encoding = encoding
        self._files: dict[str, File] = {}
        for path, content in (files or {}).items():
            file = File(path, content)
            self._files[file.path] = file
        self._snapshot: dict[str, str] = self.contents()

    # ─── Lookup ──────────────────────────────────────────────────────────

    def find_file(self, path: str) -> File:
        """
        Return the file at ``path``.

        Raises:
            NotFound: if the path is not in the tree
            InvalidPath: if the path is absolute or escapes the root
        """
        key = normalize_path(path)
        try:
            return self._files[key]
        except KeyError:
            raise NotFound(key) from None

    def has_file(self, path: str) -> bool:
        return normalize_path(path) in self._files

    def all_files(self, predicate: Callable[[File], bool] | None = None) -> list[File]:
        """Return files in path order, optionally filtered by ``predicate``."""
        files = [self._files[p] for p in sorted(self._files)]
        if predicate is None:
            return files
        return [f for f in files if predicate(f)]

    @property
    def paths(self) -> list[str]:
        return sorted(self._files)

    def contents(self) -> dict[str, str]:
        """Return a ``{path: content}`` copy of the tree."""
        return {p: f.content for p, f in self._files.items()}

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.has_file(path)

    def __iter__(self) -> Iterator[File]:
        return iter(self.all_files())

    def __len__(self) -> int:
        return len(self._files)

    # ─── Mutation ────────────────────────────────────────────────────────

    def add_file(self, path: str, content: str = "") -> File:
        """
        Create a new file.

        Raises:
            PathConflict: if the path already exists
        """
        file = File(path, content)
        if file.path in self._files:
            raise PathConflict(file.path)
        self._files[file.path] = file
        logger.debug(f"Added {file.path}")
        return file

    def delete_file(self, path: str) -> None:
        """
        Remove a file.

        Raises:
            NotFound: if the path is absent. Callers wanting best-effort
                deletion check ``has_file`` first.
        """
        file = self.find_file(path)
        del self._files[file.path]
        logger.debug(f"Deleted {file.path}")

    def move_file(self, old_path: str, new_path: str) -> File:
        """
        Relocate a file, keeping its content.

        Returns:
            The File now living at ``new_path``
        """
        source = self.find_file(old_path)
        target = normalize_path(new_path)
        if target == source.path:
            return source
        if target in self._files:
            raise PathConflict(target)
        moved = File(target, source.content)
        del self._files[source.path]
        self._files[target] = moved
        logger.debug(f"Moved {source.path} -> {target}")
        return moved

    # ─── Change tracking ─────────────────────────────────────────────────

    def changes(self) -> TreeChanges:
        """Compare the tree against the snapshot taken at load time."""
        current = self._files
        return TreeChanges(
            added=sorted(p for p in current if p not in self._snapshot),
            modified=sorted(
                p for p in current
                if p in self._snapshot and current[p].content != self._snapshot[p]
            ),
            deleted=sorted(p for p in self._snapshot if p not in current),
        )

    # ─── Persistence ─────────────────────────────────────────────────────

    @classmethod
    def from_directory(
        cls,
        root: str | Path,
        name: str | None = None,
        config: LatheConfig | None = None,
    ) -> "ProjectTree":
        """
        Load every text file under ``root``.

        Ignored directories and files that do not decode with the configured
        encoding are left out of the tree (and therefore left untouched on disk).
        """
        config = config or LatheConfig()
        root = Path(root).resolve()
        if not root.is_dir():
            raise NotFound(str(root), f"Project directory not found: {root}")

        ignored = set(config.ignored_dirs)
        files: dict[str, str] = {}
        skipped = 0

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in ignored)
            for filename in sorted(filenames):
                full_path = Path(dirpath) / filename
                data = full_path.read_bytes()
                if b"\x00" in data:
                    skipped += 1
                    continue
                try:
                    text = data.decode(config.encoding)
                except UnicodeDecodeError:
                    skipped += 1
                    continue
                files[full_path.relative_to(root).as_posix()] = text

        logger.debug(f"Loaded {len(files)} files from {root} ({skipped} binary skipped)")
        return cls(name or root.name, files, root=root, encoding=config.encoding)

    def save(self, root: str | Path | None = None) -> TreeChanges:
        """
        Write the tree back to disk.

        Saving to the directory the tree was loaded from applies only the
        changes; saving anywhere else writes every file.

        Returns:
            The changes that were applied
        """
        target = Path(root).resolve() if root is not None else self.root
        if target is None:
            raise ValueError("Tree has no root directory; pass one to save()")

        in_place = self.root is not None and target == self.root
        changes = self.changes()

        if in_place:
            for path in changes.deleted:
                full_path = target / path
                if full_path.exists():
                    full_path.unlink()
                    _prune_empty_dirs(full_path.parent, target)
            to_write = changes.added + changes.modified
        else:
            to_write = self.paths

        for path in to_write:
            full_path = target / path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(self._files[path].content, encoding=self.encoding)

        logger.debug(f"Saved {len(to_write)} files to {target}")
        if in_place:
            self._snapshot = self.contents()
        return changes

    def __repr__(self) -> str:
        return f"ProjectTree({self.name!r}, {len(self._files)} files)"


def _prune_empty_dirs(directory: Path, stop: Path) -> None:
    """Remove ``directory`` and its parents while they are empty, up to ``stop``."""
    while directory != stop and stop in directory.parents:
        if any(directory.iterdir()):
            return
        directory.rmdir()
        directory = directory.parent
