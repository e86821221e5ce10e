"""Tests for the ProjectTree model.

Covers:
- Lookup failures and path normalization
- Add, move and delete semantics
- Change tracking against the load snapshot
- Loading from and saving to disk
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lathe.config import LatheConfig
from lathe.errors import InvalidPath, LatheError, NotFound, PathConflict
from lathe.tree import File, ProjectTree, normalize_path


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class TestNormalizePath:
    def test_strips_dot_segments(self):
        assert normalize_path("./src//main/App.java") == "src/main/App.java"

    def test_converts_backslashes(self):
        assert normalize_path("src\\main\\App.java") == "src/main/App.java"

    @pytest.mark.parametrize("bad", ["/etc/passwd", "../outside", "a/../../b", "", "."])
    def test_rejects_escaping_paths(self, bad):
        with pytest.raises(InvalidPath):
            normalize_path(bad)

    def test_invalid_path_is_a_lathe_error(self):
        with pytest.raises(LatheError, match="must be relative"):
            normalize_path("/README.md")


class TestFile:
    def test_path_is_read_only(self):
        file = File("src/App.java", "class App {}")
        with pytest.raises(AttributeError):
            file.path = "other.java"

    def test_path_parts(self):
        file = File("src/main/App.java")
        assert file.name == "App.java"
        assert file.stem == "App"
        assert file.suffix == ".java"
        assert file.directory == "src/main"
        assert File("pom.xml").directory == ""


# ---------------------------------------------------------------------------
# Accessor
# ---------------------------------------------------------------------------


class TestAccessor:
    def test_find_file_returns_live_file(self, skeleton_tree):
        readme = skeleton_tree.find_file("README.md")
        readme.content = "changed"
        assert skeleton_tree.find_file("./README.md").content == "changed"

    def test_find_missing_file_raises(self, skeleton_tree):
        with pytest.raises(NotFound) as exc:
            skeleton_tree.find_file("missing.txt")
        assert exc.value.path == "missing.txt"

    def test_delete_missing_file_raises(self, skeleton_tree):
        with pytest.raises(NotFound):
            skeleton_tree.delete_file("missing.txt")

    def test_delete_file(self, skeleton_tree):
        skeleton_tree.delete_file("LICENSE")
        assert not skeleton_tree.has_file("LICENSE")
        assert "LICENSE" not in skeleton_tree

    def test_add_file_conflict(self, skeleton_tree):
        with pytest.raises(PathConflict):
            skeleton_tree.add_file("README.md", "dup")

    def test_move_file_keeps_content(self, skeleton_tree):
        original = skeleton_tree.find_file("LICENSE").content
        moved = skeleton_tree.move_file("LICENSE", "docs/LICENSE.txt")
        assert moved.path == "docs/LICENSE.txt"
        assert moved.content == original
        assert not skeleton_tree.has_file("LICENSE")

    def test_move_onto_existing_path_raises(self, skeleton_tree):
        with pytest.raises(PathConflict):
            skeleton_tree.move_file("LICENSE", "README.md")

    def test_all_files_sorted_and_filtered(self, skeleton_tree):
        paths = [f.path for f in skeleton_tree.all_files()]
        assert paths == sorted(paths)

        java = skeleton_tree.all_files(lambda f: f.suffix == ".java")
        assert len(java) == 4
        assert all(f.path.endswith(".java") for f in java)


class TestChanges:
    def test_fresh_tree_has_no_changes(self, skeleton_tree):
        assert skeleton_tree.changes().empty

    def test_reports_added_modified_deleted(self, skeleton_tree):
        skeleton_tree.add_file("NEW.md", "new")
        skeleton_tree.find_file("README.md").content = "different"
        skeleton_tree.delete_file("LICENSE")
        skeleton_tree.move_file(".travis.yml", "ci/.travis.yml")

        changes = skeleton_tree.changes()
        assert changes.added == ["NEW.md", "ci/.travis.yml"]
        assert changes.modified == ["README.md"]
        assert changes.deleted == [".travis.yml", "LICENSE"]

    def test_content_restored_is_not_modified(self, skeleton_tree):
        readme = skeleton_tree.find_file("README.md")
        original = readme.content
        readme.content = "x"
        readme.content = original
        assert skeleton_tree.changes().empty


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestDisk:
    def test_from_directory_skips_ignored_and_binary(self, skeleton_dir):
        tree = ProjectTree.from_directory(skeleton_dir)
        assert tree.name == "my-service"
        assert tree.has_file("pom.xml")
        assert tree.has_file(".circleci/config.yml")
        assert not tree.has_file(".git/HEAD")
        assert not tree.has_file("mvnw.jar")

    def test_from_directory_honours_config(self, skeleton_dir):
        config = LatheConfig(ignored_dirs=[".git", "src"])
        tree = ProjectTree.from_directory(skeleton_dir, name="custom", config=config)
        assert tree.name == "custom"
        assert not any(p.startswith("src/") for p in tree.paths)

    def test_from_missing_directory_raises(self, tmp_path):
        with pytest.raises(NotFound):
            ProjectTree.from_directory(tmp_path / "nope")

    def test_save_in_place_applies_changes(self, skeleton_dir):
        tree = ProjectTree.from_directory(skeleton_dir)
        tree.find_file("README.md").content = "# my-service\n"
        tree.delete_file("LICENSE")
        tree.move_file(
            "src/test/java/com/example/skeleton/SkeletonApplicationTests.java",
            "src/test/java/com/acme/AppTests.java",
        )

        changes = tree.save()

        assert (skeleton_dir / "README.md").read_text() == "# my-service\n"
        assert not (skeleton_dir / "LICENSE").exists()
        assert (skeleton_dir / "src/test/java/com/acme/AppTests.java").exists()
        # Emptied directories are pruned, shared parents are kept
        assert not (skeleton_dir / "src/test/java/com/example").exists()
        assert (skeleton_dir / "src/test/java/com").is_dir()
        # Untracked files survive
        assert (skeleton_dir / "mvnw.jar").exists()
        assert (skeleton_dir / ".git" / "HEAD").exists()

        assert "README.md" in changes.modified
        assert tree.changes().empty

    def test_save_elsewhere_writes_everything(self, skeleton_tree, tmp_path: Path):
        target = tmp_path / "export"
        skeleton_tree.save(target)
        assert (target / "pom.xml").read_text() == skeleton_tree.find_file("pom.xml").content
        assert (target / "src/main/java/com/example/skeleton/web/SkeletonController.java").exists()

    def test_save_without_root_raises(self, skeleton_tree):
        with pytest.raises(ValueError):
            skeleton_tree.save()
