"""Tests for the textual rewriter.

Covers:
- Literal replacement counts, no-op and round-trip behaviour
- Regex first-match and all-match substitution with capture groups
- Rejection of nested quantifiers and quantified alternation
- Tree-wide replacement
"""

from __future__ import annotations

import pytest

from lathe.errors import UnsafePattern
from lathe.text import (
    check_pattern,
    regexp_replace,
    replace,
    replace_in_tree,
    set_content,
)
from lathe.tree import File, ProjectTree


pytestmark = pytest.mark.unit


class TestSetContent:
    def test_discards_earlier_edits(self):
        file = File("notes.txt", "alpha")
        replace(file, "alpha", "beta")
        set_content(file, "fresh")
        assert file.content == "fresh"


class TestLiteralReplace:
    def test_replaces_every_occurrence(self):
        file = File("a.txt", "foo bar foo baz foo")
        assert replace(file, "foo", "qux") == 3
        assert file.content == "qux bar qux baz qux"

    def test_non_overlapping_left_to_right(self):
        file = File("a.txt", "aaaa")
        assert replace(file, "aa", "b") == 2
        assert file.content == "bb"

    def test_zero_occurrences_is_noop(self):
        file = File("a.txt", "nothing here")
        assert replace(file, "missing", "x") == 0
        assert file.content == "nothing here"

    def test_empty_literal_rejected(self):
        with pytest.raises(ValueError):
            replace(File("a.txt", "x"), "", "y")

    @pytest.mark.parametrize(
        "content,literal,replacement",
        [
            ("my-company-domain is great", "my-company-domain", "my-service"),
            ("Skeleton and SkeletonService", "Skeleton", "Widget"),
            ("no match at all", "absent", "present"),
        ],
    )
    def test_round_trip_restores_original(self, content, literal, replacement):
        file = File("a.txt", content)
        replace(file, literal, replacement)
        replace(file, replacement, literal)
        assert file.content == content


class TestRegexReplace:
    def test_first_match_only_by_default(self):
        file = File("a.txt", "v1 v2 v3")
        assert regexp_replace(file, r"v(\d)", r"version-\1") == 1
        assert file.content == "version-1 v2 v3"

    def test_all_matches_with_count_zero(self):
        file = File("a.txt", "v1 v2 v3")
        assert regexp_replace(file, r"v(\d)", r"version-\1", count=0) == 3
        assert file.content == "version-1 version-2 version-3"

    @pytest.mark.parametrize("pattern", [r"\d{4}-\d{2}", r"^### Removed", r"HEAD\n\n## \[9\.9\.9\]"])
    def test_no_match_leaves_content(self, pattern):
        content = "## [Unreleased]\n\n1.2.3...HEAD\n\n### Added\n"
        file = File("CHANGELOG.md", content)
        assert regexp_replace(file, pattern, "anything") == 0
        assert file.content == content

    def test_deletes_region(self):
        file = File("a.txt", "keep <!-- drop me --> keep")
        regexp_replace(file, r"<!--[\S\s]*?-->", "")
        assert file.content == "keep  keep"

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            regexp_replace(File("a.txt", "x"), "x", "y", count=-1)

    def test_unsafe_pattern_rejected_before_edit(self):
        file = File("a.txt", "aaaa")
        with pytest.raises(UnsafePattern):
            regexp_replace(file, r"(a+)+$", "b")
        assert file.content == "aaaa"

    def test_overlapping_alternation_rejected_before_edit(self):
        file = File("a.txt", "a" * 34)
        with pytest.raises(UnsafePattern, match="quantified alternation"):
            regexp_replace(file, r"(a|aa)*c", "x")
        assert file.content == "a" * 34


class TestCheckPattern:
    @pytest.mark.parametrize(
        "pattern",
        [
            r"(a+)+",
            r"(\w*\s)*",
            r"((ab)*)+",
            r"(a{2,})*",
            r"(?:x+y)+",
            r"(a|aa)*c",
            r"(a|a)*$",
            r"((a|aa))+",
            r"(?:x|y){2,}",
        ],
    )
    def test_ambiguous_repetition_rejected(self, pattern):
        with pytest.raises(UnsafePattern):
            check_pattern(pattern)

    @pytest.mark.parametrize(
        "pattern",
        [
            r"[\S\s]*",
            r"\d+\.\d+\.\d+\.\.\.HEAD\n\n[\S\s]*## \[0\.1\.0\]",
            r"(\n### Added\n)[\S\s]*",
            r"(ab)+",
            r"\(a+\)+",
            r"[(a+)]+",
            r"(a+)?",
            r"(a|b)?",
            r"(foo|bar)-[ab]*",
            r"a|b*",
        ],
    )
    def test_safe_patterns_accepted(self, pattern):
        check_pattern(pattern)

    def test_unsafe_pattern_is_value_error(self):
        with pytest.raises(ValueError):
            check_pattern(r"(a*)*")


class TestReplaceInTree:
    def test_replaces_across_all_files(self):
        tree = ProjectTree("demo", {
            "README.md": "Foo docs",
            "src/Foo.java": "class Foo {}",
            "pom.xml": "<name>bar</name>",
        })
        assert replace_in_tree(tree, "Foo", "Bar") == 2
        assert tree.find_file("README.md").content == "Bar docs"
        assert tree.find_file("src/Foo.java").content == "class Bar {}"
        assert tree.find_file("pom.xml").content == "<name>bar</name>"

    def test_predicate_limits_scope(self):
        tree = ProjectTree("demo", {"a.md": "Foo", "b.txt": "Foo"})
        replace_in_tree(tree, "Foo", "Bar", lambda f: f.suffix == ".md")
        assert tree.find_file("a.md").content == "Bar"
        assert tree.find_file("b.txt").content == "Foo"
