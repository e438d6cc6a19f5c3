import os
from pathlib import Path

import pytest

from notesvn.exceptions import ConfigurationError
from notesvn.svn import PathResolver, ancestors_until, is_same_or_descendant, normalize_path


class TestNormalizePath:
    def test_collapses_dot_segments(self, tmp_path: Path) -> None:
        assert normalize_path(tmp_path / "a" / ".." / "b" / ".") == str(tmp_path / "b")

    def test_relative_paths_become_absolute(self) -> None:
        assert os.path.isabs(normalize_path("notes/a.md"))


class TestIsSameOrDescendant:
    def test_equal_paths_match(self) -> None:
        assert is_same_or_descendant("/v/a", "/v/a")

    def test_child_matches(self) -> None:
        assert is_same_or_descendant("/v/a/x.md", "/v/a")

    def test_sibling_with_shared_prefix_does_not_match(self) -> None:
        assert not is_same_or_descendant("/v/ab", "/v/a")

    def test_parent_does_not_match_child_prefix(self) -> None:
        assert not is_same_or_descendant("/v", "/v/a")


class TestAncestorsUntil:
    def test_stops_at_bound_inclusive(self) -> None:
        assert ancestors_until("/v/a/b/c.md", "/v/a") == ["/v/a/b/c.md", "/v/a/b", "/v/a"]

    def test_path_equal_to_bound(self) -> None:
        assert ancestors_until("/v/a", "/v/a") == ["/v/a"]

    def test_without_bound_runs_to_filesystem_root(self) -> None:
        assert ancestors_until("/v/a", None) == ["/v/a", "/v", "/"]


class TestPathResolver:
    def test_resolves_relative_path_against_root(self, tmp_path: Path) -> None:
        resolver = PathResolver(tmp_path)

        assert resolver.resolve_absolute_path("notes/a.md") == str(tmp_path / "notes" / "a.md")

    def test_absolute_path_ignores_root(self, tmp_path: Path) -> None:
        resolver = PathResolver(tmp_path / "elsewhere")

        assert resolver.resolve_absolute_path(tmp_path / "x.md") == str(tmp_path / "x.md")

    def test_relative_path_without_root_raises(self) -> None:
        resolver = PathResolver()

        with pytest.raises(ConfigurationError, match="no tree root configured"):
            _ = resolver.resolve_absolute_path("notes/a.md")

    def test_finds_nearest_root(self, tmp_path: Path) -> None:
        (tmp_path / "v" / ".svn").mkdir(parents=True)
        (tmp_path / "v" / "sub" / ".svn").mkdir(parents=True)
        note = tmp_path / "v" / "sub" / "x.md"
        note.write_text("x")

        resolver = PathResolver()

        assert resolver.find_tracked_tree_root(note) == str(tmp_path / "v" / "sub")

    def test_file_outside_nested_tree_uses_outer_root(self, tmp_path: Path) -> None:
        (tmp_path / "v" / ".svn").mkdir(parents=True)
        (tmp_path / "v" / "sub" / ".svn").mkdir(parents=True)

        resolver = PathResolver()

        assert resolver.find_tracked_tree_root(tmp_path / "v" / "top.md") == str(tmp_path / "v")

    def test_root_directory_resolves_to_itself(self, tmp_path: Path) -> None:
        (tmp_path / "v" / ".svn").mkdir(parents=True)

        resolver = PathResolver()

        assert resolver.find_tracked_tree_root(tmp_path / "v") == str(tmp_path / "v")

    def test_missing_file_searches_from_parent(self, tmp_path: Path) -> None:
        (tmp_path / "v" / ".svn").mkdir(parents=True)

        resolver = PathResolver()

        assert resolver.find_tracked_tree_root(tmp_path / "v" / "new" / "x.md") == str(
            tmp_path / "v"
        )

    def test_returns_none_outside_any_tree(self, tmp_path: Path) -> None:
        resolver = PathResolver()

        assert resolver.find_tracked_tree_root(tmp_path / "loose.md") is None
        assert not resolver.is_in_tracked_tree(tmp_path / "loose.md")

    def test_custom_marker(self, tmp_path: Path) -> None:
        (tmp_path / "v" / "_svn").mkdir(parents=True)

        resolver = PathResolver(marker="_svn")

        assert resolver.find_tracked_tree_root(tmp_path / "v" / "x.md") == str(tmp_path / "v")

    def test_marker_must_be_directory(self, tmp_path: Path) -> None:
        (tmp_path / "v").mkdir()
        (tmp_path / "v" / ".svn").write_text("not a directory")

        resolver = PathResolver()

        assert resolver.find_tracked_tree_root(tmp_path / "v" / "x.md") is None
