"""Tests for the project-root path guard and naming helpers."""

from pathlib import Path

import pytest

from codeforge_apply.core.errors import PathEscapeError
from codeforge_apply.fs.paths import (
    ensure_parent_dir,
    get_temp_path,
    resolve_within_root,
    sanitize_relative_path,
)


class TestResolveWithinRoot:
    """Path guard behaviour."""

    def test_relative_path_resolves_under_root(self, tmp_path: Path) -> None:
        resolved = resolve_within_root(tmp_path, "src/app/main.py")

        assert resolved == tmp_path.resolve() / "src" / "app" / "main.py"

    def test_root_itself_is_allowed(self, tmp_path: Path) -> None:
        assert resolve_within_root(tmp_path, ".") == tmp_path.resolve()

    def test_inner_traversal_that_stays_inside_is_allowed(self, tmp_path: Path) -> None:
        resolved = resolve_within_root(tmp_path, "src/../README.md")

        assert resolved == tmp_path.resolve() / "README.md"

    def test_parent_traversal_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(PathEscapeError) as exc_info:
            resolve_within_root(tmp_path, "../outside.txt")

        assert exc_info.value.path == "../outside.txt"
        assert "Path escapes project root" in str(exc_info.value)

    def test_sibling_with_common_prefix_is_rejected(self, tmp_path: Path) -> None:
        root = tmp_path / "app"
        root.mkdir()

        with pytest.raises(PathEscapeError):
            resolve_within_root(root, "../app-evil/file.txt")

    def test_absolute_path_inside_root_is_allowed(self, tmp_path: Path) -> None:
        inside = tmp_path / "inside.txt"

        assert resolve_within_root(tmp_path, str(inside)) == inside.resolve()

    def test_absolute_path_outside_root_is_rejected(self, tmp_path: Path) -> None:
        root = tmp_path / "proj"
        root.mkdir()

        with pytest.raises(PathEscapeError):
            resolve_within_root(root, str(tmp_path / "other.txt"))

    def test_directory_symlink_pointing_outside_is_rejected(
        self, tmp_path: Path
    ) -> None:
        root = tmp_path / "proj"
        root.mkdir()
        (tmp_path / "shared").mkdir()
        (root / "vendor").symlink_to(tmp_path / "shared", target_is_directory=True)

        with pytest.raises(PathEscapeError):
            resolve_within_root(root, "vendor/lib.js")

    def test_file_symlink_is_not_followed(self, tmp_path: Path) -> None:
        (tmp_path / "real.txt").write_text("real")
        (tmp_path / "alias.txt").symlink_to(tmp_path / "real.txt")

        resolved = resolve_within_root(tmp_path, "alias.txt")

        assert resolved == tmp_path.resolve() / "alias.txt"
        assert resolved.is_symlink()

    def test_trailing_parent_segment_is_resolved(self, tmp_path: Path) -> None:
        root = tmp_path / "proj"
        (root / "src").mkdir(parents=True)

        assert resolve_within_root(root, "src/..") == root.resolve()
        with pytest.raises(PathEscapeError):
            resolve_within_root(root, "src/../..")


class TestEnsureParentDir:
    """Parent directory creation."""

    def test_returns_created_dirs_outermost_first(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "c" / "file.txt"

        created = ensure_parent_dir(target)

        assert created == [
            tmp_path / "a",
            tmp_path / "a" / "b",
            tmp_path / "a" / "b" / "c",
        ]
        assert target.parent.is_dir()

    def test_existing_parent_creates_nothing(self, tmp_path: Path) -> None:
        assert ensure_parent_dir(tmp_path / "file.txt") == []


def test_temp_path_is_unique_sibling(tmp_path: Path) -> None:
    """Test that staging paths sit next to the target and never collide."""
    target = tmp_path / "data.json"

    first = get_temp_path(target)
    second = get_temp_path(target)

    assert first.parent == target.parent
    assert first.name.startswith("data.json.")
    assert first.suffix == ".tmp"
    assert first != second


def test_sanitize_relative_path(tmp_path: Path) -> None:
    """Test flattening nested paths into a backup-safe name."""
    path = tmp_path / "src" / "app" / "main.py"

    assert sanitize_relative_path(path, tmp_path) == "src_app_main.py"
