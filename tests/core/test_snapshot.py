"""Tests for the project snapshotter."""

from pathlib import Path

from codeforge_apply.core.snapshot import snapshot_dir


def _make_tree(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "index.ts").write_text("export {}\n")
    (root / "README.md").write_text("# demo\n")
    for ignored in ("node_modules", ".git", "dist", ".mcp_backups"):
        (root / ignored).mkdir()
        (root / ignored / "junk.txt").write_text("junk")


def test_snapshot_lists_files_sorted(tmp_path: Path) -> None:
    """Test relative posix paths in sorted walk order."""
    _make_tree(tmp_path)

    files = snapshot_dir(tmp_path)

    assert [f.path for f in files] == ["README.md", "src/index.ts"]
    assert files[1].content == "export {}\n"


def test_custom_ignore_list(tmp_path: Path) -> None:
    """Test that a caller-supplied ignore list replaces the default."""
    _make_tree(tmp_path)

    files = snapshot_dir(tmp_path, ignore=["src", ".git"])

    paths = [f.path for f in files]
    assert "src/index.ts" not in paths
    assert "node_modules/junk.txt" in paths


def test_large_files_are_skipped(tmp_path: Path) -> None:
    """Test that files above the size limit are left out."""
    (tmp_path / "big.bin").write_bytes(b"x" * 2048)
    (tmp_path / "small.txt").write_text("ok")

    files = snapshot_dir(tmp_path, max_file_size=1024)

    assert [f.path for f in files] == ["small.txt"]


def test_long_content_is_truncated(tmp_path: Path) -> None:
    """Test truncation marker on long files."""
    (tmp_path / "long.txt").write_text("a" * 50)

    files = snapshot_dir(tmp_path, max_content=10)

    assert files[0].content == "a" * 10 + "\n/* ...truncated... */"


def test_binary_content_is_replaced(tmp_path: Path) -> None:
    """Test that undecodable bytes do not abort the snapshot."""
    (tmp_path / "blob.bin").write_bytes(b"\xff\xfeok")

    files = snapshot_dir(tmp_path)

    assert files[0].content.endswith("ok")


def test_missing_root_is_empty(tmp_path: Path) -> None:
    """Test that a missing root yields no entries."""
    assert snapshot_dir(tmp_path / "nope") == []


def test_snapshot_of_generated_project(sample_project: Path) -> None:
    """Test a typical generated project tree."""
    files = {f.path: f.content for f in snapshot_dir(sample_project)}

    assert sorted(files) == ["README.md", "package.json", "src/index.ts"]
    assert files["src/index.ts"] == "export const answer = 42;\n"
