"""Recursive project snapshotter.

This module lists a project tree as relative paths plus text content, giving
an external planner context about the files an apply batch will touch.
"""

from collections.abc import Iterable
from pathlib import Path

from codeforge_apply.core.constants import (
    DEFAULT_MAX_CONTENT,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_SNAPSHOT_IGNORE,
    TRUNCATION_MARKER,
)
from codeforge_apply.core.schemas import FileSnapshot


def snapshot_dir(
    root: Path,
    *,
    ignore: Iterable[str] = DEFAULT_SNAPSHOT_IGNORE,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    max_content: int = DEFAULT_MAX_CONTENT,
) -> list[FileSnapshot]:
    """Snapshot every readable file under a directory.

    Args:
        root: Directory to walk recursively
        ignore: Entry names skipped at any depth
        max_file_size: Files larger than this many bytes are left out
        max_content: Content longer than this many characters is truncated

    Returns:
        FileSnapshot entries with ``/``-separated paths relative to ``root``,
        in sorted walk order. A missing or unreadable root yields no entries.
    """
    ignored = frozenset(ignore)
    snapshots: list[FileSnapshot] = []

    for file_path in _walk_directory(root, ignored):
        try:
            if file_path.stat().st_size > max_file_size:
                continue
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue

        if len(content) > max_content:
            content = content[:max_content] + TRUNCATION_MARKER

        snapshots.append(
            FileSnapshot(path=file_path.relative_to(root).as_posix(), content=content)
        )

    return snapshots


def _walk_directory(path: Path, ignored: frozenset[str]) -> list[Path]:
    """Recursively walk a directory and return all file paths.

    Args:
        path: Directory path to walk
        ignored: Entry names that are never returned or descended into

    Returns:
        List of file paths found recursively
    """
    files: list[Path] = []

    try:
        entries = sorted(path.iterdir())
    except OSError:
        return files

    for item in entries:
        if item.name in ignored:
            continue
        try:
            if item.is_dir():
                files.extend(_walk_directory(item, ignored))
            elif item.is_file():
                files.append(item)
        except OSError:
            continue

    return files
