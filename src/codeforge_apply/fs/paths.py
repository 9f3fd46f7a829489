"""Path utilities for filesystem operations.

This module provides the project-root path guard plus the naming helpers
used for temporary and backup files.
"""

import time
import uuid
from pathlib import Path

from codeforge_apply.core.constants import BACKUP_SEPARATOR, TEMP_SUFFIX
from codeforge_apply.core.errors import PathEscapeError
from codeforge_apply.utils.debug import debug


def resolve_within_root(root: Path, relative_path: str) -> Path:
    """Resolve an operation path against the project root.

    Symlinked directories along the way are followed, so a directory link
    that points outside the root is an escape. The final segment is kept as
    named: an operation on a symlinked file acts on the link itself.

    Args:
        root: Project root directory
        relative_path: Path as supplied by the operation

    Returns:
        Absolute path equal to ``root`` or located beneath it

    Raises:
        PathEscapeError: If the resolved path lies outside ``root``
    """
    root = root.resolve()
    joined = root / relative_path
    if joined.name in ("", ".", ".."):
        candidate = joined.resolve()
    else:
        candidate = joined.parent.resolve() / joined.name

    if candidate == root or candidate.is_relative_to(root):
        return candidate

    raise PathEscapeError(relative_path, root)


def ensure_parent_dir(path: Path) -> list[Path]:
    """Ensure parent directory exists for a path.

    Args:
        path: Path whose parent directory should exist

    Returns:
        Directories that were created, outermost first

    Raises:
        OSError: If parent directory cannot be created
    """
    missing: list[Path] = []
    parent = path.parent
    while not parent.exists():
        missing.append(parent)
        parent = parent.parent

    if missing:
        path.parent.mkdir(parents=True, exist_ok=True)

    return list(reversed(missing))


def remove_created_dirs(created_dirs: list[Path]) -> None:
    """Remove directories made by :func:`ensure_parent_dir`, deepest first.

    Stops at the first directory that cannot be removed, which is usually one
    that still holds other files.
    """
    for directory in reversed(created_dirs):
        try:
            directory.rmdir()
        except OSError as e:
            debug(f"Left directory in place: {directory} ({e})")
            return


def get_temp_path(target: Path) -> Path:
    """Get a unique sibling path for staging an atomic write.

    Args:
        target: File that will eventually be replaced

    Returns:
        Path in the same directory, so the final rename stays on one device
    """
    millis = int(time.time() * 1000)
    unique_id = uuid.uuid4().hex[:8]
    return target.with_name(f"{target.name}.{millis}.{unique_id}{TEMP_SUFFIX}")


def sanitize_relative_path(path: Path, root: Path) -> str:
    """Flatten a path under ``root`` into a single file-name-safe string.

    Args:
        path: Absolute path beneath ``root``
        root: Project root

    Returns:
        Relative path with separators replaced, e.g. ``src_app_main.py``
    """
    relative = path.relative_to(root)
    return BACKUP_SEPARATOR.join(relative.parts)
