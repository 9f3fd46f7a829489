"""Batch-scoped backup store.

Backups are byte-for-byte copies of a file's pre-mutation content, written
under ``<root>/.mcp_backups/<batch_id>/``. They are never moved, pruned, or
deleted by the engine, including after a rollback.
"""

import shutil
import time
from pathlib import Path

from codeforge_apply.core.constants import BACKUP_DIR_NAME, BACKUP_SUFFIX
from codeforge_apply.fs.paths import sanitize_relative_path
from codeforge_apply.utils.debug import debug


def get_backup_dir(root: Path, batch_id: str) -> Path:
    """Return the backup folder for a batch (not created here)."""
    return root / BACKUP_DIR_NAME / batch_id


def backup_file(original_path: Path, backup_dir: Path, *, root: Path) -> Path:
    """Copy a file into the batch backup folder.

    The name is the sanitized relative path plus a millisecond timestamp and
    ``.bak``. A numeric counter is added when that name is already taken, so
    repeated backups of one path within a batch never overwrite each other.

    Args:
        original_path: Absolute path of the file to back up
        backup_dir: Batch backup folder, created if missing
        root: Project root used to build the relative name

    Returns:
        Path of the backup copy

    Raises:
        OSError: If the folder cannot be created or the copy fails
    """
    backup_dir.mkdir(parents=True, exist_ok=True)

    stem = f"{sanitize_relative_path(original_path, root)}.{int(time.time() * 1000)}"
    backup_path = backup_dir / f"{stem}{BACKUP_SUFFIX}"
    counter = 0

    with open(original_path, "rb") as src_handle:
        while True:
            try:
                dst_handle = open(backup_path, "xb")
            except FileExistsError:
                counter += 1
                backup_path = backup_dir / f"{stem}-{counter}{BACKUP_SUFFIX}"
                continue
            break

        try:
            with dst_handle:
                shutil.copyfileobj(src_handle, dst_handle)
            shutil.copystat(original_path, backup_path)
        except BaseException:
            backup_path.unlink(missing_ok=True)
            raise

    debug(f"Backed up {original_path} to: {backup_path}")
    return backup_path
