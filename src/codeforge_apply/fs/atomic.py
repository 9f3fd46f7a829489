"""Atomic write primitives.

Every write stages its bytes in a uniquely named sibling file, fsyncs it and
renames it over the target. The rename is the only state change a reader can
observe: the target holds either its previous content or the full new content.
"""

import os
import shutil
from pathlib import Path

from codeforge_apply.fs.paths import (
    ensure_parent_dir,
    get_temp_path,
    remove_created_dirs,
)
from codeforge_apply.utils.debug import debug


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink(missing_ok=True)
    except OSError as e:
        debug(f"Could not remove staging file {temp_path}: {e}")


def write_atomic(target: Path, data: bytes) -> list[Path]:
    """Atomically replace ``target`` with ``data``.

    Args:
        target: File to create or replace
        data: Exact bytes to write

    Returns:
        Parent directories created for the target, outermost first

    Raises:
        OSError: If staging or renaming fails; the target is left untouched
            and any directories created for it are removed again
    """
    created_dirs = ensure_parent_dir(target)
    temp_path = get_temp_path(target)

    try:
        with open(temp_path, "xb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        if target.exists():
            shutil.copymode(target, temp_path)
        os.replace(temp_path, target)
    except BaseException:
        _discard(temp_path)
        remove_created_dirs(created_dirs)
        raise

    debug(f"Atomic write: {target} ({len(data)} bytes)")
    return created_dirs


def copy_atomic(source: Path, target: Path) -> None:
    """Atomically replace ``target`` with a copy of ``source``.

    Args:
        source: File whose bytes and metadata are copied
        target: File to create or replace; parents are created as needed

    Raises:
        OSError: If the copy or rename fails; the target is left untouched
    """
    created_dirs = ensure_parent_dir(target)
    temp_path = get_temp_path(target)

    try:
        shutil.copy2(source, temp_path)
        os.replace(temp_path, target)
    except BaseException:
        _discard(temp_path)
        remove_created_dirs(created_dirs)
        raise

    debug(f"Atomic copy: {source} -> {target}")
