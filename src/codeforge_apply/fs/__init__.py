"""Filesystem operations for transactional batch apply.

This module provides the apply engine and its building blocks: the project
root path guard, atomic writes, the batch backup store, undo bookkeeping with
best-effort rollback, and the batch journal.
"""

from codeforge_apply.fs.fs_ops import apply_operations
from codeforge_apply.fs.manifest import BatchJournal
from codeforge_apply.fs.paths import resolve_within_root
from codeforge_apply.fs.undo import UndoRecord, rollback

__all__ = [
    "BatchJournal",
    "UndoRecord",
    "apply_operations",
    "resolve_within_root",
    "rollback",
]
