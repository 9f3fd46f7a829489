"""Undo bookkeeping and best-effort rollback for one apply batch.

An ``UndoRecord`` is pushed for every operation that took effect (dry-run
no-ops included, with every effect flag False). ``rollback`` walks the
records last-applied-first and never raises: each step that cannot be
completed is returned as a ``RollbackIssue`` instead.
"""

from dataclasses import dataclass, field
from pathlib import Path

from codeforge_apply.core.errors import RollbackError
from codeforge_apply.core.schemas import Operation, RollbackIssue
from codeforge_apply.fs.atomic import copy_atomic
from codeforge_apply.fs.paths import remove_created_dirs
from codeforge_apply.utils.debug import debug


@dataclass
class UndoRecord:
    """What one applied operation changed, and how to reverse it.

    Attributes:
        operation: The operation that was applied
        target: Resolved absolute target path
        index: Position of the operation's result in the batch report
        created: The target did not exist and was written
        updated: An existing target was overwritten
        deleted: An existing target was removed
        backup_path: Copy of the pre-mutation content, if one was taken
        created_dirs: Parent directories created for the target, outermost first
    """

    operation: Operation
    target: Path
    index: int
    created: bool = False
    updated: bool = False
    deleted: bool = False
    backup_path: Path | None = None
    created_dirs: list[Path] = field(default_factory=list)

    @property
    def has_effect(self) -> bool:
        """True when the record describes a real filesystem change."""
        return self.created or self.updated or self.deleted


@dataclass
class RollbackOutcome:
    """Result of a rollback walk.

    Attributes:
        reverted: Report indices whose effects were fully reversed
        issues: Steps that could not be completed
    """

    reverted: list[int] = field(default_factory=list)
    issues: list[RollbackIssue] = field(default_factory=list)


def _to_issue(error: RollbackError) -> RollbackIssue:
    debug(str(error))
    return RollbackIssue(path=error.path, step=error.step, error=str(error.cause))


def revert_record(record: UndoRecord) -> list[RollbackIssue]:
    """Reverse a single record.

    Args:
        record: Undo record to reverse

    Returns:
        Issues for steps that failed; empty when the record was fully reverted
    """
    issues: list[RollbackIssue] = []
    path = record.operation.path

    if record.created:
        try:
            record.target.unlink(missing_ok=True)
            debug(f"Rollback removed created file: {record.target}")
            remove_created_dirs(record.created_dirs)
        except OSError as e:
            issues.append(_to_issue(RollbackError(path, "remove_created", e)))

    if record.updated or record.deleted:
        backup = record.backup_path
        if backup is None:
            issues.append(
                _to_issue(
                    RollbackError(
                        path,
                        "restore_backup",
                        FileNotFoundError("no backup was taken for this file"),
                    )
                )
            )
        elif not backup.exists():
            issues.append(
                _to_issue(
                    RollbackError(
                        path,
                        "restore_backup",
                        FileNotFoundError(f"backup file missing: {backup}"),
                    )
                )
            )
        else:
            try:
                copy_atomic(backup, record.target)
                debug(f"Rollback restored {record.target} from {backup}")
            except OSError as e:
                issues.append(_to_issue(RollbackError(path, "restore_backup", e)))

    return issues


def rollback(records: list[UndoRecord]) -> RollbackOutcome:
    """Reverse every record, last applied first.

    Backup files and the backup folder are left in place.

    Args:
        records: Undo records in the order they were applied

    Returns:
        RollbackOutcome with reverted indices and per-step issues
    """
    outcome = RollbackOutcome()

    for record in reversed(records):
        if not record.has_effect:
            continue
        try:
            issues = revert_record(record)
        except Exception as e:  # noqa: BLE001 - rollback must not raise
            step = "remove_created" if record.created else "restore_backup"
            issues = [_to_issue(RollbackError(record.operation.path, step, e))]
        if issues:
            outcome.issues.extend(issues)
        else:
            outcome.reverted.append(record.index)

    return outcome
