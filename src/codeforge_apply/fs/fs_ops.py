"""Transactional apply engine for file operation batches.

This module applies an ordered batch of create/update/delete operations
against a project root. Operations run strictly in input order; each write is
atomic, destructive mutations are backed up first, and the first failure ends
the batch and, when enabled, rolls back everything applied before it.
"""

import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from codeforge_apply.core.config import ApplyConfig
from codeforge_apply.core.constants import (
    MSG_ALREADY_EXISTS,
    MSG_CONTENT_IDENTICAL,
    MSG_CREATED_WAS_MISSING,
    MSG_DRY_RUN_BACKUP,
    MSG_DRY_RUN_CREATE,
    MSG_DRY_RUN_NO_DELETE,
    MSG_DRY_RUN_NO_WRITE,
    MSG_FILE_NOT_FOUND,
    MSG_INVALID_SHAPE,
)
from codeforge_apply.core.payload import parse_operations
from codeforge_apply.core.schemas import (
    ActionType,
    BatchReport,
    CreateOperation,
    DeleteOperation,
    InvalidOperation,
    Operation,
    OperationResult,
    OperationStatus,
    UpdateOperation,
)
from codeforge_apply.fs.atomic import write_atomic
from codeforge_apply.fs.backup import backup_file, get_backup_dir
from codeforge_apply.fs.manifest import BatchJournal
from codeforge_apply.fs.paths import resolve_within_root
from codeforge_apply.fs.undo import UndoRecord, rollback
from codeforge_apply.utils.debug import debug

ResultCallback = Callable[[int, OperationResult], None]

_Step = tuple[OperationResult, UndoRecord | None]


class _BatchContext:
    """Per-batch state passed explicitly to every operation handler."""

    def __init__(self, config: ApplyConfig, batch_id: str) -> None:
        self.root: Path = config.project_root
        self.dry_run = config.dry_run
        self.backup_dir: Path | None = (
            get_backup_dir(self.root, batch_id) if config.backup else None
        )
        self.backups_taken = 0

    def take_backup(self, target: Path) -> Path | None:
        if self.backup_dir is None:
            return None
        backup_path = backup_file(target, self.backup_dir, root=self.root)
        self.backups_taken += 1
        return backup_path


def new_batch_id() -> str:
    """Return a millisecond timestamp identifying a new batch."""
    return str(int(time.time() * 1000))


def _result(
    op: Operation,
    status: OperationStatus,
    message: str | None = None,
    backup_path: Path | None = None,
) -> OperationResult:
    return OperationResult(
        path=op.path,
        action=ActionType(op.action),
        status=status,
        message=message,
        backup_path=backup_path,
    )


def _failed(op: Operation | InvalidOperation, message: str) -> OperationResult:
    action: ActionType | None = None
    if op.action in {a.value for a in ActionType}:
        action = ActionType(op.action)
    return OperationResult(
        path=op.path, action=action, status=OperationStatus.FAILED, message=message
    )


def _apply_create(
    op: CreateOperation | UpdateOperation,
    target: Path,
    index: int,
    ctx: _BatchContext,
    *,
    applied_message: str | None = None,
    dry_run_message: str = MSG_DRY_RUN_NO_WRITE,
) -> _Step:
    if ctx.dry_run:
        return (
            _result(op, OperationStatus.APPLIED, dry_run_message),
            UndoRecord(operation=op, target=target, index=index),
        )

    created_dirs = write_atomic(target, op.content_bytes())
    return (
        _result(op, OperationStatus.APPLIED, applied_message),
        UndoRecord(
            operation=op,
            target=target,
            index=index,
            created=True,
            created_dirs=created_dirs,
        ),
    )


def _apply_update(
    op: UpdateOperation, target: Path, index: int, ctx: _BatchContext
) -> _Step:
    if not target.exists():
        return _apply_create(
            op,
            target,
            index,
            ctx,
            applied_message=MSG_CREATED_WAS_MISSING,
            dry_run_message=MSG_DRY_RUN_CREATE,
        )

    content = op.content_bytes()

    # Dry-run cannot tell whether the write would be a no-op.
    if not ctx.dry_run and target.read_bytes() == content:
        return _result(op, OperationStatus.SKIPPED, MSG_CONTENT_IDENTICAL), None

    backup_path = ctx.take_backup(target)

    if ctx.dry_run:
        message = MSG_DRY_RUN_BACKUP if backup_path else MSG_DRY_RUN_NO_WRITE
        return (
            _result(op, OperationStatus.APPLIED, message, backup_path),
            UndoRecord(
                operation=op, target=target, index=index, backup_path=backup_path
            ),
        )

    write_atomic(target, content)
    return (
        _result(op, OperationStatus.APPLIED, backup_path=backup_path),
        UndoRecord(
            operation=op,
            target=target,
            index=index,
            updated=True,
            backup_path=backup_path,
        ),
    )


def _apply_delete(
    op: DeleteOperation, target: Path, index: int, ctx: _BatchContext
) -> _Step:
    if not target.exists():
        return _result(op, OperationStatus.SKIPPED, MSG_FILE_NOT_FOUND), None

    backup_path = ctx.take_backup(target)

    if ctx.dry_run:
        return (
            _result(op, OperationStatus.APPLIED, MSG_DRY_RUN_NO_DELETE, backup_path),
            UndoRecord(
                operation=op, target=target, index=index, backup_path=backup_path
            ),
        )

    target.unlink(missing_ok=True)
    debug(f"Deleted: {target}")
    return (
        _result(op, OperationStatus.APPLIED, backup_path=backup_path),
        UndoRecord(
            operation=op,
            target=target,
            index=index,
            deleted=True,
            backup_path=backup_path,
        ),
    )


def apply_operation(
    op: Operation | InvalidOperation, index: int, ctx: _BatchContext
) -> _Step:
    """Apply one operation.

    Args:
        op: Validated operation, or a shape-failure marker
        index: Position of the operation in the batch
        ctx: Batch state

    Returns:
        The operation result and, if the operation took effect, its undo record

    Raises:
        PathEscapeError: If the path resolves outside the project root
        OSError: If any filesystem step fails
    """
    if isinstance(op, InvalidOperation):
        message = MSG_INVALID_SHAPE
        if op.reason:
            message = f"{MSG_INVALID_SHAPE}: {op.reason}"
        return _failed(op, message), None

    target = resolve_within_root(ctx.root, op.path)

    if isinstance(op, CreateOperation):
        if target.exists():
            return _result(op, OperationStatus.SKIPPED, MSG_ALREADY_EXISTS), None
        return _apply_create(op, target, index, ctx)
    if isinstance(op, UpdateOperation):
        return _apply_update(op, target, index, ctx)
    return _apply_delete(op, target, index, ctx)


class _PendingJournal:
    """Buffers journal entries until the batch has written its first backup.

    Batches that never back anything up leave no trace under the backup
    folder.
    """

    def __init__(self, journal: BatchJournal | None, ctx: _BatchContext) -> None:
        self.journal = journal
        self._ctx = ctx
        self._pending: list[dict[str, Any]] = []

    def record(self, entry: dict[str, Any]) -> None:
        if self.journal is None:
            return
        self._pending.append(entry)
        if not self._ctx.backups_taken:
            return
        try:
            for pending in self._pending:
                self.journal.append(pending)
        except OSError as e:
            debug(f"Failed to write batch journal {self.journal.path}: {e}")
        finally:
            self._pending.clear()

    def close(self) -> Path | None:
        """Close the journal and return its path if anything was written."""
        if self.journal is None:
            return None
        self.journal.close()
        return self.journal.path if self.journal.path.exists() else None


def apply_operations(
    operations: Iterable[Operation | InvalidOperation | dict[str, Any]],
    config: ApplyConfig | None = None,
    *,
    batch_id: str | None = None,
    on_result: ResultCallback | None = None,
) -> BatchReport:
    """Apply a batch of file operations in order.

    Args:
        operations: Operations in the order they must be applied; raw
            mappings are validated first
        config: Batch options (dry-run, backup, rollback, project root)
        batch_id: Optional batch identifier; defaults to a millisecond timestamp
        on_result: Optional callback invoked with each result as it is produced

    Returns:
        BatchReport with exactly one result per attempted operation, in input
        order. Operations after the first failure are never attempted.
    """
    config = config or ApplyConfig()
    batch_id = batch_id or new_batch_id()
    ctx = _BatchContext(config, batch_id)
    parsed = parse_operations(operations)

    journal = _PendingJournal(
        BatchJournal(
            batch_id,
            ctx.root,
            ctx.backup_dir,
            dry_run=config.dry_run,
            rollback_on_error=config.rollback_on_error,
        )
        if ctx.backup_dir is not None
        else None,
        ctx,
    )
    report = BatchReport(batch_id=batch_id, backup_folder=ctx.backup_dir)
    undo_log: list[UndoRecord] = []

    debug(
        f"Applying batch {batch_id}: {len(parsed)} operations under {ctx.root} "
        f"(dry_run={config.dry_run}, backup={config.backup})"
    )

    try:
        for index, op in enumerate(parsed):
            try:
                result, record = apply_operation(op, index, ctx)
            except Exception as e:  # noqa: BLE001 - reported as a failed result
                debug(f"Operation {index} ({op.path}) failed: {e}")
                result, record = _failed(op, str(e) or type(e).__name__), None

            report.results.append(result)
            if record is not None:
                undo_log.append(record)
            journal.record(
                {"type": "result", "index": index, **result.model_dump(mode="json")}
            )
            if on_result is not None:
                try:
                    on_result(index, result)
                except Exception as e:  # noqa: BLE001 - observers never stop a batch
                    debug(f"on_result callback failed for operation {index}: {e}")

            if result.status == OperationStatus.FAILED:
                if config.rollback_on_error:
                    _rollback_batch(report, undo_log, journal)
                break
    finally:
        report.manifest_path = journal.close()

    return report


def _rollback_batch(
    report: BatchReport, undo_log: list[UndoRecord], journal: _PendingJournal
) -> None:
    debug(f"Rolling back {len(undo_log)} records for batch {report.batch_id}")
    outcome = rollback(undo_log)

    for index in outcome.reverted:
        report.results[index].rolled_back = True
    report.rolled_back = True
    report.rollback_errors = outcome.issues

    journal.record(
        {
            "type": "rollback",
            "reverted": sorted(outcome.reverted),
            "issues": [issue.model_dump(mode="json") for issue in outcome.issues],
        }
    )
