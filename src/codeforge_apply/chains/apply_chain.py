"""Apply chain for orchestrating file operation batches.

This module provides the ApplyChain class that sits between an external
planner and the apply engine: it runs a batch with structured logging and
Rich console output, and optionally validates the project afterwards with a
shell command.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from codeforge_apply.core.config import ApplyConfig
from codeforge_apply.core.runner import run_command_sync
from codeforge_apply.core.schemas import (
    BatchReport,
    CommandResult,
    InvalidOperation,
    Operation,
    OperationResult,
    OperationStatus,
)
from codeforge_apply.fs.fs_ops import apply_operations, new_batch_id


@dataclass
class ApplyOptions:
    """Options for apply operations.

    Attributes:
        root: Project root the batch is applied against
        dry_run: Simulate writes and removals
        backup: Back up files before they are overwritten or deleted
        rollback_on_error: Revert the batch on the first failure
        validate_command: Optional command (argv list) run after a successful
            batch, e.g. ``["npm", "run", "build"]``
        validate_timeout: Seconds before the validation command is killed
    """

    root: str
    dry_run: bool = False
    backup: bool = True
    rollback_on_error: bool = True
    validate_command: Sequence[str] | None = None
    validate_timeout: float | None = None


@dataclass
class ApplyRun:
    """Outcome of an ApplyChain run.

    Attributes:
        report: Batch report from the apply engine
        validation: Result of the validation command, if one ran
    """

    report: BatchReport
    validation: CommandResult | None = None


class ApplyChain:
    """Orchestrates apply batches with structured logging and Rich output."""

    def __init__(self, logger: Any = None, ui: Console | None = None) -> None:
        """Initialize apply chain.

        Args:
            logger: Optional structlog logger instance
            ui: Optional Rich console for output
        """
        self._logger = logger or structlog.get_logger()
        self._ui = ui or Console()

    def apply(
        self,
        operations: Iterable[Operation | InvalidOperation | dict[str, Any]],
        opts: ApplyOptions,
    ) -> ApplyRun:
        """Apply a batch of operations, then optionally validate the project.

        Args:
            operations: Operations in the order they must be applied
            opts: Apply options

        Returns:
            ApplyRun with the batch report and validation result
        """
        items = list(operations)
        config = ApplyConfig(
            project_root=Path(opts.root),
            dry_run=opts.dry_run,
            backup=opts.backup,
            rollback_on_error=opts.rollback_on_error,
        )
        batch_id = new_batch_id()

        bound_logger = self._logger.bind(
            batch_id=batch_id,
            root=str(config.project_root),
            dry_run=config.dry_run,
            backup=config.backup,
            rollback_on_error=config.rollback_on_error,
        )

        with self._create_progress() as progress:
            task = progress.add_task(
                "Apply (dry run)" if config.dry_run else "Apply",
                total=len(items),
            )

            def on_result(index: int, result: OperationResult) -> None:
                bound_logger.info(
                    "apply.item",
                    index=index,
                    path=result.path,
                    action=result.action.value if result.action else None,
                    status=result.status.value,
                    message=result.message,
                    backup_path=str(result.backup_path)
                    if result.backup_path
                    else None,
                )
                self._show_item_result(result)
                progress.advance(task)

            report = apply_operations(
                items, config, batch_id=batch_id, on_result=on_result
            )

        if report.rolled_back:
            self._show_rollback(report)
            bound_logger.warning(
                "apply.rollback",
                reverted=sum(1 for r in report.results if r.rolled_back),
                issues=[issue.model_dump() for issue in report.rollback_errors],
            )

        bound_logger.info(
            "apply.summary",
            batch_id=report.batch_id,
            total_items=len(items),
            attempted=len(report.results),
            applied_count=report.applied_count,
            skipped_count=report.skipped_count,
            failed_count=report.failed_count,
            rolled_back=report.rolled_back,
            backup_folder=str(report.backup_folder) if report.backup_folder else None,
        )

        run = ApplyRun(report=report)
        if opts.validate_command:
            run.validation = self._validate(opts, config, report, bound_logger)
        return run

    def _validate(
        self,
        opts: ApplyOptions,
        config: ApplyConfig,
        report: BatchReport,
        bound_logger: Any,
    ) -> CommandResult | None:
        """Run the validation command when the batch really changed the tree."""
        if config.dry_run or not report.succeeded:
            bound_logger.info(
                "apply.validate.skipped",
                reason="dry_run" if config.dry_run else "batch_failed",
            )
            return None

        command, *args = list(opts.validate_command or [])
        result = run_command_sync(
            command,
            args,
            cwd=config.project_root,
            timeout=opts.validate_timeout,
        )

        bound_logger.info(
            "apply.validate",
            command=command,
            args=args,
            success=result.success,
            exit_code=result.exit_code,
        )
        if result.success:
            self._ui.print(f"✅ [green]VALIDATED[/green] {command} {' '.join(args)}")
        else:
            self._ui.print(
                f"❌ [red]VALIDATION FAILED[/red] {command} {' '.join(args)} "
                f"({escape(result.error_detail or 'no output')})"
            )
        return result

    def _create_progress(self) -> Progress:
        """Create Rich progress display."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self._ui,
            transient=False,
        )

    def _show_item_result(self, result: OperationResult) -> None:
        """Show Rich output for item result."""
        action = result.action.value if result.action else "?"
        path = escape(result.path)
        detail = f" ({escape(result.message)})" if result.message else ""
        if result.status == OperationStatus.APPLIED:
            self._ui.print(f"✅ [green]APPLIED[/green] {action} {path}{detail}")
        elif result.status == OperationStatus.SKIPPED:
            self._ui.print(f"⚠️ [yellow]SKIPPED[/yellow] {action} {path}{detail}")
        elif result.status == OperationStatus.FAILED:
            self._ui.print(f"❌ [red]FAILED[/red] {action} {path}{detail}")

    def _show_rollback(self, report: BatchReport) -> None:
        """Show Rich output for a rollback walk."""
        self._ui.print("🔄 [yellow]Rolled back batch[/yellow]")
        for result in report.results:
            if result.rolled_back:
                self._ui.print(f"↩️ [blue]Reverted[/blue] {escape(result.path)}")
        for issue in report.rollback_errors:
            self._ui.print(
                f"❌ [red]Failed to restore[/red] {escape(issue.path)}: "
                f"{escape(issue.error)}"
            )
