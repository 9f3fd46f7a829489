"""CLI entry point for applying a batch of file operations."""

from __future__ import annotations

import importlib
import json
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

import structlog
from rich.console import Console

from codeforge_apply.chains.apply_chain import ApplyChain, ApplyOptions
from codeforge_apply.core.config import resolve_project_root
from codeforge_apply.core.errors import ShapeError
from codeforge_apply.core.payload import load_payload

app: TyperType = typer.Typer(help="Apply a batch of file operations to a project.")


RootOption = Annotated[
    Path | None,
    typer.Option(
        "--root",
        help="Project root (defaults to $CODEFORGE_PROJECT_ROOT or the cwd).",
    ),
]
OpsOption = Annotated[
    str,
    typer.Option(
        "--ops",
        help="JSON payload file with an `operations` array, or '-' for stdin.",
    ),
]
DryRunFlag = Annotated[
    bool,
    typer.Option("--dry-run", help="Report what would change without writing."),
]
NoBackupFlag = Annotated[
    bool,
    typer.Option("--no-backup", help="Skip backups before update/delete."),
]
NoRollbackFlag = Annotated[
    bool,
    typer.Option("--no-rollback", help="Keep earlier changes when one fails."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit the batch report as JSON."),
]
ValidateOption = Annotated[
    str | None,
    typer.Option(
        "--validate",
        help="Command run in the project root after a successful batch.",
    ),
]


def _read_payload(ops: str) -> str:
    if ops == "-":
        return sys.stdin.read()
    return Path(ops).read_text(encoding="utf-8")


def apply_batch(  # noqa: D401
    ops: OpsOption,
    root: RootOption = None,
    dry_run: DryRunFlag = False,
    no_backup: NoBackupFlag = False,
    no_rollback: NoRollbackFlag = False,
    json_output: JsonFlag = False,
    validate: ValidateOption = None,
) -> None:
    """Apply the operations in a payload and print the batch report."""

    try:
        _, operations = load_payload(_read_payload(ops))
    except (OSError, ShapeError) as exc:
        typer.secho(f"Failed to load operations: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    opts = ApplyOptions(
        root=str(resolve_project_root(root)),
        dry_run=dry_run,
        backup=not no_backup,
        rollback_on_error=not no_rollback,
        validate_command=shlex.split(validate) if validate else None,
    )

    # Progress and structured logs go to stderr so stdout stays parseable.
    logger = structlog.wrap_logger(structlog.PrintLogger(file=sys.stderr))
    run = ApplyChain(logger=logger, ui=Console(stderr=True)).apply(operations, opts)
    report = run.report

    if json_output:
        payload = report.model_dump(mode="json")
        if run.validation is not None:
            payload["validation"] = run.validation.model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        typer.secho(
            f"applied: {report.applied_count}  skipped: {report.skipped_count}  "
            f"failed: {report.failed_count}",
            fg=typer.colors.GREEN if report.succeeded else typer.colors.RED,
        )
        if report.backup_folder is not None:
            typer.echo(f"backups: {report.backup_folder}")

    if not report.succeeded:
        raise typer.Exit(code=1)
    if run.validation is not None and not run.validation.success:
        raise typer.Exit(code=1)


def run_cli(args: Sequence[str] | None = None) -> None:
    app(args=args)


app.command("apply")(apply_batch)
