"""CLI command for snapshotting a project tree."""

from __future__ import annotations

import importlib
import json
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from codeforge_apply.core.config import resolve_project_root
from codeforge_apply.core.constants import DEFAULT_MAX_CONTENT
from codeforge_apply.core.snapshot import snapshot_dir

app: TyperType = typer.Typer(help="List project files with their content.")

RootOption = Annotated[
    Path | None,
    typer.Option(
        "--root",
        help="Project root (defaults to $CODEFORGE_PROJECT_ROOT or the cwd).",
    ),
]
MaxContentOption = Annotated[
    int,
    typer.Option("--max-content", help="Truncate content after N characters."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit paths and content as JSON."),
]


def snapshot(
    root: RootOption = None,
    max_content: MaxContentOption = DEFAULT_MAX_CONTENT,
    json_output: JsonFlag = False,
) -> None:
    """Print the files a planner would see for this project."""

    files = snapshot_dir(resolve_project_root(root), max_content=max_content)

    if json_output:
        typer.echo(json.dumps([f.model_dump() for f in files], indent=2))
        return

    for entry in files:
        typer.echo(entry.path)


def run_cli(args: Sequence[str] | None = None) -> None:
    app(args=args)


app.command("snapshot")(snapshot)
