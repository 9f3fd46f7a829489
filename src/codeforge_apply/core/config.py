"""Apply configuration and project-root resolution."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from codeforge_apply.core.constants import PROJECT_ROOT_ENV_VAR

__all__ = ["ApplyConfig", "resolve_project_root"]


def resolve_project_root(project_root: str | Path | None = None) -> Path:
    """Resolve the directory a batch is applied against.

    Args:
        project_root: Optional explicit root directory.

    Returns:
        Absolute, symlink-resolved root path. Precedence is the explicit
        argument, then ``CODEFORGE_PROJECT_ROOT``, then the working directory.
    """

    chosen: str | Path | None = project_root
    env_root = os.getenv(PROJECT_ROOT_ENV_VAR)
    if chosen is None and env_root:
        chosen = env_root
    if chosen is None:
        chosen = Path.cwd()

    return Path(chosen).expanduser().resolve()


class ApplyConfig(BaseModel):
    """Options for a single apply batch.

    Attributes:
        dry_run: Simulate writes and removals without touching target files
        backup: Copy pre-mutation content into the batch backup folder
        rollback_on_error: Revert the batch when an operation fails
        project_root: Directory every operation path is resolved against
    """

    dry_run: bool = False
    backup: bool = True
    rollback_on_error: bool = True
    project_root: Path = Field(default_factory=resolve_project_root)

    model_config = {"frozen": True}

    @field_validator("project_root", mode="before")
    @classmethod
    def _resolve_root(cls, value: str | Path | None) -> Path:
        return resolve_project_root(value)
