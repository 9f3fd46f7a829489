"""Pydantic schemas for the apply pipeline.

These schemas define the data structures exchanged with the apply engine:
- Operation: Closed tagged union of create/update/delete requests
- OperationResult: Per-operation outcome, one per input operation
- BatchReport: Ordered results plus backup and rollback bookkeeping
- FileSnapshot / CommandResult: Collaborator payloads

All schemas use Pydantic v2 for validation and serialization.
"""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from codeforge_apply.core.constants import UNKNOWN_PATH


class ActionType(str, Enum):
    """File operation kinds accepted by the engine."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OperationStatus(str, Enum):
    """Outcome of a single operation.

    Attributes:
        APPLIED: The operation took effect (or would have, in dry-run)
        SKIPPED: Nothing needed doing (already exists, identical, missing)
        FAILED: The operation stopped the batch
    """

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


Encoding = Literal["utf8", "base64"]


class _OperationBase(BaseModel):
    """Fields shared by every operation variant."""

    path: str = Field(min_length=1)

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject blank paths; containment is checked later by the path guard."""
        if not v.strip():
            raise ValueError("path must be a non-empty string")
        return v


class _ContentOperation(_OperationBase):
    """Operation that carries file content."""

    content: str = ""
    encoding: Encoding = "utf8"

    @field_validator("content", mode="before")
    @classmethod
    def default_content(cls, v: object) -> object:
        """Treat explicit null content as empty, like an omitted field."""
        return "" if v is None else v

    @field_validator("encoding", mode="before")
    @classmethod
    def normalize_encoding(cls, v: object) -> object:
        if isinstance(v, str) and v.lower() in ("utf-8", "utf8"):
            return "utf8"
        return v

    @model_validator(mode="after")
    def validate_base64(self) -> "_ContentOperation":
        if self.encoding == "base64":
            try:
                base64.b64decode(self.content, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError(f"content is not valid base64: {exc}") from exc
        return self

    def content_bytes(self) -> bytes:
        """Return the exact bytes this operation writes."""
        if self.encoding == "base64":
            return base64.b64decode(self.content, validate=True)
        return self.content.encode("utf-8")


class CreateOperation(_ContentOperation):
    """Create a file that does not exist yet."""

    action: Literal["create"] = "create"


class UpdateOperation(_ContentOperation):
    """Replace the content of a file, creating it when missing."""

    action: Literal["update"] = "update"


class DeleteOperation(_OperationBase):
    """Remove a file."""

    action: Literal["delete"] = "delete"


Operation = Annotated[
    CreateOperation | UpdateOperation | DeleteOperation,
    Field(discriminator="action"),
]


@dataclass(frozen=True)
class InvalidOperation:
    """Placeholder for an input item that failed shape validation.

    Keeps the batch position of the malformed item so the engine can report
    it in order and stop there.
    """

    path: str = UNKNOWN_PATH
    action: str | None = None
    reason: str = ""


class OperationResult(BaseModel):
    """Result of a single operation.

    Attributes:
        path: Operation path exactly as supplied
        action: Operation kind, or None when the input was unparseable
        status: applied, skipped, or failed
        message: Optional human-readable detail
        backup_path: Backup copy taken before mutation, if any
        rolled_back: True when a later failure reverted this operation
    """

    path: str
    action: ActionType | None
    status: OperationStatus
    message: str | None = None
    backup_path: Path | None = None
    rolled_back: bool = False

    @field_serializer("backup_path")
    def serialize_backup_path(self, path: Path | None) -> str | None:
        """Serialize Path to string for JSON."""
        return str(path) if path is not None else None


class RollbackIssue(BaseModel):
    """A rollback step that could not restore pre-batch state."""

    path: str
    step: Literal["remove_created", "restore_backup"]
    error: str


class BatchReport(BaseModel):
    """Report returned for one apply batch.

    Attributes:
        batch_id: Millisecond timestamp identifying the batch
        results: One entry per input operation, in input order
        backup_folder: Batch backup folder, or None when backups are disabled
        manifest_path: Batch journal location when backups are enabled
        rolled_back: True when a rollback walk ran for this batch
        rollback_errors: Per-step rollback diagnostics
    """

    batch_id: str
    results: list[OperationResult] = Field(default_factory=list)
    backup_folder: Path | None = None
    manifest_path: Path | None = None
    rolled_back: bool = False
    rollback_errors: list[RollbackIssue] = Field(default_factory=list)

    @field_serializer("backup_folder", "manifest_path")
    def serialize_paths(self, path: Path | None) -> str | None:
        """Serialize Path to string for JSON."""
        return str(path) if path is not None else None

    def _count(self, status: OperationStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def applied_count(self) -> int:
        return self._count(OperationStatus.APPLIED)

    @property
    def skipped_count(self) -> int:
        return self._count(OperationStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(OperationStatus.FAILED)

    @property
    def succeeded(self) -> bool:
        """True when no operation failed."""
        return self.failed_count == 0


class FileSnapshot(BaseModel):
    """A file captured by the directory snapshotter."""

    path: str
    content: str


class CommandResult(BaseModel):
    """Outcome of a command run by the command runner.

    Attributes:
        success: True when the process exited with status 0
        exit_code: Process exit status, None if it never started or timed out
        stdout: Captured standard output
        stderr: Captured standard error
        error_detail: Failure detail (stderr, stdout, or spawn error)
    """

    success: bool
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error_detail: str | None = None
