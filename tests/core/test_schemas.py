"""Tests for apply pipeline schemas."""

import base64
from pathlib import Path

import pytest
from pydantic import ValidationError

from codeforge_apply.core.schemas import (
    ActionType,
    BatchReport,
    CreateOperation,
    DeleteOperation,
    OperationResult,
    OperationStatus,
    UpdateOperation,
)


def test_content_defaults_to_empty() -> None:
    """Test that omitted or null content means an empty file."""
    assert CreateOperation(path="a.txt").content == ""
    op = UpdateOperation.model_validate({"path": "a.txt", "content": None})
    assert op.content == ""


def test_utf8_content_bytes() -> None:
    """Test UTF-8 encoding of text content."""
    op = CreateOperation(path="a.txt", content="héllo")

    assert op.content_bytes() == "héllo".encode()


def test_base64_content_bytes() -> None:
    """Test decoding of base64 content."""
    raw = b"\x89PNG\r\n\x1a\n"
    op = CreateOperation(
        path="logo.png", content=base64.b64encode(raw).decode(), encoding="base64"
    )

    assert op.content_bytes() == raw


def test_encoding_alias_is_normalized() -> None:
    """Test that 'utf-8' is accepted as an encoding name."""
    op = UpdateOperation.model_validate(
        {"path": "a.txt", "content": "x", "encoding": "UTF-8"}
    )

    assert op.encoding == "utf8"


def test_unknown_encoding_rejected() -> None:
    """Test that unsupported encodings are rejected."""
    with pytest.raises(ValidationError):
        CreateOperation.model_validate({"path": "a.txt", "encoding": "latin-1"})


def test_blank_path_rejected() -> None:
    """Test that whitespace-only paths are rejected."""
    with pytest.raises(ValidationError):
        DeleteOperation(path="  ")


def test_operations_are_frozen() -> None:
    """Test that operations cannot be mutated after validation."""
    op = DeleteOperation(path="a.txt")

    with pytest.raises(ValidationError):
        op.path = "b.txt"  # type: ignore[misc]


def test_report_counts() -> None:
    """Test BatchReport status helpers."""
    report = BatchReport(
        batch_id="1",
        results=[
            OperationResult(
                path="a", action=ActionType.CREATE, status=OperationStatus.APPLIED
            ),
            OperationResult(
                path="b", action=ActionType.UPDATE, status=OperationStatus.SKIPPED
            ),
            OperationResult(path="c", action=None, status=OperationStatus.FAILED),
        ],
    )

    assert report.applied_count == 1
    assert report.skipped_count == 1
    assert report.failed_count == 1
    assert not report.succeeded


def test_report_json_dump() -> None:
    """Test that paths serialize to strings in JSON mode."""
    report = BatchReport(
        batch_id="1",
        backup_folder=Path("/p/.mcp_backups/1"),
        results=[
            OperationResult(
                path="a.txt",
                action=ActionType.UPDATE,
                status=OperationStatus.APPLIED,
                backup_path=Path("/p/.mcp_backups/1/a.txt.1.bak"),
            )
        ],
    )

    data = report.model_dump(mode="json")

    assert data["backup_folder"] == "/p/.mcp_backups/1"
    assert data["manifest_path"] is None
    assert data["rolled_back"] is False
    assert data["results"][0] == {
        "path": "a.txt",
        "action": "update",
        "status": "applied",
        "message": None,
        "backup_path": "/p/.mcp_backups/1/a.txt.1.bak",
        "rolled_back": False,
    }
