"""Batch journal writer for apply batches.

This module writes a JSONL journal next to a batch's backups, capturing every
operation result and any rollback so the backup folder can be inspected on
its own after the fact.
"""

import json
import os
import platform
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from codeforge_apply.core.constants import MANIFEST_FILENAME, MANIFEST_SCHEMA_VERSION
from codeforge_apply.utils.debug import debug


class BatchJournal:
    """Writes a batch journal in JSONL format.

    Each journal file contains:
    - Header line with batch metadata (type: "header")
    - One JSON object per operation result (type: "result")
    - An optional rollback summary (type: "rollback")

    The backup folder and journal file are created on the first write.
    """

    def __init__(
        self,
        batch_id: str,
        root: Path,
        backup_dir: Path,
        *,
        dry_run: bool,
        rollback_on_error: bool,
    ) -> None:
        """Initialize journal writer.

        Args:
            batch_id: Millisecond timestamp identifying the batch
            root: Project root for the batch
            backup_dir: Batch backup folder that will hold the journal
            dry_run: Whether the batch runs in dry-run mode
            rollback_on_error: Whether failures trigger rollback
        """
        self.batch_id = batch_id
        self.root = root
        self.dry_run = dry_run
        self.rollback_on_error = rollback_on_error
        self.path = backup_dir / MANIFEST_FILENAME
        self._file: Any = None
        self._header_written = False

    def write_header(self) -> None:
        """Write journal header with batch metadata."""
        if self._header_written:
            return

        header = {
            "type": "header",
            "schema_version": MANIFEST_SCHEMA_VERSION,
            "batch_id": self.batch_id,
            "generated_at": datetime.now(UTC).isoformat(),
            "root": str(self.root),
            "dry_run": self.dry_run,
            "rollback_on_error": self.rollback_on_error,
            "system": {"os": platform.system()},
        }

        self._write_line(header)
        self._header_written = True
        debug(f"Wrote journal header for batch {self.batch_id}")

    def append(self, entry: dict[str, Any]) -> None:
        """Append an entry to the journal.

        Args:
            entry: JSON-serializable entry data
        """
        if not self._header_written:
            self.write_header()

        self._write_line({"ts": datetime.now(UTC).isoformat(), **entry})
        debug(
            f"Appended journal entry: {entry.get('type', 'unknown')} - "
            f"{entry.get('status', '')}"
        )

    def _write_line(self, data: dict[str, Any]) -> None:
        """Write a JSON line to the journal file."""
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")

        json_line = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        self._file.write(json_line + "\n")
        self._file.flush()
        os.fsync(self._file.fileno())

    def close(self) -> None:
        """Close the journal file."""
        if self._file is not None:
            self._file.close()
            self._file = None
            debug(f"Closed journal file: {self.path}")

    def __enter__(self) -> "BatchJournal":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
