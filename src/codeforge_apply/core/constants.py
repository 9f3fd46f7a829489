"""Core constants for Codeforge Apply.

This module defines constants used throughout the application:
- Backup and temporary file naming
- Result messages reported by the apply engine
- Defaults for the directory snapshotter
"""

# ============================================================================
# Backup Layout
# ============================================================================

#: Directory under the project root that holds per-batch backup folders
BACKUP_DIR_NAME: str = ".mcp_backups"

#: Suffix appended to every backup file name
BACKUP_SUFFIX: str = ".bak"

#: Character that replaces path separators in backup file names
BACKUP_SEPARATOR: str = "_"

#: Journal written inside each batch backup folder
MANIFEST_FILENAME: str = "manifest.jsonl"

#: Schema version recorded in the journal header
MANIFEST_SCHEMA_VERSION: str = "1.0"

#: Suffix for in-flight atomic write files
TEMP_SUFFIX: str = ".tmp"

# ============================================================================
# Result Messages
# ============================================================================

MSG_INVALID_SHAPE: str = "invalid operation shape"
MSG_ALREADY_EXISTS: str = "already exists"
MSG_CONTENT_IDENTICAL: str = "content identical"
MSG_FILE_NOT_FOUND: str = "file not found"
MSG_CREATED_WAS_MISSING: str = "created, was missing"
MSG_DRY_RUN_NO_WRITE: str = "dry-run (no write)"
MSG_DRY_RUN_CREATE: str = "dry-run (create)"
MSG_DRY_RUN_BACKUP: str = "dry-run (backup simulated)"
MSG_DRY_RUN_NO_DELETE: str = "dry-run (no delete)"

#: Placeholder used when a malformed operation has no usable path
UNKNOWN_PATH: str = "<unknown>"

# ============================================================================
# Directory Snapshot Defaults
# ============================================================================

#: Directory and file names never descended into or returned
DEFAULT_SNAPSHOT_IGNORE: tuple[str, ...] = (
    "node_modules",
    ".git",
    "dist",
    BACKUP_DIR_NAME,
)

#: Files larger than this many bytes are left out of a snapshot
DEFAULT_MAX_FILE_SIZE: int = 10000 * 1024

#: Content longer than this many characters is truncated
DEFAULT_MAX_CONTENT: int = 100000

#: Appended to truncated snapshot content
TRUNCATION_MARKER: str = "\n/* ...truncated... */"

# ============================================================================
# Environment
# ============================================================================

#: Environment variable consulted when no project root is given explicitly
PROJECT_ROOT_ENV_VAR: str = "CODEFORGE_PROJECT_ROOT"
