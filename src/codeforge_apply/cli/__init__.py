"""CLI entrypoints for Codeforge Apply."""

from codeforge_apply.cli.apply import app as apply_app
from codeforge_apply.cli.snapshot import app as snapshot_app

__all__ = ["apply_app", "snapshot_app"]
