"""Pytest configuration and fixtures for Codeforge Apply tests."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's project root setting out of the tests."""
    monkeypatch.delenv("CODEFORGE_PROJECT_ROOT", raising=False)


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Small generated project tree."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "index.ts").write_text("export const answer = 42;\n")
    (root / "package.json").write_text('{"name": "sample", "version": "1.0.0"}\n')
    (root / "README.md").write_text("# sample\n")
    return root
