"""Tests for apply configuration and project-root resolution."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from codeforge_apply.core.config import ApplyConfig, resolve_project_root


class TestResolveProjectRoot:
    """Project root precedence."""

    def test_explicit_argument_wins(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CODEFORGE_PROJECT_ROOT", "/somewhere/else")

        assert resolve_project_root(tmp_path) == tmp_path.resolve()

    def test_env_var_used_when_no_argument(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CODEFORGE_PROJECT_ROOT", str(tmp_path))

        assert resolve_project_root() == tmp_path.resolve()

    def test_falls_back_to_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CODEFORGE_PROJECT_ROOT", raising=False)
        monkeypatch.chdir(tmp_path)

        assert resolve_project_root() == tmp_path.resolve()

    def test_string_root_is_resolved(self, tmp_path: Path) -> None:
        nested = tmp_path / "a" / ".." / "b"

        assert resolve_project_root(str(nested)) == (tmp_path / "b").resolve()


class TestApplyConfig:
    """ApplyConfig defaults and validation."""

    def test_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CODEFORGE_PROJECT_ROOT", str(tmp_path))

        config = ApplyConfig()

        assert config.dry_run is False
        assert config.backup is True
        assert config.rollback_on_error is True
        assert config.project_root == tmp_path.resolve()

    def test_root_is_resolved(self, tmp_path: Path) -> None:
        config = ApplyConfig(project_root=str(tmp_path / "x" / ".."))

        assert config.project_root == tmp_path.resolve()

    def test_config_is_frozen(self, tmp_path: Path) -> None:
        config = ApplyConfig(project_root=tmp_path)

        with pytest.raises(ValidationError):
            config.dry_run = True  # type: ignore[misc]
