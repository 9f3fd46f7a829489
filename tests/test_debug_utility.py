"""Tests for the debug utility module.

The debug utility provides a single entrypoint for debug logging that can be
toggled via the CODEFORGE_DEBUG environment variable.
"""

import importlib
from collections.abc import Iterator
from io import StringIO
from unittest.mock import patch

import pytest

from codeforge_apply.utils import debug as debug_module


@pytest.fixture(autouse=True)
def _restore_debug_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    yield
    monkeypatch.delenv("CODEFORGE_DEBUG", raising=False)
    importlib.reload(debug_module)


def test_debug_import() -> None:
    """Test that debug utility can be imported."""
    from codeforge_apply.utils.debug import debug

    assert callable(debug)


def test_debug_disabled_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that debug output is disabled when CODEFORGE_DEBUG is not set."""
    monkeypatch.delenv("CODEFORGE_DEBUG", raising=False)
    importlib.reload(debug_module)

    with patch("sys.stderr", new=StringIO()) as fake_stderr:
        debug_module.debug("This should not print")
        output = fake_stderr.getvalue()

    assert output == "", f"Expected no output, got: {output}"


@pytest.mark.parametrize("value", ["1", "true", "YES"])
def test_debug_enabled_when_env_var_set(
    monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    """Test that debug output is enabled for truthy CODEFORGE_DEBUG values."""
    monkeypatch.setenv("CODEFORGE_DEBUG", value)
    importlib.reload(debug_module)

    with patch("sys.stderr", new=StringIO()) as fake_stderr:
        debug_module.debug("Test message")
        output = fake_stderr.getvalue()

    assert output == "[DEBUG] Test message\n"


def test_debug_ignores_other_values(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that unrecognised values keep debug output off."""
    monkeypatch.setenv("CODEFORGE_DEBUG", "verbose")
    importlib.reload(debug_module)

    with patch("sys.stderr", new=StringIO()) as fake_stderr:
        debug_module.debug("quiet")

    assert fake_stderr.getvalue() == ""


def test_debug_keeps_stdout_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that debug lines never mix into stdout."""
    monkeypatch.setenv("CODEFORGE_DEBUG", "1")
    importlib.reload(debug_module)

    with patch("sys.stdout", new=StringIO()) as fake_stdout:
        with patch("sys.stderr", new=StringIO()):
            debug_module.debug("diagnostic")

    assert fake_stdout.getvalue() == ""
