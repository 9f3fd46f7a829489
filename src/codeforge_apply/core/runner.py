"""Command runner used to validate a project after an apply batch.

Commands run through ``anyio.run_process``; process failures, spawn errors,
and timeouts are reported in the returned ``CommandResult`` rather than
raised.
"""

import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from functools import partial
from pathlib import Path

import anyio

from codeforge_apply.core.schemas import CommandResult

__all__ = ["run_command", "run_command_sync"]


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


async def run_command(
    command: str,
    args: Sequence[str] = (),
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    shell: bool = False,
    timeout: float | None = None,
) -> CommandResult:
    """Run a command and capture its output.

    Args:
        command: Executable name or path
        args: Arguments passed individually (no shell concatenation)
        cwd: Working directory, defaults to the current directory
        env: Extra environment variables merged over ``os.environ``
        shell: Run through the system shell; command and args are quoted
        timeout: Seconds before the process is killed

    Returns:
        CommandResult; ``success`` is True only for exit status 0
    """
    merged_env = {**os.environ, **(env or {})}
    cmd: str | list[str]
    if shell:
        cmd = shlex.join([command, *args])
    else:
        cmd = [command, *args]

    try:
        with anyio.fail_after(timeout):
            completed = await anyio.run_process(
                cmd,
                cwd=cwd,
                env=merged_env,
                check=False,
                stdin=subprocess.DEVNULL,
            )
    except TimeoutError:
        return CommandResult(
            success=False,
            error_detail=f"timed out after {timeout}s",
        )
    except OSError as e:
        return CommandResult(success=False, error_detail=str(e))

    stdout = _decode(completed.stdout)
    stderr = _decode(completed.stderr)
    success = completed.returncode == 0

    return CommandResult(
        success=success,
        exit_code=completed.returncode,
        stdout=stdout,
        stderr=stderr,
        error_detail=None if success else (stderr or stdout),
    )


def run_command_sync(
    command: str,
    args: Sequence[str] = (),
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    shell: bool = False,
    timeout: float | None = None,
) -> CommandResult:
    """Blocking wrapper around :func:`run_command`."""
    return anyio.run(
        partial(
            run_command,
            command,
            args,
            cwd=cwd,
            env=env,
            shell=shell,
            timeout=timeout,
        )
    )
