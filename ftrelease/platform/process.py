"""Subprocess execution with Result-based error handling.

Regeneration and compilation stream their output straight to the terminal;
only the exit status is inspected.

Usage:
    result = run_silent(["./gradlew", "assembleRelease"], cwd=android_dir)
    match result:
        case Ok(_):
            ...
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ftrelease.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessRunner", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 when the process could not be started.
        detail: OS error text when the process could not be started.
    """

    command: tuple[str, ...]
    returncode: int
    detail: str = ""

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


class ProcessRunner(Protocol):
    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[None, ProcessError]: ...


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command without capturing output.

    No timeout is applied; the invoking CI job owns that limit.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Full environment for the child (inherits ours if None).

    Returns:
        Ok(None) on exit code 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            check=False,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, detail=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=proc.returncode))

    return Ok(None)
