from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from ftrelease.core.config import ReleaseSettings, load_settings
from ftrelease.core.errors import ErrorCode
from ftrelease.core.result import Err
from ftrelease.output.console import ConsoleProtocol, RichConsole, Style


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    settings: ReleaseSettings
    console: ConsoleProtocol


def build_context(root: Path | None = None) -> CLIContext:
    console = RichConsole()
    try:
        project_root = (root or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid --root: {e}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not project_root.is_dir():
        console.error(f"project root not found: {project_root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    settings = load_settings(project_root)
    if isinstance(settings, Err):
        console.error(settings.error.message)
        if settings.error.path is not None:
            console.print(f"hint: {settings.error.path}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(root=project_root, settings=settings.value, console=console)
