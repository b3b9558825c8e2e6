from __future__ import annotations

from pathlib import Path

import typer

from ftrelease.cli.commands._helpers import exit_with_error
from ftrelease.cli.context import build_context
from ftrelease.core.config import ProjectLayout
from ftrelease.core.result import Err
from ftrelease.core.version import parse_version
from ftrelease.services.version_source import read_version


def version_code(
    version: str | None = typer.Argument(None, help="Version X.Y.Z (default: package.json)"),
    root: Path | None = typer.Option(None, "--root", help="Project root (default: cwd)"),
) -> None:
    """Print a version and its Android versionCode."""
    ctx = build_context(root)

    text = version
    if text is None:
        current = read_version(ProjectLayout(root=ctx.root, settings=ctx.settings).version_source)
        if isinstance(current, Err):
            exit_with_error(current.error, ctx.console)
        text = current.value

    parsed = parse_version(text)
    if isinstance(parsed, Err):
        exit_with_error(parsed.error, ctx.console)

    ctx.console.print(f"{parsed.value} {parsed.value.build_code}")
