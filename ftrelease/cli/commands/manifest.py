from __future__ import annotations

from pathlib import Path

import typer

from ftrelease.cli.commands._helpers import exit_with_error
from ftrelease.core.errors import ErrorCode
from ftrelease.core.result import Err
from ftrelease.output.console import RichConsole
from ftrelease.services.patching.manifest import (
    DEFAULT_ACTIVITY,
    HEALTH_CONNECT_PACKAGE,
    patch_manifest,
)
from ftrelease.services.patching.text import report_outcomes


def patch_manifest_cmd(
    path: Path = typer.Argument(..., help="Path to AndroidManifest.xml"),
    activity: str = typer.Option(DEFAULT_ACTIVITY, "--activity", help="Primary activity name"),
    package: str = typer.Option(
        HEALTH_CONNECT_PACKAGE, "--package", help="Package to declare in <queries>"
    ),
) -> None:
    """Add the Health Connect integration points to an existing manifest."""
    console = RichConsole()
    if not path.is_file():
        console.error(f"manifest not found: {path}")
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    result = patch_manifest(path, activity=activity, package=package)
    if isinstance(result, Err):
        exit_with_error(result.error, console)

    report_outcomes(console, result.value)
