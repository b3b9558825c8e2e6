from __future__ import annotations

import os
from pathlib import Path

import typer

from ftrelease.cli.commands._helpers import exit_with_error
from ftrelease.cli.context import build_context
from ftrelease.core.config import build_run_config
from ftrelease.core.result import Err, Ok
from ftrelease.output.errors import error_exit_code, print_failure
from ftrelease.services.orchestrator import ReleaseOrchestrator


def build(
    flavor: str | None = typer.Option(
        None,
        "--flavor",
        "-f",
        help="standard|foss|both (default: $TARGET_FLAVOR, else standard)",
    ),
    set_version: str | None = typer.Option(
        None,
        "--set-version",
        help="Release version X.Y.Z (default: $OVERRIDE_VERSION, else package.json)",
    ),
    root: Path | None = typer.Option(None, "--root", help="Project root (default: cwd)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without modifying."),
) -> None:
    """Build signed release APKs for the requested flavors."""
    ctx = build_context(root)

    config = build_run_config(
        root=ctx.root,
        settings=ctx.settings,
        env=os.environ,
        flavor=flavor,
        version=set_version,
        dry_run=dry_run,
    )
    if isinstance(config, Err):
        exit_with_error(config.error, ctx.console)

    orchestrator = ReleaseOrchestrator(config=config.value, console=ctx.console)
    match orchestrator.run():
        case Ok(report):
            for name in report.artifacts:
                ctx.console.print(name)
        case Err(failure):
            print_failure(failure, ctx.console)
            raise typer.Exit(code=error_exit_code(failure.error))
