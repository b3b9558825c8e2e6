from __future__ import annotations

import typer

from ftrelease import __version__
from ftrelease.cli.commands.build import build
from ftrelease.cli.commands.manifest import patch_manifest_cmd
from ftrelease.cli.commands.version_code import version_code


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(build)
app.command("version-code")(version_code)
app.command("patch-manifest")(patch_manifest_cmd)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Signed release builds of the FitTrack Android app."""


def main() -> None:
    app()
