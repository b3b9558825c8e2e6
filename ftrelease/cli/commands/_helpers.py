"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from ftrelease.output.console import ConsoleProtocol, Style
from ftrelease.output.errors import describe_error, error_exit_code
from ftrelease.services.release_errors import ReleaseError


def exit_with_error(error: ReleaseError, console: ConsoleProtocol) -> NoReturn:
    """Print an error with its hint and exit with the mapped code."""
    message, hint = describe_error(error)
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=error_exit_code(error))
