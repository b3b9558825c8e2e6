"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ftrelease.core.config import ConfigError
from ftrelease.core.errors import ErrorCode
from ftrelease.core.flavors import FlavorSelectorError
from ftrelease.core.version import VersionError
from ftrelease.output.console import Style
from ftrelease.services.release_errors import (
    CompileFailed,
    DocumentInvalid,
    DocumentIOFailed,
    PatchIOFailed,
    PipelineFailure,
    PrebuildFailed,
    ReleaseError,
    TreeResetFailed,
)

if TYPE_CHECKING:
    from ftrelease.output.console import ConsoleProtocol

__all__ = ["describe_error", "error_exit_code", "print_failure"]


def describe_error(error: ReleaseError) -> tuple[str, str | None]:
    """Message and optional hint for an error."""
    match error:
        case VersionError(value=value, reason=reason):
            return f"invalid version {value!r}: {reason}", "Expected MAJOR.MINOR.PATCH, each 0-99"
        case FlavorSelectorError(selector=selector, available=available):
            return f"unknown flavor: {selector}", f"Available: {', '.join(available)}"
        case ConfigError(message=message, path=path):
            return message, str(path) if path is not None else None
        case DocumentIOFailed(path=path, reason=reason):
            return f"{path.name}: {reason}", str(path)
        case DocumentInvalid(path=path, reason=reason):
            return f"{path.name}: {reason}", str(path)
        case PrebuildFailed(returncode=rc, detail=detail):
            return f"native tree regeneration failed (exit {rc})", detail or None
        case CompileFailed(returncode=rc, detail=detail):
            return f"native compilation failed (exit {rc})", detail or None
        case PatchIOFailed(path=path, reason=reason):
            return f"{path.name}: {reason}", str(path)
        case TreeResetFailed(path=path, reason=reason):
            return f"failed to delete native tree: {reason}", str(path)


def error_exit_code(error: ReleaseError) -> int:
    match error:
        case VersionError() | FlavorSelectorError():
            return int(ErrorCode.USER_ERROR)
        case ConfigError():
            return int(ErrorCode.ENV_ERROR)
        case PrebuildFailed() | CompileFailed():
            return int(ErrorCode.BUILD_ERROR)
        case DocumentIOFailed() | DocumentInvalid() | PatchIOFailed() | TreeResetFailed():
            return int(ErrorCode.IO_ERROR)


def print_failure(failure: PipelineFailure, console: ConsoleProtocol) -> None:
    message, hint = describe_error(failure.error)
    where = f"[{failure.flavor}] " if failure.flavor else ""
    console.error(f"{where}{failure.stage} failed: {message}")
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
