from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ftrelease.core.config import ConfigError
from ftrelease.core.flavors import FlavorSelectorError
from ftrelease.core.version import VersionError


class Stage(Enum):
    RESOLVE = "resolve version"
    CONFIGURE = "configure"
    REGENERATE = "regenerate"
    PATCH = "patch"
    COMPILE = "compile"
    COLLECT = "collect"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class DocumentIOFailed:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class DocumentInvalid:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class PrebuildFailed:
    returncode: int
    detail: str = ""


@dataclass(frozen=True, slots=True)
class CompileFailed:
    returncode: int
    detail: str = ""


@dataclass(frozen=True, slots=True)
class PatchIOFailed:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class TreeResetFailed:
    path: Path
    reason: str


ReleaseError = (
    VersionError
    | FlavorSelectorError
    | ConfigError
    | DocumentIOFailed
    | DocumentInvalid
    | PrebuildFailed
    | CompileFailed
    | PatchIOFailed
    | TreeResetFailed
)


@dataclass(frozen=True, slots=True)
class PipelineFailure:
    """A fatal error together with the stage (and flavor) that produced it."""

    stage: Stage
    error: ReleaseError
    flavor: str | None = None
