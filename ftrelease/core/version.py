"""Release version parsing and Android build codes.

The Android ``versionCode`` must strictly increase between releases signed
with the same key, otherwise devices refuse the upgrade. It is derived from
the semantic version as ``major * 10000 + minor * 100 + patch``, which is
only monotonic while every component stays below 100.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .result import Err, Ok, Result

__all__ = ["MAX_COMPONENT", "Version", "VersionError", "build_code", "parse_version"]

MAX_COMPONENT = 99

_VERSION_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)$")


@dataclass(frozen=True, slots=True)
class VersionError:
    """A version string that cannot be used for a release."""

    value: str
    reason: str


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    @property
    def build_code(self) -> int:
        return build_code(self)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def build_code(version: Version) -> int:
    return version.major * 10000 + version.minor * 100 + version.patch


def parse_version(text: str) -> Result[Version, VersionError]:
    """Parse a strict ``X.Y.Z`` version.

    Surrounding whitespace is ignored; anything else (missing or extra
    components, prerelease suffixes, non-digits) is rejected, as is any
    component above ``MAX_COMPONENT``.
    """
    value = text.strip()
    m = _VERSION_RE.match(value)
    if m is None:
        return Err(VersionError(value=value, reason="expected MAJOR.MINOR.PATCH"))

    parts = (int(m.group(1)), int(m.group(2)), int(m.group(3)))
    for name, part in zip(("major", "minor", "patch"), parts, strict=True):
        if part > MAX_COMPONENT:
            return Err(
                VersionError(
                    value=value,
                    reason=f"{name} component {part} exceeds {MAX_COMPONENT}",
                )
            )

    return Ok(Version(*parts))
