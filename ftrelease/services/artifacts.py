"""Collection of compiled APKs into the release directory.

Gradle names split outputs ``app-<abi>-release.apk`` (or ``app-release.apk``
without splits). They are renamed to
``<product>-<version><flavor suffix>[-<abi>].apk`` so that both flavors and
every ABI can live side by side in ``releases/``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ftrelease.core.flavors import FlavorSpec
from ftrelease.core.version import Version
from ftrelease.output.console import ConsoleProtocol
from ftrelease.platform.files import move_file

__all__ = [
    "ARTIFACT_EXTENSIONS",
    "Artifact",
    "artifact_name",
    "collect_artifacts",
    "discover_artifacts",
    "parse_arch",
]

ARTIFACT_EXTENSIONS = (".apk",)

# x86_64 must be tried before x86.
_ARCH_RE = re.compile(r"(arm64-v8a|armeabi-v7a|x86_64|x86)")


@dataclass(frozen=True, slots=True)
class Artifact:
    source: Path
    flavor: str
    arch: str | None

    @property
    def extension(self) -> str:
        return self.source.suffix.lstrip(".")


def parse_arch(filename: str) -> str | None:
    m = _ARCH_RE.search(filename)
    return m.group(1) if m else None


def artifact_name(
    *, product: str, version: Version, flavor: FlavorSpec, arch: str | None, extension: str
) -> str:
    arch_suffix = f"-{arch}" if arch else ""
    return f"{product}-{version}{flavor.artifact_suffix}{arch_suffix}.{extension}"


def discover_artifacts(output_dir: Path, flavor: FlavorSpec) -> list[Artifact]:
    """List installable outputs, skipping metadata files."""
    found: list[Artifact] = []
    for p in sorted(output_dir.iterdir()):
        if not p.is_file() or "metadata" in p.name:
            continue
        if p.suffix.lower() not in ARTIFACT_EXTENSIONS:
            continue
        found.append(Artifact(source=p, flavor=flavor.name, arch=parse_arch(p.name)))
    return found


def collect_artifacts(
    *,
    output_dir: Path,
    releases_dir: Path,
    product: str,
    version: Version,
    flavor: FlavorSpec,
    console: ConsoleProtocol,
) -> list[Path]:
    """Move compiled outputs into ``releases_dir`` under their release names.

    Problems here never fail the run: a missing output directory, an empty
    one or a file that cannot be moved is reported as a warning and the
    remaining flavors still build.
    """
    if not output_dir.is_dir():
        console.warning(f"no compiler output directory: {output_dir}")
        return []

    artifacts = discover_artifacts(output_dir, flavor)
    if not artifacts:
        console.warning(f"no artifact found in {output_dir}")
        return []

    collected: list[Path] = []
    for artifact in artifacts:
        name = artifact_name(
            product=product,
            version=version,
            flavor=flavor,
            arch=artifact.arch,
            extension=artifact.extension,
        )
        dst = releases_dir / name
        if dst in collected:
            console.warning(f"{artifact.source.name} maps to {name} already collected, skipped")
            continue
        try:
            move_file(artifact.source, dst)
        except OSError as e:
            console.warning(f"failed to move {artifact.source.name}: {e}")
            continue
        console.success(f"artifact ready: {releases_dir.name}/{name}")
        collected.append(dst)
    return collected
