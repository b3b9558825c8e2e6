"""Hand-written Kotlin sources dropped into the regenerated native tree.

The prebuild step only generates a stock ``MainActivity``; the Health
Connect rationale screen needs our own sources, kept in the project under
``scripts/android-patches``.
"""

from __future__ import annotations

from pathlib import Path

from ftrelease.core.config import ProjectLayout
from ftrelease.core.result import Err, Ok, Result
from ftrelease.output.console import ConsoleProtocol
from ftrelease.platform.files import copy_file
from ftrelease.services.release_errors import PatchIOFailed

# (file in the overlay dir, file name in the Kotlin package dir)
OVERLAYS: tuple[tuple[str, str], ...] = (
    ("MainActivity.kt.patch", "MainActivity.kt"),
    ("PermissionsRationaleActivity.kt", "PermissionsRationaleActivity.kt"),
)


def apply_overlays(
    layout: ProjectLayout, console: ConsoleProtocol
) -> Result[list[Path], PatchIOFailed]:
    """Copy every overlay that exists, overwriting the generated file."""
    if not layout.overlay_dir.is_dir():
        console.info(f"no native overlays ({layout.settings.overlay_dir} not found)")
        return Ok([])

    copied: list[Path] = []
    for source_name, target_name in OVERLAYS:
        src = layout.overlay_dir / source_name
        if not src.is_file():
            console.info(f"overlay {source_name} not present, skipped")
            continue
        dst = layout.kotlin_dir / target_name
        try:
            copy_file(src, dst)
        except OSError as e:
            return Err(PatchIOFailed(path=dst, reason=f"failed to copy overlay: {e}"))
        console.success(f"overlay {target_name}")
        copied.append(dst)
    return Ok(copied)
