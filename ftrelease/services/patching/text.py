"""Anchored, marker-gated text patches.

Every edit to a generated native file is a ``TextPatch`` declaring:

- ``marker``: substring absent before the patch and present after it. If
  the marker is already in the text the patch is skipped, so applying it
  again is a no-op.
- ``anchor``: a description of the landmark ``locate`` searches for.
- ``locate``: returns where and what to insert, or None when the anchor is
  not in the text. A missing anchor skips this patch only; it is reported
  as a warning and never aborts the run.
- ``prepare``: optional clean-up run before ``locate``, and only when the
  marker is absent.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ftrelease.core.result import Err, Ok, Result
from ftrelease.output.console import ConsoleProtocol
from ftrelease.platform.files import atomic_write_text
from ftrelease.services.release_errors import PatchIOFailed

__all__ = [
    "Insertion",
    "MarkerNotProduced",
    "PatchOutcome",
    "PatchStatus",
    "TextPatch",
    "apply_patches",
    "find_block_end",
    "line_start",
    "patch_file",
    "report_outcomes",
]


class MarkerNotProduced(ValueError):
    """A patch inserted text that does not contain its own marker.

    Such a patch would be applied again on every run, so it is a defect in
    the patch definition rather than in the patched file.
    """


class PatchStatus(Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already applied"
    ANCHOR_MISSING = "anchor missing"
    FILE_MISSING = "file missing"


@dataclass(frozen=True, slots=True)
class Insertion:
    offset: int
    text: str


@dataclass(frozen=True, slots=True)
class TextPatch:
    name: str
    marker: str
    anchor: str
    locate: Callable[[str], Insertion | None]
    prepare: Callable[[str], str] | None = None

    def apply(self, text: str) -> tuple[str, PatchStatus]:
        if self.marker in text:
            return text, PatchStatus.ALREADY_APPLIED

        work = self.prepare(text) if self.prepare is not None else text
        insertion = self.locate(work)
        if insertion is None:
            return text, PatchStatus.ANCHOR_MISSING

        out = work[: insertion.offset] + insertion.text + work[insertion.offset :]
        if self.marker not in out:
            raise MarkerNotProduced(f"patch {self.name!r} does not produce its marker {self.marker!r}")
        return out, PatchStatus.APPLIED


@dataclass(frozen=True, slots=True)
class PatchOutcome:
    name: str
    status: PatchStatus
    anchor: str
    path: Path | None = None


def apply_patches(
    text: str, patches: Iterable[TextPatch], *, path: Path | None = None
) -> tuple[str, tuple[PatchOutcome, ...]]:
    """Apply patches in order; each sees the output of the previous one."""
    outcomes: list[PatchOutcome] = []
    for patch in patches:
        text, status = patch.apply(text)
        outcomes.append(PatchOutcome(patch.name, status, patch.anchor, path))
    return text, tuple(outcomes)


def patch_file(
    path: Path, patches: Iterable[TextPatch]
) -> Result[tuple[PatchOutcome, ...], PatchIOFailed]:
    """Patch a file in place, writing only if something changed.

    A missing file marks every patch ``FILE_MISSING``; read or write errors
    on an existing file are fatal.
    """
    patches = tuple(patches)
    if not path.is_file():
        return Ok(
            tuple(PatchOutcome(p.name, PatchStatus.FILE_MISSING, p.anchor, path) for p in patches)
        )

    try:
        original = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(PatchIOFailed(path=path, reason=f"failed to read: {e}"))

    text, outcomes = apply_patches(original, patches, path=path)
    if text != original:
        try:
            atomic_write_text(path, text)
        except OSError as e:
            return Err(PatchIOFailed(path=path, reason=f"failed to write: {e}"))
    return Ok(outcomes)


def report_outcomes(console: ConsoleProtocol, outcomes: Iterable[PatchOutcome]) -> None:
    for o in outcomes:
        where = f" ({o.path.name})" if o.path is not None else ""
        match o.status:
            case PatchStatus.APPLIED:
                console.success(f"{o.name}{where}")
            case PatchStatus.ALREADY_APPLIED:
                console.info(f"{o.name}{where}: already applied")
            case PatchStatus.ANCHOR_MISSING:
                console.warning(f"{o.name}{where}: {o.anchor} not found, apply it manually")
            case PatchStatus.FILE_MISSING:
                console.warning(f"{o.name}: {o.path} not found, skipped")


def find_block_end(text: str, open_index: int) -> int | None:
    """Index of the ``}`` closing the ``{`` at ``open_index``, or None if unbalanced.

    Braces inside string literals and comments are counted too; generated
    Gradle files do not put unbalanced braces there.
    """
    if open_index >= len(text) or text[open_index] != "{":
        return None
    depth = 0
    for i in range(open_index, len(text)):
        c = text[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def line_start(text: str, offset: int) -> int:
    return text.rfind("\n", 0, offset) + 1
