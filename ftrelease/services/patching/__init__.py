"""Idempotent edits of generated native files."""

from .build_config import BuildConfigPatcher
from .manifest import manifest_patches, patch_manifest
from .text import Insertion, PatchOutcome, PatchStatus, TextPatch, apply_patches, patch_file

__all__ = [
    "BuildConfigPatcher",
    "Insertion",
    "PatchOutcome",
    "PatchStatus",
    "TextPatch",
    "apply_patches",
    "manifest_patches",
    "patch_file",
    "patch_manifest",
]
