"""Outputs for the invoking CI job (GitHub Actions ``$GITHUB_OUTPUT`` file)."""

from __future__ import annotations

from pathlib import Path

from ftrelease.core.result import Err, Ok, Result


def export_output(path: Path, key: str, value: str) -> Result[None, str]:
    """Append ``key=value`` to the output file."""
    if "\n" in value or "\n" in key:
        return Err(f"multi-line output not supported: {key}")
    try:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{key}={value}\n")
    except OSError as e:
        return Err(f"failed to write {path}: {e}")
    return Ok(None)
