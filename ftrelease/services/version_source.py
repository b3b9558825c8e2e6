"""The project version kept in ``package.json``."""

from __future__ import annotations

from pathlib import Path

from ftrelease.core.result import Err, Ok, Result
from ftrelease.core.structured import get_str
from ftrelease.services.json_doc import DocumentError, load_json_object, save_json_object
from ftrelease.services.release_errors import DocumentInvalid


def read_version(path: Path) -> Result[str, DocumentError]:
    loaded = load_json_object(path)
    if isinstance(loaded, Err):
        return loaded

    value = get_str(loaded.value, "version")
    if value is None:
        return Err(DocumentInvalid(path=path, reason="missing version"))
    return Ok(value)


def write_version(path: Path, version: str) -> Result[bool, DocumentError]:
    """Set the version; Ok(False) when it already had that value."""
    loaded = load_json_object(path)
    if isinstance(loaded, Err):
        return loaded

    data = loaded.value
    if get_str(data, "version") == version:
        return Ok(False)

    data["version"] = version
    saved = save_json_object(path, data)
    if isinstance(saved, Err):
        return saved
    return Ok(True)
