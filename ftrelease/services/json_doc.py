"""Read-modify-write of JSON documents owned by the mobile project.

Key order and every key the pipeline does not touch survive the round
trip; output uses two-space indentation and a trailing newline, the format
the JavaScript tooling writes.
"""

from __future__ import annotations

import json
from pathlib import Path

from ftrelease.core.result import Err, Ok, Result
from ftrelease.core.structured import StrDict, as_str_dict
from ftrelease.platform.files import atomic_write_text
from ftrelease.services.release_errors import DocumentInvalid, DocumentIOFailed

DocumentError = DocumentIOFailed | DocumentInvalid


def load_json_object(path: Path) -> Result[StrDict, DocumentError]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(DocumentIOFailed(path=path, reason=f"failed to read: {e}"))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(DocumentInvalid(path=path, reason=f"invalid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(DocumentInvalid(path=path, reason="JSON root must be an object"))
    return Ok(data)


def dump_json_object(data: StrDict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def save_json_object(path: Path, data: StrDict) -> Result[None, DocumentError]:
    try:
        atomic_write_text(path, dump_json_object(data))
    except OSError as e:
        return Err(DocumentIOFailed(path=path, reason=f"failed to write: {e}"))
    return Ok(None)
