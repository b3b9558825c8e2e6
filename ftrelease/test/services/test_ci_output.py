from __future__ import annotations

from pathlib import Path

from ftrelease.core.result import Err, Ok
from ftrelease.services.ci_output import export_output


def test_export_appends(tmp_path: Path) -> None:
    path = tmp_path / "github_output"
    path.write_text("previous=1\n", encoding="utf-8")

    assert export_output(path, "final_version", "1.2.3") == Ok(None)
    assert path.read_text(encoding="utf-8") == "previous=1\nfinal_version=1.2.3\n"


def test_export_rejects_multiline(tmp_path: Path) -> None:
    path = tmp_path / "github_output"

    result = export_output(path, "final_version", "1.2.3\nevil=1")

    assert isinstance(result, Err)
    assert not path.exists()


def test_export_unwritable(tmp_path: Path) -> None:
    result = export_output(tmp_path / "missing" / "out", "final_version", "1.2.3")

    assert isinstance(result, Err)
    assert "failed to write" in result.error
