from __future__ import annotations

from pathlib import Path

import pytest

from ftrelease.core.result import Ok
from ftrelease.services.patching.manifest import (
    HEALTH_CONNECT_PACKAGE,
    INTENT_FILTER_MARKER,
    manifest_patches,
    patch_manifest,
)
from ftrelease.services.patching.text import PatchStatus, apply_patches

RATIONALE_ACTION = "androidx.health.ACTION_SHOW_PERMISSIONS_RATIONALE"
PACKAGE_ENTRY = f'<package android:name="{HEALTH_CONNECT_PACKAGE}" />'

BARE_MANIFEST = (
    "<manifest>\n"
    "  <application>\n"
    '    <activity android:name=".MainActivity" android:exported="true">\n'
    "    </activity>\n"
    "  </application>\n"
    "</manifest>\n"
)
PATCH_NAMES = [p.name for p in manifest_patches()]


def _patch(text: str) -> tuple[str, list[PatchStatus]]:
    out, outcomes = apply_patches(text, manifest_patches())
    return out, [o.status for o in outcomes]


def test_all_three_additions_applied(manifest_xml: str) -> None:
    out, statuses = _patch(manifest_xml)

    assert statuses == [PatchStatus.APPLIED] * 3
    assert out.count(INTENT_FILTER_MARKER) == 1
    assert out.count('android:name=".PermissionsRationaleActivity"') == 1
    assert out.count(PACKAGE_ENTRY) == 1
    assert 'android:targetActivity=".MainActivity"' in out


def test_second_run_is_byte_identical(manifest_xml: str) -> None:
    once, _ = _patch(manifest_xml)
    twice, statuses = _patch(once)

    assert twice == once
    assert statuses == [PatchStatus.ALREADY_APPLIED] * 3


def test_intent_filter_goes_after_last_filter_of_main_activity(manifest_xml: str) -> None:
    out, _ = _patch(manifest_xml)

    marker = out.index(INTENT_FILTER_MARKER)
    assert out.index('<data android:scheme="fittrack"/>') < marker
    assert marker < out.index("</activity>")


def test_intent_filter_without_existing_filters() -> None:
    manifest = (
        "<manifest>\n"
        "  <application>\n"
        '    <activity android:name=".MainActivity" android:exported="true">\n'
        "    </activity>\n"
        "  </application>\n"
        "</manifest>\n"
    )

    out, statuses = _patch(manifest)

    assert statuses[0] is PatchStatus.APPLIED
    opening_end = out.index('android:exported="true">') + len('android:exported="true">')
    assert out.index(INTENT_FILTER_MARKER) > opening_end
    assert out.index(RATIONALE_ACTION) < out.index("</activity>")


def test_rationale_activity_inside_application(manifest_xml: str) -> None:
    out, _ = _patch(manifest_xml)

    rationale = out.index('android:name=".PermissionsRationaleActivity"')
    assert out.index("</activity>") < rationale < out.index("</application>")
    assert out.index("<activity-alias") < out.index("</application>")
    assert "  </application>\n</manifest>\n" in out


def test_package_query_joins_existing_queries_block(manifest_xml: str) -> None:
    out, _ = _patch(manifest_xml)

    assert out.count("<queries>") == 1
    assert out.index("<queries>") < out.index(PACKAGE_ENTRY) < out.index("</queries>")
    assert f"    {PACKAGE_ENTRY}\n  </queries>" in out


def test_package_query_creates_block_before_application() -> None:
    manifest = (
        "<manifest>\n"
        "  <application>\n"
        '    <activity android:name=".MainActivity">\n'
        "    </activity>\n"
        "  </application>\n"
        "</manifest>\n"
    )

    out, statuses = _patch(manifest)

    assert statuses[2] is PatchStatus.APPLIED
    assert out.count("<queries>") == 1
    assert out.index("</queries>") < out.index("<application>")
    assert f"  <queries>\n    {PACKAGE_ENTRY}\n  </queries>\n  <application>" in out


def test_missing_activity_skips_only_intent_filter(manifest_xml: str) -> None:
    manifest = manifest_xml.replace('android:name=".MainActivity"', 'android:name=".HomeActivity"')

    out, statuses = _patch(manifest)

    assert statuses == [PatchStatus.ANCHOR_MISSING, PatchStatus.APPLIED, PatchStatus.APPLIED]
    assert INTENT_FILTER_MARKER not in out
    assert PACKAGE_ENTRY in out


def test_custom_activity_name(manifest_xml: str) -> None:
    manifest = manifest_xml.replace('android:name=".MainActivity"', 'android:name=".HomeActivity"')

    out, outcomes = apply_patches(manifest, manifest_patches(activity=".HomeActivity"))

    assert all(o.status is PatchStatus.APPLIED for o in outcomes)
    assert 'android:targetActivity=".HomeActivity"' in out


def test_missing_application_close_skips_rationale() -> None:
    out, statuses = _patch("<manifest>\n</manifest>\n")

    assert statuses == [PatchStatus.ANCHOR_MISSING] * 3
    assert out == "<manifest>\n</manifest>\n"


def test_patch_manifest_on_disk(tmp_path: Path, manifest_xml: str) -> None:
    path = tmp_path / "AndroidManifest.xml"
    path.write_text(manifest_xml, encoding="utf-8")

    first = patch_manifest(path)
    patched = path.read_text(encoding="utf-8")
    second = patch_manifest(path)

    assert isinstance(first, Ok)
    assert isinstance(second, Ok)
    assert all(o.status is PatchStatus.ALREADY_APPLIED for o in second.value)
    assert path.read_text(encoding="utf-8") == patched
    assert all(o.path == path for o in first.value)


def test_patch_manifest_missing_file(tmp_path: Path) -> None:
    result = patch_manifest(tmp_path / "AndroidManifest.xml")

    assert isinstance(result, Ok)
    assert [o.status for o in result.value] == [PatchStatus.FILE_MISSING] * 3


def _apply_one(text: str, index: int) -> tuple[str, PatchStatus]:
    return manifest_patches()[index].apply(text)


@pytest.mark.parametrize("index", range(len(PATCH_NAMES)), ids=PATCH_NAMES)
def test_each_patch_is_idempotent_on_generated_manifest(manifest_xml: str, index: int) -> None:
    once, first = _apply_one(manifest_xml, index)
    twice, second = _apply_one(once, index)

    assert first is PatchStatus.APPLIED
    assert second is PatchStatus.ALREADY_APPLIED
    assert twice == once


@pytest.mark.parametrize("index", range(len(PATCH_NAMES)), ids=PATCH_NAMES)
def test_each_patch_is_idempotent_on_bare_manifest(index: int) -> None:
    once, first = _apply_one(BARE_MANIFEST, index)
    twice, second = _apply_one(once, index)

    assert first is PatchStatus.APPLIED
    assert second is PatchStatus.ALREADY_APPLIED
    assert twice == once


def test_new_queries_block_and_bare_intent_filter_are_stable() -> None:
    once, _ = _patch(BARE_MANIFEST)
    twice, statuses = _patch(once)

    assert "<queries>" in once
    assert twice == once
    assert statuses == [PatchStatus.ALREADY_APPLIED] * 3
