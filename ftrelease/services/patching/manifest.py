"""Health Connect integration points in the generated ``AndroidManifest.xml``.

Three independent additions, each gated by its own marker:

1. a permissions-rationale intent-filter inside the primary activity, after
   its last ``</intent-filter>`` (or right after its opening tag);
2. the rationale activity plus the Android 14+ activity-alias, before
   ``</application>``;
3. a ``<package>`` visibility query for the Health Connect app, inside the
   existing ``<queries>`` block or in a new block before ``<application>``.
"""

from __future__ import annotations

import re
from pathlib import Path

from ftrelease.core.result import Result
from ftrelease.services.patching.text import (
    Insertion,
    PatchOutcome,
    TextPatch,
    line_start,
    patch_file,
)
from ftrelease.services.release_errors import PatchIOFailed

__all__ = [
    "DEFAULT_ACTIVITY",
    "HEALTH_CONNECT_PACKAGE",
    "INTENT_FILTER_MARKER",
    "manifest_patches",
    "patch_manifest",
]

DEFAULT_ACTIVITY = ".MainActivity"
HEALTH_CONNECT_PACKAGE = "com.google.android.apps.healthdata"

INTENT_FILTER_MARKER = "Health Connect: For Android 13 and below"
_RATIONALE_ACTION = "androidx.health.ACTION_SHOW_PERMISSIONS_RATIONALE"
_RATIONALE_ACTIVITY = ".PermissionsRationaleActivity"

_INTENT_FILTER = (
    f"\n      <!-- {INTENT_FILTER_MARKER} -->\n"
    "      <intent-filter>\n"
    f'        <action android:name="{_RATIONALE_ACTION}" />\n'
    "      </intent-filter>"
)


def _rationale_block(activity: str) -> str:
    return (
        "\n"
        "    <!-- Health Connect: Permissions Rationale Activity for Android 13 and below -->\n"
        "    <activity\n"
        f'      android:name="{_RATIONALE_ACTIVITY}"\n'
        '      android:exported="true">\n'
        "      <intent-filter>\n"
        f'        <action android:name="{_RATIONALE_ACTION}" />\n'
        "      </intent-filter>\n"
        "    </activity>\n"
        "\n"
        "    <!-- Health Connect: Activity alias for Android 14+ -->\n"
        "    <activity-alias\n"
        '      android:name="ViewPermissionUsageActivity"\n'
        '      android:exported="true"\n'
        f'      android:targetActivity="{activity}"\n'
        '      android:permission="android.permission.START_VIEW_PERMISSION_USAGE">\n'
        "      <intent-filter>\n"
        '        <action android:name="android.intent.action.VIEW_PERMISSION_USAGE" />\n'
        '        <category android:name="android.intent.category.HEALTH_PERMISSIONS" />\n'
        "      </intent-filter>\n"
        "    </activity-alias>\n"
    )


def _package_entry(package: str) -> str:
    return f'<package android:name="{package}" />'


def _before_line(text: str, index: int, block: str, *, indent: str = "") -> Insertion:
    """Insert ``block`` on its own line(s) ahead of the tag starting at ``index``."""
    start = line_start(text, index)
    if text[start:index].strip() == "":
        return Insertion(start, block)
    return Insertion(index, "\n" + block + indent)


def _intent_filter_patch(activity: str) -> TextPatch:
    opening = re.compile(rf'<activity\s[^>]*android:name="{re.escape(activity)}"[^>]*>')

    def locate(text: str) -> Insertion | None:
        m = opening.search(text)
        if m is None or m.group(0).endswith("/>"):
            return None
        close = text.find("</activity>", m.end())
        if close < 0:
            return None
        last_filter = text.rfind("</intent-filter>", m.end(), close)
        if last_filter >= 0:
            return Insertion(last_filter + len("</intent-filter>"), _INTENT_FILTER)
        return Insertion(m.end(), _INTENT_FILTER)

    return TextPatch(
        name="rationale intent-filter",
        marker=INTENT_FILTER_MARKER,
        anchor=f'<activity android:name="{activity}"> block',
        locate=locate,
    )


def _rationale_activity_patch(activity: str) -> TextPatch:
    block = _rationale_block(activity)

    def locate(text: str) -> Insertion | None:
        close = text.rfind("</application>")
        if close < 0:
            return None
        return _before_line(text, close, block, indent="  ")

    return TextPatch(
        name="rationale activity",
        marker=f'android:name="{_RATIONALE_ACTIVITY}"',
        anchor="</application>",
        locate=locate,
    )


def _queries_patch(package: str) -> TextPatch:
    entry = _package_entry(package)

    def locate(text: str) -> Insertion | None:
        queries = re.search(r"<queries\s*>", text)
        if queries is not None:
            close = text.find("</queries>", queries.end())
            if close < 0:
                return None
            return _before_line(text, close, f"    {entry}\n", indent="  ")

        application = re.search(r"<application\b", text)
        if application is None:
            return None
        block = f"  <queries>\n    {entry}\n  </queries>\n"
        return _before_line(text, application.start(), block, indent="  ")

    return TextPatch(
        name="package visibility query",
        marker=f'<package android:name="{package}"',
        anchor="<queries> or <application>",
        locate=locate,
    )


def manifest_patches(
    *, activity: str = DEFAULT_ACTIVITY, package: str = HEALTH_CONNECT_PACKAGE
) -> tuple[TextPatch, ...]:
    return (
        _intent_filter_patch(activity),
        _rationale_activity_patch(activity),
        _queries_patch(package),
    )


def patch_manifest(
    path: Path, *, activity: str = DEFAULT_ACTIVITY, package: str = HEALTH_CONNECT_PACKAGE
) -> Result[tuple[PatchOutcome, ...], PatchIOFailed]:
    return patch_file(path, manifest_patches(activity=activity, package=package))
