"""Release edits to the generated Gradle build files.

Module scope (``android/app/build.gradle``): release signing config, the
release build type pointed at it, optional per-ABI APK splits, optional
Google services plugin. Project scope (``android/build.gradle``): the
Google services classpath dependency.
"""

from __future__ import annotations

import re
from pathlib import Path

from ftrelease.core.config import ProjectLayout, SigningConfig
from ftrelease.core.flavors import FlavorSpec
from ftrelease.core.result import Err, Ok, Result
from ftrelease.output.console import ConsoleProtocol
from ftrelease.platform.files import copy_file
from ftrelease.services.patching.text import (
    Insertion,
    PatchOutcome,
    TextPatch,
    find_block_end,
    patch_file,
    report_outcomes,
)
from ftrelease.services.release_errors import PatchIOFailed

__all__ = [
    "ABIS",
    "BuildConfigPatcher",
    "RELEASE_SIGNING_MARKER",
    "SIGNING_BLOCK_MARKER",
    "SPLITS_MARKER",
    "google_services_classpath_patch",
    "google_services_plugin_patch",
    "groovy_string",
    "release_signing_patch",
    "signing_block_patch",
    "splits_patch",
]

ABIS = ("arm64-v8a", "armeabi-v7a", "x86", "x86_64")

SIGNING_BLOCK_MARKER = 'storeType "pkcs12"'
RELEASE_SIGNING_MARKER = "signingConfig signingConfigs.release"
SPLITS_MARKER = "splits {"
GMS_CLASSPATH_MARKER = "com.google.gms:google-services"
GMS_PLUGIN_MARKER = "com.google.gms.google-services"

_ANDROID_BLOCK_RE = re.compile(r"(?m)^android\s*\{")
_BUILD_TYPES_RE = re.compile(r"\bbuildTypes\s*\{")
_RELEASE_TYPE_RE = re.compile(r"\brelease\s*\{")
_DEBUG_SIGNING_LINE_RE = re.compile(r"(?m)^[ \t]*signingConfig\s+signingConfigs\.debug[ \t]*\r?\n?")
_BUILDSCRIPT_RE = re.compile(r"\bbuildscript\s*\{")
_DEPENDENCIES_RE = re.compile(r"\bdependencies\s*\{")


def groovy_string(value: str) -> str:
    """Quote ``value`` as a Groovy double-quoted string with no interpolation."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def _after_android_open(text: str, block: str) -> Insertion | None:
    m = _ANDROID_BLOCK_RE.search(text)
    if m is None:
        return None
    return Insertion(m.end(), block)


def _release_type_span(text: str) -> tuple[int, int] | None:
    """Brace positions of ``buildTypes { release { ... } }``."""
    build_types = _BUILD_TYPES_RE.search(text)
    if build_types is None:
        return None
    build_types_end = find_block_end(text, build_types.end() - 1)
    if build_types_end is None:
        return None

    release = _RELEASE_TYPE_RE.search(text, build_types.end(), build_types_end)
    if release is None:
        return None
    open_index = release.end() - 1
    close_index = find_block_end(text, open_index)
    if close_index is None:
        return None
    return open_index, close_index


def signing_block_patch(signing: SigningConfig, *, keystore_file: str) -> TextPatch:
    password = groovy_string(signing.store_password or "")
    block = (
        "\n"
        "    signingConfigs {\n"
        "        release {\n"
        f"            storeFile file({groovy_string(keystore_file)})\n"
        f"            storePassword {password}\n"
        f"            keyAlias {groovy_string(signing.key_alias or '')}\n"
        f"            keyPassword {password}\n"
        f"            {SIGNING_BLOCK_MARKER}\n"
        "            v1SigningEnabled true\n"
        "            v2SigningEnabled true\n"
        "        }\n"
        "    }\n"
    )
    return TextPatch(
        name="release signing config",
        marker=SIGNING_BLOCK_MARKER,
        anchor="android { block",
        locate=lambda text: _after_android_open(text, block),
    )


def _strip_debug_signing(text: str) -> str:
    span = _release_type_span(text)
    if span is None:
        return text
    open_index, close_index = span
    body = _DEBUG_SIGNING_LINE_RE.sub("", text[open_index + 1 : close_index])
    return text[: open_index + 1] + body + text[close_index:]


def _locate_release_type(text: str) -> Insertion | None:
    span = _release_type_span(text)
    if span is None:
        return None
    return Insertion(span[0] + 1, f"\n            {RELEASE_SIGNING_MARKER}")


def release_signing_patch() -> TextPatch:
    """Point the release build type at the release signing config.

    Any ``signingConfig signingConfigs.debug`` line inside the release block
    is removed first; both steps are skipped once the reference exists.
    """
    return TextPatch(
        name="release build type signing",
        marker=RELEASE_SIGNING_MARKER,
        anchor="buildTypes { release { block",
        locate=_locate_release_type,
        prepare=_strip_debug_signing,
    )


def splits_patch(abis: tuple[str, ...] = ABIS) -> TextPatch:
    include = ", ".join(f'"{abi}"' for abi in abis)
    block = (
        "\n"
        f"    {SPLITS_MARKER}\n"
        "        abi {\n"
        "            enable true\n"
        "            reset()\n"
        f"            include {include}\n"
        "            universalApk false\n"
        "        }\n"
        "    }\n"
    )
    return TextPatch(
        name="per-ABI splits",
        marker=SPLITS_MARKER,
        anchor="android { block",
        locate=lambda text: _after_android_open(text, block),
    )


def google_services_classpath_patch(version: str) -> TextPatch:
    line = f"\n        classpath('{GMS_CLASSPATH_MARKER}:{version}')"

    def locate(text: str) -> Insertion | None:
        buildscript = _BUILDSCRIPT_RE.search(text)
        start = buildscript.end() if buildscript is not None else 0
        m = _DEPENDENCIES_RE.search(text, start)
        if m is None:
            return None
        return Insertion(m.end(), line)

    return TextPatch(
        name="google services classpath",
        marker=GMS_CLASSPATH_MARKER,
        anchor="dependencies { block",
        locate=locate,
    )


def google_services_plugin_patch() -> TextPatch:
    def locate(text: str) -> Insertion:
        return Insertion(len(text.rstrip()), f"\n\napply plugin: '{GMS_PLUGIN_MARKER}'")

    return TextPatch(
        name="google services plugin",
        marker=GMS_PLUGIN_MARKER,
        anchor="end of file",
        locate=locate,
    )


class BuildConfigPatcher:
    """Applies the Gradle edits and native file drops for one flavor."""

    def __init__(
        self,
        *,
        layout: ProjectLayout,
        signing: SigningConfig,
        console: ConsoleProtocol,
    ) -> None:
        self._layout = layout
        self._signing = signing
        self._console = console

    def module_patches(self, flavor: FlavorSpec) -> tuple[TextPatch, ...]:
        patches: list[TextPatch] = []
        if self._signing.is_complete:
            patches.append(
                signing_block_patch(self._signing, keystore_file=self._layout.settings.keystore_file)
            )
            patches.append(release_signing_patch())
        if flavor.split_by_abi:
            patches.append(splits_patch())
        if flavor.include_google_services:
            patches.append(google_services_plugin_patch())
        return tuple(patches)

    def project_patches(self, flavor: FlavorSpec) -> tuple[TextPatch, ...]:
        if not flavor.include_google_services:
            return ()
        return (google_services_classpath_patch(self._layout.settings.google_services_version),)

    def patch(self, flavor: FlavorSpec) -> Result[tuple[PatchOutcome, ...], PatchIOFailed]:
        layout = self._layout

        if not self._signing.is_complete:
            self._console.warning(
                "KEYSTORE_PASSWORD/KEYSTORE_ALIAS not set: release stays debug-signed"
            )
        else:
            copied = self._materialize(
                layout.staged_keystore,
                layout.keystore,
                missing="staged keystore not found, signing may fail unless debug-signed",
            )
            if isinstance(copied, Err):
                return copied

        outcomes: list[PatchOutcome] = []
        for path, patches in (
            (layout.module_build_file, self.module_patches(flavor)),
            (layout.project_build_file, self.project_patches(flavor)),
        ):
            if not patches:
                continue
            result = patch_file(path, patches)
            if isinstance(result, Err):
                return result
            report_outcomes(self._console, result.value)
            outcomes.extend(result.value)

        if flavor.include_google_services:
            copied = self._materialize(
                layout.staged_google_services,
                layout.google_services,
                missing="google services config not found, Firebase features will fail",
            )
            if isinstance(copied, Err):
                return copied

        return Ok(tuple(outcomes))

    def _materialize(self, src: Path, dst: Path, *, missing: str) -> Result[None, PatchIOFailed]:
        if not src.is_file():
            self._console.warning(f"{src.name}: {missing}")
            return Ok(None)
        try:
            copy_file(src, dst)
        except OSError as e:
            return Err(PatchIOFailed(path=dst, reason=f"failed to copy {src.name}: {e}"))
        self._console.success(f"{src.name} -> {dst.relative_to(self._layout.root)}")
        return Ok(None)
