"""Version and flavor stamping into the Expo app configuration (``app.json``)."""

from __future__ import annotations

from pathlib import Path

from ftrelease.core.flavors import FlavorSpec
from ftrelease.core.result import Err, Result
from ftrelease.core.structured import StrDict, ensure_table
from ftrelease.core.version import Version
from ftrelease.services.json_doc import DocumentError, load_json_object, save_json_object

# Expo aborts the prebuild when this file is referenced but missing; the
# SDK config is copied into the native tree by the build-config patcher instead.
GOOGLE_SERVICES_KEY = "googleServicesFile"


def stamp_flavor(data: StrDict, *, flavor: FlavorSpec, version: Version) -> StrDict:
    """Write version, build code and flavor marker into an app.json document in place."""
    expo = ensure_table(data, "expo")
    expo["version"] = str(version)

    android = ensure_table(expo, "android")
    android["versionCode"] = version.build_code
    android.pop(GOOGLE_SERVICES_KEY, None)

    extra = ensure_table(expo, "extra")
    extra["buildFlavor"] = flavor.name
    return data


def configure_for_flavor(
    path: Path, *, flavor: FlavorSpec, version: Version
) -> Result[None, DocumentError]:
    loaded = load_json_object(path)
    if isinstance(loaded, Err):
        return loaded
    return save_json_object(path, stamp_flavor(loaded.value, flavor=flavor, version=version))
