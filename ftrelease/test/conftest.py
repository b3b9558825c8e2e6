"""Shared fixtures: a FitTrack project on disk and a fake native toolchain.

The fake toolchain stands in for ``expo prebuild`` and ``gradlew``: the
prebuild writes a freshly generated native tree (as Expo does with
``--clean``) and the compile writes APKs shaped by the patched Gradle file.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from ftrelease.core.config import ProjectLayout, ReleaseSettings, RunConfig, SigningConfig
from ftrelease.core.flavors import FLAVORS, FlavorSpec
from ftrelease.core.result import Err, Ok, Result
from ftrelease.platform.process import ProcessError
from ftrelease.services.patching.build_config import ABIS

MODULE_GRADLE = """\
apply plugin: "com.android.application"
apply plugin: "org.jetbrains.kotlin.android"
apply plugin: "com.facebook.react"

def projectRoot = rootDir.getAbsoluteFile().getParentFile().getAbsolutePath()

react {
    entryFile = file(["node", "-e", "require('expo/scripts/resolveAppEntry')", projectRoot, "android", "absolute"].execute(null, rootDir).text.trim())
}

def enableProguardInReleaseBuilds = (findProperty('android.enableProguardInReleaseBuilds') ?: false).toBoolean()

android {
    ndkVersion rootProject.ext.ndkVersion

    compileSdk rootProject.ext.compileSdkVersion

    namespace 'com.fittrack.app'
    defaultConfig {
        applicationId 'com.fittrack.app'
        minSdkVersion rootProject.ext.minSdkVersion
        targetSdkVersion rootProject.ext.targetSdkVersion
        versionCode 10203
        versionName "1.2.3"
    }
    signingConfigs {
        debug {
            storeFile file('debug.keystore')
            storePassword 'android'
            keyAlias 'androiddebugkey'
            keyPassword 'android'
        }
    }
    buildTypes {
        debug {
            signingConfig signingConfigs.debug
        }
        release {
            // Caution! In production, you need to generate your own keystore file.
            signingConfig signingConfigs.debug
            shrinkResources (findProperty('android.enableShrinkResourcesInReleaseBuilds')?.toBoolean() ?: false)
            minifyEnabled enableProguardInReleaseBuilds
            proguardFiles getDefaultProguardFile("proguard-android.txt"), "proguard-rules.pro"
        }
    }
}

dependencies {
    implementation("com.facebook.react:react-android")
}
"""

PROJECT_GRADLE = """\
buildscript {
    ext {
        buildToolsVersion = findProperty('android.buildToolsVersion') ?: '34.0.0'
    }
    repositories {
        google()
        mavenCentral()
    }
    dependencies {
        classpath('com.android.tools.build:gradle')
        classpath('com.facebook.react:react-native-gradle-plugin')
    }
}

allprojects {
    repositories {
        google()
        mavenCentral()
    }
}
"""

MANIFEST = """\
<manifest xmlns:android="http://schemas.android.com/apk/res/android">
  <uses-permission android:name="android.permission.INTERNET"/>
  <queries>
    <intent>
      <action android:name="android.intent.action.VIEW"/>
      <category android:name="android.intent.category.BROWSABLE"/>
      <data android:scheme="https"/>
    </intent>
  </queries>
  <application android:name=".MainApplication" android:label="@string/app_name" android:allowBackup="true">
    <activity android:name=".MainActivity" android:launchMode="singleTask" android:exported="true">
      <intent-filter>
        <action android:name="android.intent.action.MAIN"/>
        <category android:name="android.intent.category.LAUNCHER"/>
      </intent-filter>
      <intent-filter>
        <action android:name="android.intent.action.VIEW"/>
        <data android:scheme="fittrack"/>
      </intent-filter>
    </activity>
  </application>
</manifest>
"""

APP_JSON = {
    "expo": {
        "name": "FitTrack",
        "slug": "fittrack",
        "version": "1.0.0",
        "android": {
            "package": "com.fittrack.app",
            "versionCode": 1,
            "googleServicesFile": "./google-services.json",
        },
        "plugins": ["expo-router", "./plugins/withMediaPipeModel"],
        "extra": {"eas": {"projectId": "abc"}},
    }
}


def write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def write_native_tree(layout: ProjectLayout, *, model_asset: bool = True) -> None:
    """Write the files a clean ``expo prebuild`` generates."""
    layout.app_module_dir.mkdir(parents=True, exist_ok=True)
    layout.module_build_file.write_text(MODULE_GRADLE, encoding="utf-8")
    layout.project_build_file.write_text(PROJECT_GRADLE, encoding="utf-8")
    layout.manifest.parent.mkdir(parents=True, exist_ok=True)
    layout.manifest.write_text(MANIFEST, encoding="utf-8")
    layout.kotlin_dir.mkdir(parents=True, exist_ok=True)
    (layout.kotlin_dir / "MainActivity.kt").write_text("// generated\n", encoding="utf-8")
    if model_asset:
        layout.assets_dir.mkdir(parents=True, exist_ok=True)
        (layout.assets_dir / layout.settings.model_asset).write_bytes(b"tflite")


@dataclass
class CompileSnapshot:
    module_gradle: str
    project_gradle: str
    manifest: str
    google_services_present: bool
    keystore_present: bool


@dataclass
class FakeToolchain:
    """ProcessRunner double for the prebuild and compile commands."""

    layout: ProjectLayout
    fail_on: str | None = None
    model_asset: bool = True
    calls: list[tuple[str, str]] = field(default_factory=list)
    tree_present_at_prebuild: list[bool] = field(default_factory=list)
    snapshots: dict[str, CompileSnapshot] = field(default_factory=dict)

    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[None, ProcessError]:
        flavor = (env or {}).get(self.layout.settings.flavor_env_var, "")
        step = "prebuild" if "prebuild" in cmd else "compile"
        self.calls.append((step, flavor))
        if self.fail_on == step:
            return Err(ProcessError(command=tuple(cmd), returncode=1))

        if step == "prebuild":
            assert cwd == self.layout.root
            self.tree_present_at_prebuild.append(self.layout.native_dir.exists())
            write_native_tree(self.layout, model_asset=self.model_asset)
            return Ok(None)

        assert cwd == self.layout.native_dir
        module = self.layout.module_build_file.read_text(encoding="utf-8")
        self.snapshots[flavor] = CompileSnapshot(
            module_gradle=module,
            project_gradle=self.layout.project_build_file.read_text(encoding="utf-8"),
            manifest=self.layout.manifest.read_text(encoding="utf-8"),
            google_services_present=self.layout.google_services.exists(),
            keystore_present=self.layout.keystore.exists(),
        )
        out = self.layout.apk_output_dir
        out.mkdir(parents=True, exist_ok=True)
        if "splits {" in module:
            for abi in ABIS:
                (out / f"app-{abi}-release.apk").write_bytes(b"apk")
        else:
            (out / "app-release.apk").write_bytes(b"apk")
        (out / "output-metadata.json").write_text("{}", encoding="utf-8")
        return Ok(None)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A FitTrack checkout with staged credentials and no native tree yet."""
    root = tmp_path / "fittrack"
    root.mkdir()
    write_json(root / "app.json", APP_JSON)
    write_json(root / "package.json", {"name": "fittrack", "version": "1.2.3", "private": True})
    (root / "fittrack.p12.tmp").write_bytes(b"keystore")
    write_json(root / "google-services.json", {"project_info": {"project_id": "fittrack"}})
    return root


@pytest.fixture
def layout(project_root: Path) -> ProjectLayout:
    return ProjectLayout(root=project_root, settings=ReleaseSettings())


@pytest.fixture
def signing() -> SigningConfig:
    return SigningConfig(store_password="s3cret", key_alias="fittrack")


@pytest.fixture
def make_config(
    layout: ProjectLayout, signing: SigningConfig
) -> Callable[..., RunConfig]:
    def factory(
        *flavors: FlavorSpec,
        signing_config: SigningConfig | None = None,
        override_version: str | None = None,
        ci_output: Path | None = None,
        dry_run: bool = False,
    ) -> RunConfig:
        return RunConfig(
            layout=layout,
            flavors=flavors or (FLAVORS["standard"],),
            signing=signing_config if signing_config is not None else signing,
            override_version=override_version,
            ci_output=ci_output,
            dry_run=dry_run,
        )

    return factory


@pytest.fixture
def toolchain(layout: ProjectLayout) -> FakeToolchain:
    return FakeToolchain(layout=layout)


@pytest.fixture
def native_tree(layout: ProjectLayout) -> ProjectLayout:
    """Layout whose native tree has already been generated."""
    write_native_tree(layout)
    return layout


@pytest.fixture
def module_gradle() -> str:
    return MODULE_GRADLE


@pytest.fixture
def project_gradle() -> str:
    return PROJECT_GRADLE


@pytest.fixture
def manifest_xml() -> str:
    return MANIFEST
