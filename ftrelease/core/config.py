"""Typed release configuration.

``ReleaseSettings`` describes the mobile project (file names, commands,
Android identifiers). It has defaults for the FitTrack project and can be
overridden by an optional ``ftrelease.toml`` at the project root:

    [release]
    product_name = "FitTrack"
    compile_command = ["./gradlew", "assembleRelease"]

``RunConfig`` is built once per invocation from the environment and CLI
options and passed explicitly to every service.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

from .flavors import DEFAULT_SELECTOR, FlavorSelectorError, FlavorSpec, resolve_flavors
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "ConfigError",
    "ENV_CI_OUTPUT",
    "ENV_KEYSTORE_ALIAS",
    "ENV_KEYSTORE_PASSWORD",
    "ENV_OVERRIDE_VERSION",
    "ENV_TARGET_FLAVOR",
    "ProjectLayout",
    "ReleaseSettings",
    "RunConfig",
    "SETTINGS_FILE",
    "SigningConfig",
    "build_run_config",
    "load_settings",
]

ENV_KEYSTORE_PASSWORD = "KEYSTORE_PASSWORD"
ENV_KEYSTORE_ALIAS = "KEYSTORE_ALIAS"
ENV_TARGET_FLAVOR = "TARGET_FLAVOR"
ENV_OVERRIDE_VERSION = "OVERRIDE_VERSION"
ENV_CI_OUTPUT = "GITHUB_OUTPUT"

SETTINGS_FILE = "ftrelease.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when settings cannot be loaded or a run cannot be configured."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseSettings:
    product_name: str = "FitTrack"
    app_config: str = "app.json"
    version_source: str = "package.json"
    releases_dir: str = "releases"
    native_dir: str = "android"
    flavor_env_var: str = "EXPO_PUBLIC_BUILD_FLAVOR"
    prebuild_command: tuple[str, ...] = (
        "npx",
        "expo",
        "prebuild",
        "--clean",
        "--platform",
        "android",
    )
    compile_command: tuple[str, ...] = ("./gradlew", "assembleRelease")
    keystore_file: str = "fittrack.p12"
    staged_keystore: str = "fittrack.p12.tmp"
    google_services_file: str = "google-services.json"
    google_services_version: str = "4.4.1"
    main_activity: str = ".MainActivity"
    health_package: str = "com.google.android.apps.healthdata"
    native_package: str = "com.fittrack.app"
    overlay_dir: str = "scripts/android-patches"
    model_asset: str = "pose_landmarker_lite.task"
    model_url: str = (
        "https://storage.googleapis.com/mediapipe-models/pose_landmarker/"
        "pose_landmarker_lite/float16/1/pose_landmarker_lite.task"
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseSettings:
        """Create settings from the ``[release]`` table, keeping defaults for absent keys.

        Raises:
            TypeError: If a key holds a value of the wrong type.
        """
        table: StrDict = get_table(data, "release") or {}
        defaults = cls()
        overrides: dict[str, object] = {}
        for name in (f.name for f in fields(cls)):
            if name not in table:
                continue
            if name.endswith("_command"):
                items = get_str_list(table, name)
                if not items:
                    raise TypeError(f"release.{name} must be a non-empty list of strings")
                overrides[name] = tuple(items)
            else:
                value = get_str(table, name)
                if value is None:
                    raise TypeError(f"release.{name} must be a non-empty string")
                overrides[name] = value
        return replace(defaults, **overrides)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class ProjectLayout:
    """Absolute paths of everything the pipeline reads or writes."""

    root: Path
    settings: ReleaseSettings = field(default_factory=ReleaseSettings)

    @property
    def app_config(self) -> Path:
        return self.root / self.settings.app_config

    @property
    def version_source(self) -> Path:
        return self.root / self.settings.version_source

    @property
    def releases_dir(self) -> Path:
        return self.root / self.settings.releases_dir

    @property
    def native_dir(self) -> Path:
        return self.root / self.settings.native_dir

    @property
    def app_module_dir(self) -> Path:
        return self.native_dir / "app"

    @property
    def module_build_file(self) -> Path:
        return self.app_module_dir / "build.gradle"

    @property
    def project_build_file(self) -> Path:
        return self.native_dir / "build.gradle"

    @property
    def main_src_dir(self) -> Path:
        return self.app_module_dir / "src" / "main"

    @property
    def manifest(self) -> Path:
        return self.main_src_dir / "AndroidManifest.xml"

    @property
    def kotlin_dir(self) -> Path:
        return self.main_src_dir / "java" / Path(*self.settings.native_package.split("."))

    @property
    def assets_dir(self) -> Path:
        return self.main_src_dir / "assets"

    @property
    def staged_keystore(self) -> Path:
        return self.root / self.settings.staged_keystore

    @property
    def keystore(self) -> Path:
        return self.app_module_dir / self.settings.keystore_file

    @property
    def staged_google_services(self) -> Path:
        return self.root / self.settings.google_services_file

    @property
    def google_services(self) -> Path:
        return self.app_module_dir / self.settings.google_services_file

    @property
    def overlay_dir(self) -> Path:
        return self.root / self.settings.overlay_dir

    @property
    def apk_output_dir(self) -> Path:
        return self.app_module_dir / "build" / "outputs" / "apk" / "release"


@dataclass(frozen=True, slots=True)
class SigningConfig:
    store_password: str | None = None
    key_alias: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.store_password) and bool(self.key_alias)


@dataclass(frozen=True, slots=True)
class RunConfig:
    layout: ProjectLayout
    flavors: tuple[FlavorSpec, ...]
    signing: SigningConfig = field(default_factory=SigningConfig)
    override_version: str | None = None
    ci_output: Path | None = None
    base_env: Mapping[str, str] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def settings(self) -> ReleaseSettings:
        return self.layout.settings


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Settings file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading settings: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Settings root must be a TOML table", path=path))
    return Ok(data)


def load_settings(root: Path) -> Result[ReleaseSettings, ConfigError]:
    """Load ``ftrelease.toml`` from ``root``, or defaults when it does not exist."""
    path = root / SETTINGS_FILE
    if not path.exists():
        return Ok(ReleaseSettings())

    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    try:
        return Ok(ReleaseSettings.from_dict(parsed.value))
    except (TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid settings: {e}", path=path))


def _env_value(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key, "").strip()
    return value or None


def build_run_config(
    *,
    root: Path,
    settings: ReleaseSettings,
    env: Mapping[str, str],
    flavor: str | None = None,
    version: str | None = None,
    dry_run: bool = False,
) -> Result[RunConfig, FlavorSelectorError]:
    """Assemble the run configuration; explicit options win over the environment."""
    selector = flavor or _env_value(env, ENV_TARGET_FLAVOR) or DEFAULT_SELECTOR
    flavors = resolve_flavors(selector)
    if isinstance(flavors, Err):
        return flavors

    ci_output = _env_value(env, ENV_CI_OUTPUT)
    return Ok(
        RunConfig(
            layout=ProjectLayout(root=root, settings=settings),
            flavors=flavors.value,
            signing=SigningConfig(
                store_password=env.get(ENV_KEYSTORE_PASSWORD) or None,
                key_alias=_env_value(env, ENV_KEYSTORE_ALIAS),
            ),
            override_version=(version or "").strip() or _env_value(env, ENV_OVERRIDE_VERSION),
            ci_output=Path(ci_output) if ci_output else None,
            base_env=dict(env),
            dry_run=dry_run,
        )
    )
