"""Build of a single product flavor.

Stages run strictly in order and never go back:

    configure -> regenerate -> patch -> compile -> collect

A fatal error in any stage stops the flavor and is returned as a
``PipelineFailure`` naming the stage; the orchestrator then ends the whole
run. Recoverable problems (missing anchors, staged credentials, artifacts)
are reported as console warnings inside the stage and do not stop it.
Re-running from scratch after an interruption is safe: every file edit is
marker-gated and regeneration starts from a clean tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ftrelease.core.config import RunConfig
from ftrelease.core.flavors import FlavorSpec
from ftrelease.core.result import Err, Ok, Result
from ftrelease.core.version import Version
from ftrelease.output.console import ConsoleProtocol, Style
from ftrelease.platform.process import ProcessRunner, run_silent
from ftrelease.services.app_config import configure_for_flavor
from ftrelease.services.artifacts import collect_artifacts
from ftrelease.services.assets import check_model_asset
from ftrelease.services.json_doc import DocumentError
from ftrelease.services.overlays import apply_overlays
from ftrelease.services.patching.build_config import BuildConfigPatcher
from ftrelease.services.patching.manifest import patch_manifest
from ftrelease.services.patching.text import PatchOutcome, report_outcomes
from ftrelease.services.release_errors import (
    CompileFailed,
    PatchIOFailed,
    PipelineFailure,
    PrebuildFailed,
    ReleaseError,
    Stage,
)

__all__ = ["FlavorPipeline", "FlavorReport"]


@dataclass(frozen=True, slots=True)
class FlavorReport:
    flavor: FlavorSpec
    version: Version
    artifacts: tuple[Path, ...] = ()
    patches: tuple[PatchOutcome, ...] = ()
    model_asset_present: bool = False

    @property
    def succeeded(self) -> bool:
        return bool(self.artifacts)


class FlavorPipeline:
    """Runs the five build stages for one flavor at a time."""

    def __init__(
        self,
        *,
        config: RunConfig,
        console: ConsoleProtocol,
        runner: ProcessRunner = run_silent,
    ) -> None:
        self._config = config
        self._layout = config.layout
        self._console = console
        self._runner = runner

    def run(self, flavor: FlavorSpec, version: Version) -> Result[FlavorReport, PipelineFailure]:
        self._console.header(f"Building {flavor.display_name} ({version})")

        def fail(stage: Stage, error: ReleaseError) -> Err[PipelineFailure]:
            return Err(PipelineFailure(stage=stage, error=error, flavor=flavor.name))

        self._stage(Stage.CONFIGURE)
        configured = self.configure(flavor, version)
        if isinstance(configured, Err):
            return fail(Stage.CONFIGURE, configured.error)

        self._stage(Stage.REGENERATE)
        regenerated = self.regenerate(flavor)
        if isinstance(regenerated, Err):
            return fail(Stage.REGENERATE, regenerated.error)
        model_present = not self._config.dry_run and check_model_asset(self._layout, self._console)

        self._stage(Stage.PATCH)
        patched = self.patch(flavor)
        if isinstance(patched, Err):
            return fail(Stage.PATCH, patched.error)

        self._stage(Stage.COMPILE)
        compiled = self.compile(flavor)
        if isinstance(compiled, Err):
            return fail(Stage.COMPILE, compiled.error)

        self._stage(Stage.COLLECT)
        artifacts = self.collect(flavor, version)

        return Ok(
            FlavorReport(
                flavor=flavor,
                version=version,
                artifacts=tuple(artifacts),
                patches=patched.value,
                model_asset_present=model_present,
            )
        )

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def configure(self, flavor: FlavorSpec, version: Version) -> Result[None, DocumentError]:
        path = self._layout.app_config
        if self._config.dry_run:
            self._console.print(
                f"would stamp {path.name}: version={version} versionCode={version.build_code} "
                f"buildFlavor={flavor.name}",
                Style.DIM,
            )
            return Ok(None)

        result = configure_for_flavor(path, flavor=flavor, version=version)
        if isinstance(result, Err):
            return result
        self._console.success(
            f"{path.name}: version {version} (code {version.build_code}), flavor {flavor.name}"
        )
        return Ok(None)

    def regenerate(self, flavor: FlavorSpec) -> Result[None, PrebuildFailed]:
        cmd = list(self._config.settings.prebuild_command)
        self._console.command(cmd)
        if self._config.dry_run:
            return Ok(None)

        result = self._runner(cmd, self._layout.root, self._env(flavor))
        if isinstance(result, Err):
            return Err(PrebuildFailed(returncode=result.error.returncode, detail=result.error.detail))
        return Ok(None)

    def patch(self, flavor: FlavorSpec) -> Result[tuple[PatchOutcome, ...], PatchIOFailed]:
        if self._config.dry_run:
            self._console.print("would patch Gradle files and AndroidManifest.xml", Style.DIM)
            return Ok(())

        patcher = BuildConfigPatcher(
            layout=self._layout,
            signing=self._config.signing,
            console=self._console,
        )
        build_outcomes = patcher.patch(flavor)
        if isinstance(build_outcomes, Err):
            return build_outcomes

        settings = self._config.settings
        manifest_outcomes = patch_manifest(
            self._layout.manifest,
            activity=settings.main_activity,
            package=settings.health_package,
        )
        if isinstance(manifest_outcomes, Err):
            return manifest_outcomes
        report_outcomes(self._console, manifest_outcomes.value)

        overlays = apply_overlays(self._layout, self._console)
        if isinstance(overlays, Err):
            return overlays

        return Ok(build_outcomes.value + manifest_outcomes.value)

    def compile(self, flavor: FlavorSpec) -> Result[None, CompileFailed]:
        cmd = list(self._config.settings.compile_command)
        self._console.command(cmd)
        if self._config.dry_run:
            return Ok(None)

        result = self._runner(cmd, self._layout.native_dir, self._env(flavor))
        if isinstance(result, Err):
            return Err(CompileFailed(returncode=result.error.returncode, detail=result.error.detail))
        return Ok(None)

    def collect(self, flavor: FlavorSpec, version: Version) -> list[Path]:
        if self._config.dry_run:
            self._console.print(
                f"would move APKs from {self._layout.apk_output_dir} "
                f"to {self._layout.releases_dir}",
                Style.DIM,
            )
            return []

        return collect_artifacts(
            output_dir=self._layout.apk_output_dir,
            releases_dir=self._layout.releases_dir,
            product=self._config.settings.product_name,
            version=version,
            flavor=flavor,
            console=self._console,
        )

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _stage(self, stage: Stage) -> None:
        self._console.print(f"> {stage}", Style.INFO)

    def _env(self, flavor: FlavorSpec) -> dict[str, str]:
        env = dict(self._config.base_env)
        env[self._config.settings.flavor_env_var] = flavor.env_marker
        return env
