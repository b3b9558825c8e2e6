"""Top-level release run across flavors."""

from __future__ import annotations

from dataclasses import dataclass

from ftrelease.core.config import RunConfig
from ftrelease.core.flavors import FlavorSpec, needs_tree_reset
from ftrelease.core.result import Err, Ok, Result
from ftrelease.core.version import Version, parse_version
from ftrelease.output.console import ConsoleProtocol, Style
from ftrelease.platform.files import remove_tree
from ftrelease.services.ci_output import export_output
from ftrelease.services.pipeline import FlavorPipeline, FlavorReport
from ftrelease.services.release_errors import PipelineFailure, Stage, TreeResetFailed
from ftrelease.services.version_source import read_version, write_version

__all__ = ["FINAL_VERSION_OUTPUT", "ReleaseOrchestrator", "ReleaseReport"]

FINAL_VERSION_OUTPUT = "final_version"


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    version: Version
    flavors: tuple[FlavorReport, ...]

    @property
    def artifacts(self) -> tuple[str, ...]:
        return tuple(p.name for report in self.flavors for p in report.artifacts)


class ReleaseOrchestrator:
    """Resolves the version once, then builds every requested flavor in order.

    Flavors run one after the other in the same native tree. The tree is
    deleted before a flavor whose SDK integration differs from what the tree
    may hold, so blocks injected for one flavor never leak into another.
    """

    def __init__(
        self,
        *,
        config: RunConfig,
        console: ConsoleProtocol,
        pipeline: FlavorPipeline | None = None,
    ) -> None:
        self._config = config
        self._console = console
        self._pipeline = pipeline or FlavorPipeline(config=config, console=console)

    def run(self) -> Result[ReleaseReport, PipelineFailure]:
        resolved = self.resolve_version()
        if isinstance(resolved, Err):
            return resolved
        version = resolved.value
        self._export_version(version)

        reports: list[FlavorReport] = []
        previous: FlavorSpec | None = None
        for flavor in self._config.flavors:
            if needs_tree_reset(previous, flavor):
                reset = self.reset_native_tree(flavor)
                if isinstance(reset, Err):
                    return reset

            result = self._pipeline.run(flavor, version)
            if isinstance(result, Err):
                return result
            reports.append(result.value)
            previous = flavor

        report = ReleaseReport(version=version, flavors=tuple(reports))
        self._summarize(report)
        return Ok(report)

    def resolve_version(self) -> Result[Version, PipelineFailure]:
        """Pick the release version: the override if given, else package.json.

        An override is written back to package.json so later tooling in the
        same job sees the released version.
        """
        path = self._config.layout.version_source
        override = self._config.override_version

        if override:
            parsed = parse_version(override)
            if isinstance(parsed, Err):
                return Err(PipelineFailure(stage=Stage.RESOLVE, error=parsed.error))
            version = parsed.value
            self._console.info(f"overriding version to {version}")
            if self._config.dry_run:
                self._console.print(f"would write version {version} to {path.name}", Style.DIM)
                return Ok(version)
            written = write_version(path, str(version))
            if isinstance(written, Err):
                return Err(PipelineFailure(stage=Stage.RESOLVE, error=written.error))
            return Ok(version)

        current = read_version(path)
        if isinstance(current, Err):
            return Err(PipelineFailure(stage=Stage.RESOLVE, error=current.error))
        parsed = parse_version(current.value)
        if isinstance(parsed, Err):
            return Err(PipelineFailure(stage=Stage.RESOLVE, error=parsed.error))
        self._console.info(f"using {path.name} version {parsed.value}")
        return Ok(parsed.value)

    def reset_native_tree(self, flavor: FlavorSpec) -> Result[None, PipelineFailure]:
        native_dir = self._config.layout.native_dir
        if self._config.dry_run:
            self._console.print(f"would delete {native_dir} before {flavor.name}", Style.DIM)
            return Ok(None)
        try:
            removed = remove_tree(native_dir)
        except OSError as e:
            return Err(
                PipelineFailure(
                    stage=Stage.REGENERATE,
                    error=TreeResetFailed(path=native_dir, reason=str(e)),
                    flavor=flavor.name,
                )
            )
        if removed:
            self._console.info(f"deleted {native_dir.name}/ before building {flavor.name}")
        return Ok(None)

    def _export_version(self, version: Version) -> None:
        path = self._config.ci_output
        if path is None:
            return
        if self._config.dry_run:
            self._console.print(f"would export {FINAL_VERSION_OUTPUT}={version}", Style.DIM)
            return
        exported = export_output(path, FINAL_VERSION_OUTPUT, str(version))
        if isinstance(exported, Err):
            self._console.warning(exported.error)

    def _summarize(self, report: ReleaseReport) -> None:
        self._console.newline()
        for flavor_report in report.flavors:
            name = flavor_report.flavor.display_name
            if flavor_report.succeeded:
                count = len(flavor_report.artifacts)
                self._console.success(f"{name}: {count} artifact(s) for {report.version}")
            elif not self._config.dry_run:
                self._console.warning(f"{name}: no artifact collected, inspect the build log")
