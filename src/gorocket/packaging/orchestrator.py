"""Core logic for the build and release pipelines."""

from collections.abc import Mapping, Sequence
from pathlib import Path

from attrs import define
from pyvider.telemetry import logger

from ..compiler import CrossCompiler, expand_targets
from ..config import config_exists, load_config
from ..exceptions import ArchiveError, BuildError, ConfigError, ProjectError
from ..formula import FormulaGenerator
from ..git import GitClient, resolve_repository
from ..github import RemoteHost
from ..models import (
    CONFIG_FILE_NAME,
    ArchiveResult,
    BuildInfo,
    BuildResult,
    Config,
)
from ..process import CommandRunner
from ..project import get_build_info, prepare_output_dir
from ..releaser import ReleaseOutcome, ReleaseReconciler
from .archiver import Archiver


@define(frozen=True)
class BuildOutcome:
    info: BuildInfo
    config: Config
    archives: list[ArchiveResult]
    formula_path: Path | None = None


def _first_failure(
    results: Sequence[BuildResult] | Sequence[ArchiveResult],
) -> BuildResult | ArchiveResult | None:
    failures = [r for r in results if r.error is not None]
    for result in failures:
        logger.error("Target failed", target=str(result.target), error=str(result.error))
    return failures[0] if failures else None


class BuildOrchestrator:
    def __init__(
        self,
        project_dir: Path,
        output_dir: Path,
        runner: CommandRunner,
        host: RemoteHost | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.project_dir = project_dir
        self.output_dir = output_dir
        self.runner = runner
        self.host = host
        self.environ = environ
        self.git = GitClient(runner, cwd=project_dir)
        self.compiler = CrossCompiler(runner, project_dir, output_dir)
        self.archiver = Archiver(output_dir)
        self.formula = FormulaGenerator()

    def _remove_binaries(self, results: list[BuildResult]) -> None:
        # Duplicate targets share one binary path.
        for binary_path in dict.fromkeys(r.binary_path for r in results):
            try:
                Path(binary_path).unlink()
            except OSError as e:
                raise ProjectError(
                    f"Failed to remove binary file {binary_path}: {e}"
                ) from e

    def build(self, clean: bool = False) -> BuildOutcome:
        if not config_exists(self.project_dir):
            raise ConfigError(f"{CONFIG_FILE_NAME} not found. Run 'gorocket init' first")

        info = get_build_info(self.project_dir, self.git)
        config = load_config(
            self.project_dir, {"version": info.version, "module": info.module_name}
        )
        prepare_output_dir(self.output_dir, clean)

        logger.info(
            "Orchestrator starting build", module=info.module_name, version=info.version
        )
        targets = expand_targets(config.build.targets)
        build_results = self.compiler.build_targets(info, targets, config.build.ldflags)

        failed_build = _first_failure(build_results)
        if failed_build is not None:
            failure_count = sum(1 for r in build_results if r.error is not None)
            raise BuildError(
                f"Failed to build target {failed_build.target} "
                f"({failure_count} of {len(build_results)} targets failed): "
                f"{failed_build.error}"
            ) from failed_build.error

        archives = self.archiver.create_archives(info, build_results)
        failed_archive = _first_failure(archives)
        if failed_archive is not None:
            raise ArchiveError(
                f"Failed to create archive for {failed_archive.target}: "
                f"{failed_archive.error}"
            ) from failed_archive.error

        self._remove_binaries(build_results)

        formula_path = None
        if config.brew is not None:
            logger.info("Generating Homebrew formula")
            repo = resolve_repository(self.git, self.environ)
            content = self.formula.generate(info, archives, repo)
            formula_path = self.formula.write(self.output_dir, info, content)

        logger.info("Build completed", archives=len(archives))
        return BuildOutcome(
            info=info, config=config, archives=archives, formula_path=formula_path
        )

    def release(self, clean: bool = False, draft: bool = False) -> tuple[BuildOutcome, ReleaseOutcome]:
        if self.host is None:
            raise ConfigError("A remote host client is required to release")

        outcome = self.build(clean=clean)
        repo = resolve_repository(self.git, self.environ)
        tap = outcome.config.brew.repository if outcome.config.brew else None

        reconciler = ReleaseReconciler(self.host, self.output_dir)
        release = reconciler.release(
            outcome.info, outcome.archives, repo, draft=draft, tap=tap
        )
        return outcome, release
