"""
Cross-compilation of the Go module for every configured target.
"""

from collections.abc import Iterable
from pathlib import Path

from pyvider.telemetry import logger

from .exceptions import BuildError, CommandError
from .models import BuildInfo, BuildResult, ConcreteTarget, Target
from .process import CommandRunner


def expand_targets(targets: Iterable[Target]) -> list[ConcreteTarget]:
    """
    Flattens `{os, [arch...]}` entries into `(os, arch)` pairs, in
    configuration order. Duplicates are kept.
    """
    return [ConcreteTarget(os=t.os, arch=arch) for t in targets for arch in t.arch]


def binary_name(info: BuildInfo, target: ConcreteTarget) -> str:
    suffix = ".exe" if target.is_windows else ""
    return f"{info.artifact_stem(target)}{suffix}"


class CrossCompiler:
    def __init__(
        self, runner: CommandRunner, project_dir: Path, output_dir: Path
    ) -> None:
        self.runner = runner
        self.project_dir = project_dir
        self.output_dir = output_dir

    def build(self, info: BuildInfo, target: ConcreteTarget, ldflags: str) -> BuildResult:
        binary_path = self.output_dir / binary_name(info, target)
        args = ["go", "build", "-o", str(binary_path)]
        if ldflags:
            args.extend(["-ldflags", ldflags])
        args.append(".")
        env = {"GOOS": target.os, "GOARCH": target.arch}

        logger.info("Building target", os=target.os, arch=target.arch)
        try:
            self.runner.run(args, env=env, cwd=self.project_dir)
        except CommandError as e:
            diagnostic = e.stderr.strip() or str(e)
            logger.error("Build failed", target=str(target), stderr=diagnostic)
            return BuildResult(
                target=target,
                error=BuildError(f"go build failed for {target}: {diagnostic}"),
            )
        return BuildResult(target=target, binary_path=str(binary_path))

    def build_targets(
        self, info: BuildInfo, targets: Iterable[ConcreteTarget], ldflags: str
    ) -> list[BuildResult]:
        """Builds every target; a failing target is recorded, never raised."""
        return [self.build(info, target, ldflags) for target in targets]
