"""Facts about the Go project being released and its output directory."""

from pathlib import Path
import shutil

from pyvider.telemetry import logger

from .exceptions import ProjectError
from .git import GitClient
from .models import BuildInfo


def read_module_name(project_dir: Path) -> str:
    """Returns the trailing path segment of the `module` directive in go.mod."""
    go_mod = project_dir / "go.mod"
    try:
        lines = go_mod.read_text().splitlines()
    except OSError as e:
        raise ProjectError(f"Failed to open go.mod: {e}") from e

    for line in lines:
        line = line.strip()
        if line.startswith("module "):
            module = line.removeprefix("module").strip().strip('"')
            return module.rstrip("/").split("/")[-1]

    raise ProjectError(f"Module name not found in {go_mod}")


def get_build_info(project_dir: Path, git: GitClient) -> BuildInfo:
    return BuildInfo(module_name=read_module_name(project_dir), version=git.head_tag())


def prepare_output_dir(output_dir: Path, clean: bool) -> None:
    """
    Ensures an empty output directory. A non-empty directory is an error
    unless `clean` is set, in which case it is removed first.
    """
    if output_dir.exists():
        if not output_dir.is_dir():
            raise ProjectError(f"Output path exists and is not a directory: {output_dir}")
        if any(output_dir.iterdir()):
            if not clean:
                raise ProjectError(
                    f"{output_dir} directory is not empty (use --clean to remove it)"
                )
            logger.info("Cleaning output directory", path=str(output_dir))
            try:
                shutil.rmtree(output_dir)
            except OSError as e:
                raise ProjectError(f"Failed to clean {output_dir}: {e}") from e

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProjectError(f"Failed to create {output_dir}: {e}") from e
