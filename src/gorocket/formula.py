"""Homebrew formula generation from the built archives."""

from collections.abc import Iterable
from pathlib import Path

import jinja2
from pyvider.telemetry import logger

from .crypto import sha256_file
from .exceptions import ChecksumError, FormulaError
from .models import (
    FORMULA_EXTENSION,
    GITHUB_HOST,
    ArchiveResult,
    BuildInfo,
    FormulaURL,
    PlatformURLTable,
    RemoteRepository,
)

_TEMPLATE_DIR = Path(__file__).parent / "templates"
_FORMULA_TEMPLATE = "formula.rb.j2"

# (template variable, os, arch)
FORMULA_SLOTS = (
    ("darwin_arm64", "darwin", "arm64"),
    ("darwin_amd64", "darwin", "amd64"),
    ("linux_arm64", "linux", "arm64"),
    ("linux_amd64", "linux", "amd64"),
)

_SLOT_KEYS = {(os_name, arch) for _, os_name, arch in FORMULA_SLOTS}
_EMPTY_SLOT = FormulaURL(url="", sha256="")


def _get_template_env() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
        keep_trailing_newline=True,
        autoescape=False,
    )


def to_class_name(module_name: str) -> str:
    """`github.com/owner/go-rocket` -> `Gorocket`."""
    name = module_name.split("/")[-1]
    name = name.replace("-", "").replace("_", "")
    if not name:
        return ""
    return name[0].upper() + name[1:]


def display_version(version: str) -> str:
    return version.removeprefix("v")


def formula_file_name(module_name: str) -> str:
    return f"{module_name}.{FORMULA_EXTENSION}"


def tap_formula_path(module_name: str) -> str:
    return f"Formula/{formula_file_name(module_name)}"


def download_url(repo: RemoteRepository, version: str, archive_name: str) -> str:
    return (
        f"https://{GITHUB_HOST}/{repo.owner}/{repo.name}"
        f"/releases/download/{version}/{archive_name}"
    )


def build_platform_urls(
    info: BuildInfo, archives: Iterable[ArchiveResult], repo: RemoteRepository
) -> PlatformURLTable:
    """Hashes every successful archive and maps `os -> arch -> (url, sha256)`."""
    table: PlatformURLTable = {}
    for result in archives:
        if result.error is not None:
            continue
        archive_path = Path(result.archive_path)
        checksum = sha256_file(archive_path)
        url = download_url(repo, info.version, archive_path.name)
        table.setdefault(result.target.os, {})[result.target.arch] = FormulaURL(
            url=url, sha256=checksum
        )
    return table


def render_formula(info: BuildInfo, table: PlatformURLTable) -> str:
    slots = {
        var: table.get(os_name, {}).get(arch, _EMPTY_SLOT)
        for var, os_name, arch in FORMULA_SLOTS
    }
    template = _get_template_env().get_template(_FORMULA_TEMPLATE)
    return template.render(
        class_name=to_class_name(info.module_name),
        version=display_version(info.version),
        module_name=info.module_name,
        **slots,
    )


class FormulaGenerator:
    def generate(
        self,
        info: BuildInfo,
        archives: Iterable[ArchiveResult],
        repo: RemoteRepository,
    ) -> str:
        """
        Renders the formula text. A checksum failure aborts generation
        before anything is rendered.
        """
        try:
            table = build_platform_urls(info, archives, repo)
        except ChecksumError:
            logger.error("Formula generation aborted by checksum failure")
            raise
        unmapped = sorted(
            f"{os_name}/{arch}"
            for os_name, arches in table.items()
            for arch in arches
            if (os_name, arch) not in _SLOT_KEYS
        )
        if unmapped:
            logger.debug("Platforms without a formula slot", platforms=unmapped)
        return render_formula(info, table)

    def write(self, output_dir: Path, info: BuildInfo, content: str) -> Path:
        path = output_dir / formula_file_name(info.module_name)
        try:
            path.write_text(content)
        except OSError as e:
            raise FormulaError(f"Failed to write formula file {path}: {e}") from e
        logger.info("Created formula", path=str(path))
        return path
