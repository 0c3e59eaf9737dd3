"""Idempotent publication of a version tag as a hosted release."""

from collections.abc import Iterable
from pathlib import Path

from attrs import define, evolve, field
from pyvider.telemetry import logger

from .exceptions import FormulaError, ReleaseError, RemoteAPIError
from .formula import formula_file_name, tap_formula_path
from .github import RemoteHost
from .models import (
    GITHUB_HOST,
    ArchiveResult,
    BuildInfo,
    ReleaseAsset,
    RemoteRelease,
    RemoteRepository,
)


@define(frozen=True, slots=True)
class ReleaseOutcome:
    tag: str
    release_url: str
    created: bool
    assets: tuple[ReleaseAsset, ...] = field(factory=tuple, converter=tuple)
    tap_updated: bool = False


def collect_assets(output_dir: Path, exclude: Iterable[str] = ()) -> list[ReleaseAsset]:
    """Every regular file in `output_dir` except those named in `exclude`, by name."""
    excluded = set(exclude)
    return [
        ReleaseAsset(name=path.name, path=path)
        for path in sorted(output_dir.iterdir())
        if path.is_file() and path.name not in excluded
    ]


def tag_url(repo: RemoteRepository, tag: str) -> str:
    return f"https://{GITHUB_HOST}/{repo.owner}/{repo.name}/releases/tag/{tag}"


class ReleaseReconciler:
    def __init__(self, host: RemoteHost, output_dir: Path) -> None:
        self.host = host
        self.output_dir = output_dir

    def _lookup(self, repo: RemoteRepository, tag: str) -> RemoteRelease | None:
        try:
            return self.host.get_release_by_tag(repo, tag)
        except RemoteAPIError as e:
            raise ReleaseError(f"Failed to check if release {tag} exists: {e}") from e

    def _create(self, repo: RemoteRepository, tag: str, draft: bool) -> RemoteRelease:
        try:
            release = self.host.create_release(repo, tag=tag, name=tag, draft=draft)
        except RemoteAPIError as e:
            raise ReleaseError(f"Failed to create release {tag}: {e}") from e
        logger.info("Created release", tag=tag, draft=draft, url=release.html_url)
        return release

    def _upload(
        self, repo: RemoteRepository, release: RemoteRelease, assets: list[ReleaseAsset]
    ) -> None:
        for asset in assets:
            logger.info("Uploading asset", name=asset.name)
            try:
                self.host.upload_release_asset(repo, release, asset.name, asset.path)
            except RemoteAPIError as e:
                raise ReleaseError(f"Failed to upload asset {asset.name}: {e}") from e

    def update_tap(self, info: BuildInfo, tap: RemoteRepository) -> None:
        """
        Pushes the freshly written formula into the tap repository. The
        current revision, if any, is passed along so the write is an update.
        """
        formula_path = self.output_dir / formula_file_name(info.module_name)
        try:
            content = formula_path.read_text()
        except OSError as e:
            raise FormulaError(f"Failed to read formula file {formula_path}: {e}") from e

        remote_path = tap_formula_path(info.module_name)
        message = f"Update {info.module_name} to {info.version}"
        try:
            existing = self.host.get_file(tap, remote_path)
            self.host.create_or_update_file(
                tap,
                remote_path,
                content=content,
                message=message,
                sha=existing.sha if existing else None,
            )
        except RemoteAPIError as e:
            raise ReleaseError(f"Failed to update tap repository {tap.slug}: {e}") from e
        logger.info("Updated tap repository", repository=tap.slug, path=remote_path)

    def release(
        self,
        info: BuildInfo,
        archives: Iterable[ArchiveResult],
        repo: RemoteRepository,
        draft: bool = False,
        tap: RemoteRepository | None = None,
    ) -> ReleaseOutcome:
        failed = [a for a in archives if a.error is not None]
        if failed:
            raise ReleaseError(
                f"Refusing to release with a failed archive for {failed[0].target}: "
                f"{failed[0].error}"
            )

        tag = info.version
        existing = self._lookup(repo, tag)
        if existing is not None:
            logger.info("Release already exists", tag=tag)
            outcome = ReleaseOutcome(
                tag=tag,
                release_url=existing.html_url or tag_url(repo, tag),
                created=False,
            )
        else:
            release = self._create(repo, tag, draft)
            assets = collect_assets(
                self.output_dir, exclude=[formula_file_name(info.module_name)]
            )
            self._upload(repo, release, assets)
            outcome = ReleaseOutcome(
                tag=tag,
                release_url=release.html_url or tag_url(repo, tag),
                created=True,
                assets=assets,
            )

        if tap is None:
            return outcome

        self.update_tap(info, tap)
        return evolve(outcome, tap_updated=True)
