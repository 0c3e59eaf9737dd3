"""Packs built binaries into per-platform release archives."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
import gzip
import os
from pathlib import Path
import shutil
import tarfile
import zipfile

from pyvider.telemetry import logger

from ..exceptions import ArchiveError
from ..models import ArchiveResult, BuildInfo, BuildResult, ConcreteTarget


EXECUTABLE_MODE = 0o755
# Fixed entry timestamps keep archive checksums stable across rebuilds.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class Packager(ABC):
    """Writes one binary into an archive as `{layout_name}/{entry_name}`."""

    extension: str = ""

    @abstractmethod
    def package(
        self, binary_path: Path, archive_path: Path, layout_name: str, entry_name: str
    ) -> Path: ...


class TarGzPackager(Packager):
    extension = "tar.gz"

    def package(
        self, binary_path: Path, archive_path: Path, layout_name: str, entry_name: str
    ) -> Path:
        try:
            archive_file = archive_path.open("wb")
        except OSError as e:
            raise ArchiveError(f"Failed to create archive file {archive_path}: {e}") from e

        with (
            archive_file,
            gzip.GzipFile(filename="", mode="wb", fileobj=archive_file, mtime=0) as gz,
            tarfile.open(fileobj=gz, mode="w") as tar,
        ):
            try:
                binary = binary_path.open("rb")
            except OSError as e:
                raise ArchiveError(f"Failed to open binary file {binary_path}: {e}") from e

            with binary:
                try:
                    size = os.fstat(binary.fileno()).st_size
                except OSError as e:
                    raise ArchiveError(
                        f"Failed to get binary file info for {binary_path}: {e}"
                    ) from e

                info = tarfile.TarInfo(name=f"{layout_name}/{entry_name}")
                info.size = size
                info.mode = EXECUTABLE_MODE
                info.mtime = 0
                try:
                    tar.addfile(info, binary)
                except (OSError, tarfile.TarError) as e:
                    raise ArchiveError(f"Failed to write binary to tar: {e}") from e

        return archive_path


class ZipPackager(Packager):
    extension = "zip"

    def package(
        self, binary_path: Path, archive_path: Path, layout_name: str, entry_name: str
    ) -> Path:
        try:
            zf = zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED)
        except OSError as e:
            raise ArchiveError(f"Failed to create archive file {archive_path}: {e}") from e

        with zf:
            try:
                binary = binary_path.open("rb")
            except OSError as e:
                raise ArchiveError(f"Failed to open binary file {binary_path}: {e}") from e

            entry_info = zipfile.ZipInfo(f"{layout_name}/{entry_name}", date_time=ZIP_EPOCH)
            entry_info.compress_type = zipfile.ZIP_DEFLATED
            with binary:
                try:
                    with zf.open(entry_info, "w") as entry:
                        shutil.copyfileobj(binary, entry)
                except (OSError, zipfile.BadZipFile) as e:
                    raise ArchiveError(f"Failed to write binary to zip: {e}") from e

        return archive_path


def packager_for(target: ConcreteTarget) -> Packager:
    return ZipPackager() if target.is_windows else TarGzPackager()


class Archiver:
    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def archive_path(self, info: BuildInfo, target: ConcreteTarget) -> Path:
        packager = packager_for(target)
        return self.output_dir / f"{info.artifact_stem(target)}.{packager.extension}"

    def create_archive(self, info: BuildInfo, result: BuildResult) -> ArchiveResult:
        if result.error is not None:
            return ArchiveResult(target=result.target, error=result.error)

        target = result.target
        packager = packager_for(target)
        entry_name = info.module_name + (".exe" if target.is_windows else "")
        try:
            path = packager.package(
                binary_path=Path(result.binary_path),
                archive_path=self.archive_path(info, target),
                layout_name=info.artifact_stem(target),
                entry_name=entry_name,
            )
        except ArchiveError as e:
            logger.error("Archive failed", target=str(target), error=str(e))
            return ArchiveResult(target=target, error=e)

        logger.info("Created archive", archive=path.name)
        return ArchiveResult(target=target, archive_path=str(path))

    def create_archives(
        self, info: BuildInfo, results: Iterable[BuildResult]
    ) -> list[ArchiveResult]:
        return [self.create_archive(info, result) for result in results]
