from pathlib import Path

from attrs import define, field, validators

WINDOWS_OS = "windows"
CONFIG_FILE_NAME = ".gorocket.yaml"
DEFAULT_OUTPUT_DIR = "dist"
FORMULA_EXTENSION = "rb"
GITHUB_HOST = "github.com"


def _to_arch_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)  # type: ignore[attr-defined]


def _non_empty(instance: object, attribute: object, value: tuple[str, ...]) -> None:
    if not value:
        raise ValueError("arch must list at least one architecture")


@define(frozen=True, slots=True)
class Target:
    os: str = field(validator=validators.instance_of(str))
    arch: tuple[str, ...] = field(converter=_to_arch_tuple, validator=_non_empty)


@define(frozen=True, slots=True)
class ConcreteTarget:
    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == WINDOWS_OS

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


@define(frozen=True, slots=True)
class BuildInfo:
    module_name: str
    version: str

    def artifact_stem(self, target: ConcreteTarget) -> str:
        """`{module}_{version}_{os}_{arch}`, shared by binaries, archives and their layout."""
        return f"{self.module_name}_{self.version}_{target.os}_{target.arch}"


def _check_exclusive(path: str, error: Exception | None, kind: str) -> None:
    if bool(path) == (error is not None):
        raise ValueError(
            f"{kind} must carry exactly one of a path or an error "
            f"(path={path!r}, error={error!r})"
        )


@define(frozen=True, slots=True)
class BuildResult:
    target: ConcreteTarget
    binary_path: str = ""
    error: Exception | None = None

    def __attrs_post_init__(self) -> None:
        _check_exclusive(self.binary_path, self.error, "BuildResult")

    @property
    def ok(self) -> bool:
        return self.error is None


@define(frozen=True, slots=True)
class ArchiveResult:
    target: ConcreteTarget
    archive_path: str = ""
    error: Exception | None = None

    def __attrs_post_init__(self) -> None:
        _check_exclusive(self.archive_path, self.error, "ArchiveResult")

    @property
    def ok(self) -> bool:
        return self.error is None


@define(frozen=True, slots=True)
class FormulaURL:
    url: str
    sha256: str


PlatformURLTable = dict[str, dict[str, FormulaURL]]


@define(frozen=True, slots=True)
class ReleaseAsset:
    name: str
    path: Path


@define(frozen=True, slots=True)
class RemoteRepository:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


@define(frozen=True, slots=True)
class RemoteRelease:
    id: int
    tag_name: str
    html_url: str = ""


@define(frozen=True, slots=True)
class RemoteFile:
    path: str
    sha: str


@define(frozen=True, slots=True)
class BuildConfig:
    targets: tuple[Target, ...] = field(converter=tuple)
    ldflags: str = ""


@define(frozen=True, slots=True)
class BrewConfig:
    repository: RemoteRepository


@define(frozen=True, slots=True)
class Config:
    build: BuildConfig
    brew: BrewConfig | None = None
