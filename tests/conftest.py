"""Pytest fixtures for the entire gorocket test suite."""

from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest

from gorocket.exceptions import CommandError, RemoteAPIError
from gorocket.models import RemoteFile, RemoteRelease, RemoteRepository

FAKE_BINARY = b"\x7fELF!"

SAMPLE_CONFIG = """\
build:
  ldflags: "-X main.version={{ version }}"
  targets:
    - os: linux
      arch: [amd64]
    - os: darwin
      arch: [arm64]
brew:
  repository:
    owner: koki-develop
    name: homebrew-tap
"""


class FakeRunner:
    """
    Stands in for the toolchain and git. `go build` writes a fake binary to
    its `-o` path unless the target is listed in `fail_targets`.
    """

    def __init__(
        self,
        tag: str = "v1.0.0",
        origin: str = "https://github.com/koki-develop/gorocket.git",
        fail_targets: Sequence[str] = (),
    ) -> None:
        self.tag = tag
        self.origin = origin
        self.fail_targets = set(fail_targets)
        self.calls: list[tuple[list[str], dict[str, str]]] = []

    def run(
        self,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: Path | str | None = None,
    ) -> str:
        args = list(args)
        env = dict(env or {})
        self.calls.append((args, env))

        if args[:2] == ["go", "build"]:
            target = f"{env['GOOS']}/{env['GOARCH']}"
            if target in self.fail_targets:
                raise CommandError(
                    "go build failed",
                    command=args,
                    returncode=1,
                    stderr=f"unsupported GOOS/GOARCH pair {target}",
                )
            out = Path(args[args.index("-o") + 1])
            out.write_bytes(FAKE_BINARY)
            return ""
        if args[:2] == ["git", "describe"]:
            if not self.tag:
                raise CommandError("no tag", command=args, returncode=128, stderr="fatal: no tag exactly matches")
            return self.tag
        if args[:3] == ["git", "remote", "get-url"]:
            return self.origin
        raise AssertionError(f"unexpected command: {args}")

    @property
    def build_calls(self) -> list[tuple[list[str], dict[str, str]]]:
        return [c for c in self.calls if c[0][:2] == ["go", "build"]]


class FakeHost:
    """In-memory RemoteHost recording every mutating call."""

    def __init__(
        self,
        releases: dict[str, RemoteRelease] | None = None,
        files: dict[str, str] | None = None,
        fail_upload: str | None = None,
        lookup_error: int | None = None,
    ) -> None:
        self.releases = dict(releases or {})
        self.files = dict(files or {})
        self.fail_upload = fail_upload
        self.lookup_error = lookup_error
        self.created: list[tuple[str, str, bool]] = []
        self.uploads: list[tuple[int, str, bytes]] = []
        self.writes: list[dict[str, object]] = []

    def get_release_by_tag(self, repo: RemoteRepository, tag: str) -> RemoteRelease | None:
        if self.lookup_error:
            raise RemoteAPIError("boom", status_code=self.lookup_error)
        return self.releases.get(tag)

    def create_release(
        self, repo: RemoteRepository, tag: str, name: str, draft: bool
    ) -> RemoteRelease:
        self.created.append((tag, name, draft))
        release = RemoteRelease(
            id=len(self.created),
            tag_name=tag,
            html_url=f"https://github.com/{repo.slug}/releases/tag/{tag}",
        )
        self.releases[tag] = release
        return release

    def upload_release_asset(
        self, repo: RemoteRepository, release: RemoteRelease, name: str, path: Path
    ) -> None:
        if name == self.fail_upload:
            raise RemoteAPIError("upload rejected", status_code=422)
        self.uploads.append((release.id, name, path.read_bytes()))

    def get_file(self, repo: RemoteRepository, path: str) -> RemoteFile | None:
        key = f"{repo.slug}:{path}"
        if key not in self.files:
            return None
        return RemoteFile(path=path, sha=self.files[key])

    def create_or_update_file(
        self,
        repo: RemoteRepository,
        path: str,
        content: str,
        message: str,
        sha: str | None,
    ) -> None:
        self.writes.append(
            {"repo": repo, "path": path, "content": content, "message": message, "sha": sha}
        )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """A minimal Go project with a go.mod and a two-target configuration."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    (project_dir / "go.mod").write_text(
        "module github.com/koki-develop/gorocket\n\ngo 1.22\n"
    )
    (project_dir / ".gorocket.yaml").write_text(SAMPLE_CONFIG)
    return project_dir


@pytest.fixture(autouse=True)
def _no_repository_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_REPOSITORY", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
