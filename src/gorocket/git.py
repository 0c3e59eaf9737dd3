"""Version-control lookups: the release tag and the hosting repository coordinate."""

from collections.abc import Mapping
import os
from pathlib import Path
import re

from pyvider.telemetry import logger

from .exceptions import CommandError, ProjectError, RepositoryError
from .models import RemoteRepository
from .process import CommandRunner

REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"

_HTTPS_PATTERN = re.compile(r"^https://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$")
_SSH_PATTERN = re.compile(r"^git@github\.com:([^/]+)/([^/]+?)(?:\.git)?/?$")


class GitClient:
    def __init__(self, runner: CommandRunner, cwd: Path | None = None) -> None:
        self.runner = runner
        self.cwd = cwd

    def head_tag(self) -> str:
        try:
            return self.runner.run(
                ["git", "describe", "--tags", "--exact-match", "HEAD"], cwd=self.cwd
            )
        except CommandError as e:
            raise ProjectError(
                f"Failed to get version from git tag (is HEAD tagged?): {e.stderr.strip() or e}"
            ) from e

    def origin_url(self) -> str:
        try:
            return self.runner.run(
                ["git", "remote", "get-url", "origin"], cwd=self.cwd
            )
        except CommandError as e:
            raise RepositoryError(
                f"Failed to get git remote origin: {e.stderr.strip() or e}"
            ) from e


def parse_remote_url(remote_url: str) -> RemoteRepository:
    """Parses an HTTPS or SSH GitHub remote URL into its owner and name."""
    for pattern in (_HTTPS_PATTERN, _SSH_PATTERN):
        match = pattern.match(remote_url.strip())
        if match:
            return RemoteRepository(owner=match.group(1), name=match.group(2))
    raise RepositoryError(f"Invalid GitHub repository URL: {remote_url}")


def parse_repository_override(value: str) -> RemoteRepository:
    owner, sep, name = value.partition("/")
    if not sep or not owner or not name:
        raise RepositoryError(
            f"Invalid {REPOSITORY_ENV_VAR} value {value!r}: expected 'owner/name'"
        )
    return RemoteRepository(owner=owner, name=name)


def resolve_repository(
    git: GitClient, environ: Mapping[str, str] | None = None
) -> RemoteRepository:
    """
    Resolves the hosting repository, preferring the `GITHUB_REPOSITORY`
    override over the `origin` remote of the working copy.
    """
    environ = os.environ if environ is None else environ
    override = environ.get(REPOSITORY_ENV_VAR)
    if override:
        repo = parse_repository_override(override)
        logger.debug("Repository taken from environment", repository=repo.slug)
        return repo

    repo = parse_remote_url(git.origin_url())
    logger.debug("Repository taken from origin remote", repository=repo.slug)
    return repo
