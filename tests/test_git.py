"""Tests for tag lookup and repository resolution."""

import pytest

from conftest import FakeRunner
from gorocket.exceptions import ProjectError, RepositoryError
from gorocket.git import (
    GitClient,
    parse_remote_url,
    parse_repository_override,
    resolve_repository,
)
from gorocket.models import RemoteRepository


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/koki-develop/gorocket.git",
        "https://github.com/koki-develop/gorocket",
        "git@github.com:koki-develop/gorocket.git",
        "git@github.com:koki-develop/gorocket",
    ],
)
def test_parse_remote_url(url: str) -> None:
    assert parse_remote_url(url) == RemoteRepository(owner="koki-develop", name="gorocket")


@pytest.mark.parametrize(
    "url", ["https://gitlab.com/owner/repo.git", "not-a-git-url", ""]
)
def test_parse_remote_url_rejects_non_github(url: str) -> None:
    with pytest.raises(RepositoryError, match="Invalid GitHub repository URL"):
        parse_remote_url(url)


@pytest.mark.parametrize("value", ["owner", "owner/", "/name"])
def test_malformed_override_is_rejected(value: str) -> None:
    with pytest.raises(RepositoryError, match="GITHUB_REPOSITORY"):
        parse_repository_override(value)


def test_environment_override_wins_over_origin() -> None:
    git = GitClient(FakeRunner(origin="git@github.com:someone/else.git"))

    repo = resolve_repository(git, {"GITHUB_REPOSITORY": "koki-develop/gorocket"})

    assert repo.slug == "koki-develop/gorocket"


def test_origin_used_without_override() -> None:
    git = GitClient(FakeRunner(origin="git@github.com:someone/else.git"))

    assert resolve_repository(git, {}).slug == "someone/else"


def test_head_tag() -> None:
    assert GitClient(FakeRunner(tag="v2.0.0")).head_tag() == "v2.0.0"


def test_untagged_head_is_a_project_error() -> None:
    with pytest.raises(ProjectError, match="no tag exactly matches"):
        GitClient(FakeRunner(tag="")).head_tag()
