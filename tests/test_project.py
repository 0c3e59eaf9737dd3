"""Tests for go.mod parsing and output directory preparation."""

from pathlib import Path

import pytest

from conftest import FakeRunner
from gorocket.exceptions import ProjectError
from gorocket.git import GitClient
from gorocket.project import get_build_info, prepare_output_dir, read_module_name


@pytest.mark.parametrize(
    "go_mod, expected",
    [
        ("module github.com/koki-develop/gorocket\n\ngo 1.22\n", "gorocket"),
        ("// comment\nmodule example.com/tools/cli\n", "cli"),
        ("module standalone\n", "standalone"),
        ('module "github.com/owner/quoted"\n', "quoted"),
    ],
)
def test_read_module_name(tmp_path: Path, go_mod: str, expected: str) -> None:
    (tmp_path / "go.mod").write_text(go_mod)
    assert read_module_name(tmp_path) == expected


def test_missing_go_mod(tmp_path: Path) -> None:
    with pytest.raises(ProjectError, match="Failed to open go.mod"):
        read_module_name(tmp_path)


def test_go_mod_without_module_directive(tmp_path: Path) -> None:
    (tmp_path / "go.mod").write_text("go 1.22\n")
    with pytest.raises(ProjectError, match="Module name not found"):
        read_module_name(tmp_path)


def test_get_build_info(go_project: Path) -> None:
    info = get_build_info(go_project, GitClient(FakeRunner(tag="v0.3.0")))
    assert (info.module_name, info.version) == ("gorocket", "v0.3.0")


def test_prepare_creates_missing_dir(tmp_path: Path) -> None:
    dist = tmp_path / "dist"
    prepare_output_dir(dist, clean=False)
    assert dist.is_dir()


def test_prepare_accepts_empty_dir(tmp_path: Path) -> None:
    dist = tmp_path / "dist"
    dist.mkdir()
    prepare_output_dir(dist, clean=False)
    assert dist.is_dir()


def test_prepare_rejects_non_empty_dir(tmp_path: Path) -> None:
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "stale.tar.gz").write_bytes(b"old")

    with pytest.raises(ProjectError, match="not empty"):
        prepare_output_dir(dist, clean=False)
    assert (dist / "stale.tar.gz").exists()


def test_prepare_clean_removes_contents(tmp_path: Path) -> None:
    dist = tmp_path / "dist"
    (dist / "nested").mkdir(parents=True)
    (dist / "nested" / "stale").write_bytes(b"old")

    prepare_output_dir(dist, clean=True)

    assert dist.is_dir()
    assert list(dist.iterdir()) == []
