"""Loading and scaffolding of the `.gorocket.yaml` configuration file."""

from pathlib import Path
from typing import Any

import jinja2
import yaml

from .exceptions import ConfigError
from .models import (
    CONFIG_FILE_NAME,
    BrewConfig,
    BuildConfig,
    Config,
    RemoteRepository,
    Target,
)

_TEMPLATE_DIR = Path(__file__).parent / "templates"
_DEFAULT_CONFIG_PATH = _TEMPLATE_DIR / "gorocket.yaml"


def config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_FILE_NAME


def config_exists(project_dir: Path) -> bool:
    return config_path(project_dir).is_file()


def default_config_text() -> str:
    return _DEFAULT_CONFIG_PATH.read_text()


def create_default_config(project_dir: Path) -> Path:
    """Writes the bundled default configuration, refusing to overwrite."""
    path = config_path(project_dir)
    if path.exists():
        raise ConfigError(f"{CONFIG_FILE_NAME} already exists")
    try:
        path.write_text(default_config_text())
    except OSError as e:
        raise ConfigError(f"Failed to create {CONFIG_FILE_NAME}: {e}") from e
    return path


def _render(raw: str, template_data: dict[str, str]) -> str:
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined, keep_trailing_newline=True
    )
    try:
        return env.from_string(raw).render(**template_data)
    except jinja2.TemplateError as e:
        raise ConfigError(f"Failed to process config template: {e}") from e


def _parse_targets(build_data: dict[str, Any]) -> list[Target]:
    raw_targets = build_data.get("targets") or []
    if not isinstance(raw_targets, list):
        raise ConfigError("build.targets must be a list")

    targets = []
    for index, entry in enumerate(raw_targets):
        if not isinstance(entry, dict) or not entry.get("os"):
            raise ConfigError(f"build.targets[{index}] must set 'os'")
        arch = entry.get("arch")
        if not arch:
            raise ConfigError(
                f"build.targets[{index}] ({entry['os']}) must list at least one arch"
            )
        targets.append(Target(os=str(entry["os"]), arch=arch))
    return targets


def _parse_brew(brew_data: Any) -> BrewConfig | None:
    if brew_data is None:
        return None
    repo_data = brew_data.get("repository") if isinstance(brew_data, dict) else None
    if not isinstance(repo_data, dict):
        raise ConfigError("brew.repository must be a mapping with 'owner' and 'name'")
    owner, name = repo_data.get("owner"), repo_data.get("name")
    if not owner or not name:
        raise ConfigError("brew.repository requires both 'owner' and 'name'")
    return BrewConfig(repository=RemoteRepository(owner=str(owner), name=str(name)))


def parse_config(data: Any) -> Config:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the top level")

    build_data = data.get("build") or {}
    if not isinstance(build_data, dict):
        raise ConfigError("build must be a mapping")

    return Config(
        build=BuildConfig(
            targets=_parse_targets(build_data),
            ldflags=str(build_data.get("ldflags") or ""),
        ),
        brew=_parse_brew(data.get("brew")),
    )


def load_config(project_dir: Path, template_data: dict[str, str]) -> Config:
    """
    Reads `.gorocket.yaml`, renders it as a template with `template_data`
    (`version` and `module`) and decodes the result.
    """
    path = config_path(project_dir)
    try:
        raw = path.read_text()
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    rendered = _render(raw, template_data)
    try:
        data = yaml.safe_load(rendered)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to decode config YAML: {e}") from e

    return parse_config(data)
