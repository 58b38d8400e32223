"""Loader for the project-declared configuration file (``qodana.yaml``)."""

from pathlib import Path
from typing import Any

import yaml

from ..models.exceptions import ConfigurationError
from ..models.options import DotNetOptions, PluginSpec, ProjectConfig
from ..utils.logger import get_logger

logger = get_logger()

CONFIG_FILE_NAMES = ("qodana.yml", "qodana.yaml")


def find_config_file(project_path: Path) -> Path:
    """Return the configuration file path, preferring ``qodana.yml`` when it exists."""
    for name in CONFIG_FILE_NAMES:
        candidate = project_path / name
        if candidate.is_file():
            return candidate
    return project_path / CONFIG_FILE_NAMES[-1]


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def _parse_properties(raw: Any, source: Path) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("The 'properties' section must be a mapping", file_path=str(source))
    return {str(key): _scalar(value) for key, value in raw.items()}


def _parse_plugins(raw: Any, source: Path) -> list[PluginSpec]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigurationError("The 'plugins' section must be a list", file_path=str(source))

    plugins = []
    for entry in raw:
        if isinstance(entry, str):
            plugins.append(PluginSpec(id=entry))
        elif isinstance(entry, dict) and entry.get("id"):
            version = entry.get("version")
            plugins.append(PluginSpec(id=str(entry["id"]), version=None if version is None else str(version)))
        else:
            raise ConfigurationError(f"Invalid plugin entry: {entry!r}", file_path=str(source))
    return plugins


def parse_project_config(data: Any, source: Path) -> ProjectConfig:
    """Build a ProjectConfig from a parsed YAML document."""
    if data is None:
        return ProjectConfig(source=source)
    if not isinstance(data, dict):
        raise ConfigurationError("Project configuration must be a mapping", file_path=str(source))

    try:
        dot_net = DotNetOptions.from_dict(data.get("dotnet"))
    except ConfigurationError as e:
        e.details["file_path"] = str(source)
        raise

    linter = data.get("linter")
    return ProjectConfig(
        properties=_parse_properties(data.get("properties"), source),
        dot_net=dot_net,
        plugins=_parse_plugins(data.get("plugins"), source),
        linter=None if linter is None else str(linter),
        source=source,
    )


def load_project_config(project_path: Path) -> ProjectConfig:
    """Load the project configuration; a missing file yields empty settings.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    config_path = find_config_file(project_path)
    if not config_path.exists():
        logger.debug(f"No project configuration found in {project_path}")
        return ProjectConfig()

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read {config_path}: {e}", file_path=str(config_path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {config_path}: {e}", file_path=str(config_path)) from e

    config = parse_project_config(data, config_path)
    logger.debug(
        f"Loaded project configuration from {config_path}",
        properties=len(config.properties),
        plugins=config.plugin_ids(),
    )
    return config
