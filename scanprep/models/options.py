"""Run option models shared by the selector and the properties resolver."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError
from .interfaces import EngineFamily

VM_OPTIONS_FILE_NAME = "ide.vmoptions"


@dataclass
class DotNetOptions:
    """Attributes of a .NET project declared in the project configuration."""

    project: str = ""
    solution: str = ""
    configuration: str = ""
    platform: str = ""
    frameworks: str = ""

    def is_empty(self) -> bool:
        """Check whether no attribute is set."""
        return not any((self.project, self.solution, self.configuration, self.platform, self.frameworks))

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "DotNetOptions":
        """Build options from a parsed ``dotnet`` configuration section."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError("The 'dotnet' section must be a mapping")
        values = {}
        for name in ("project", "solution", "configuration", "platform", "frameworks"):
            value = data.get(name)
            values[name] = "" if value is None else str(value)
        return cls(**values)


@dataclass
class PluginSpec:
    """A plugin the engine has to install before the analysis."""

    id: str
    version: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ConfigurationError("Plugin id cannot be empty")


@dataclass
class ProjectConfig:
    """Settings declared in the project configuration file."""

    properties: dict[str, str] = field(default_factory=dict)
    dot_net: DotNetOptions = field(default_factory=DotNetOptions)
    plugins: list[PluginSpec] = field(default_factory=list)
    linter: str | None = None
    source: Path | None = None

    def plugin_ids(self) -> list[str]:
        """Return plugin ids in declaration order."""
        return [plugin.id for plugin in self.plugins]


@dataclass
class RunOptions:
    """Explicit settings for one run, usually taken from the command line."""

    project_dir: Path
    cache_dir: Path
    results_dir: Path
    linter: str | None = None
    properties: list[str] = field(default_factory=list)
    analysis_id: str | None = None
    coverage_dir: Path | None = None
    custom_plugins_dir: Path | None = None
    jvm_debug_port: int = 0
    native: bool = False
    no_statistics: bool = False

    @property
    def log_dir(self) -> Path:
        return self.results_dir / "log"

    @property
    def tmp_results_dir(self) -> Path:
        return self.results_dir / "tmp"


@dataclass
class RunContext:
    """Everything the properties resolver needs to know about one run."""

    system_dir: Path
    log_dir: Path
    conf_dir: Path
    plugins_dir: Path
    device_id_salt: tuple[str, str]
    analysis_id: str
    engine_family: EngineFamily
    custom_plugins_dir: Path | None = None
    coverage_dir: Path | None = None
    plugins: list[str] = field(default_factory=list)
    dot_net: DotNetOptions = field(default_factory=DotNetOptions)
    jvm_debug_port: int = 0
    statistics_allowed: bool = False

    def __post_init__(self) -> None:
        if not self.analysis_id:
            raise ConfigurationError("RunContext analysis_id cannot be empty")
        if self.jvm_debug_port < 0:
            raise ConfigurationError(f"Invalid JVM debug port: {self.jvm_debug_port}")

    @property
    def device_id(self) -> str:
        return self.device_id_salt[0]

    @property
    def salt(self) -> str:
        return self.device_id_salt[1]

    @property
    def vm_options_path(self) -> Path:
        """Per-run options file handed to the engine."""
        return self.conf_dir / VM_OPTIONS_FILE_NAME
