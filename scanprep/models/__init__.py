"""Data models for scanprep."""

from .exceptions import (
    ConfigurationError,
    CustomPluginsError,
    FileOperationError,
    LanguageDetectionError,
    ScanprepError,
    UnknownLinterError,
)
from .interfaces import (
    Classification,
    EngineFamily,
    EngineLauncherInterface,
    FileClassifierInterface,
    LanguageKind,
    TelemetrySinkInterface,
    validate_project_path,
)
from .options import DotNetOptions, PluginSpec, ProjectConfig, RunContext, RunOptions

__all__ = [
    "Classification",
    "ConfigurationError",
    "CustomPluginsError",
    "DotNetOptions",
    "EngineFamily",
    "EngineLauncherInterface",
    "FileClassifierInterface",
    "FileOperationError",
    "LanguageDetectionError",
    "LanguageKind",
    "PluginSpec",
    "ProjectConfig",
    "RunContext",
    "RunOptions",
    "ScanprepError",
    "TelemetrySinkInterface",
    "UnknownLinterError",
    "validate_project_path",
]
