"""Core interfaces that define system boundaries for scanprep."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class LanguageKind(Enum):
    """Kinds of languages a classifier can report."""

    PROGRAMMING = "programming"
    MARKUP = "markup"
    DATA = "data"
    PROSE = "prose"
    UNKNOWN = "unknown"


class EngineFamily(Enum):
    """Families of analysis engines known to the linter catalog."""

    JVM = "jvm"
    PYTHON = "python"
    JS = "js"
    GO = "go"
    PHP = "php"
    DOTNET_STANDALONE = "dotnet-standalone"
    DOTNET_CONTAINER_FULL = "dotnet-container-full"
    DOTNET_CONTAINER_COMMUNITY = "dotnet-container-community"

    @property
    def is_dotnet(self) -> bool:
        """Whether the engine analyzes .NET projects."""
        return self in _DOTNET_FAMILIES

    @property
    def is_containerized(self) -> bool:
        """Whether the engine runs as a container image."""
        return self is not EngineFamily.DOTNET_STANDALONE

    @property
    def is_rider(self) -> bool:
        """Whether the engine is built on the Rider product (receives .NET properties)."""
        return self in (EngineFamily.DOTNET_STANDALONE, EngineFamily.DOTNET_CONTAINER_FULL)

    @property
    def vm_options_env(self) -> str | None:
        """Environment variable the engine reads its options file path from."""
        return _VM_OPTIONS_ENV.get(self)


_DOTNET_FAMILIES = frozenset(
    {
        EngineFamily.DOTNET_STANDALONE,
        EngineFamily.DOTNET_CONTAINER_FULL,
        EngineFamily.DOTNET_CONTAINER_COMMUNITY,
    },
)

# The community .NET engine is not JVM based and takes no options file.
_VM_OPTIONS_ENV = {
    EngineFamily.JVM: "IDEA_VM_OPTIONS",
    EngineFamily.PYTHON: "PYCHARM_VM_OPTIONS",
    EngineFamily.JS: "WEBIDE_VM_OPTIONS",
    EngineFamily.GO: "GOLAND_VM_OPTIONS",
    EngineFamily.PHP: "PHPSTORM_VM_OPTIONS",
    EngineFamily.DOTNET_STANDALONE: "RIDER_VM_OPTIONS",
    EngineFamily.DOTNET_CONTAINER_FULL: "RIDER_VM_OPTIONS",
}


@dataclass(frozen=True)
class Classification:
    """Path-level verdict produced by a file classifier."""

    vendor: bool = False
    dotfile: bool = False
    documentation: bool = False
    configuration: bool = False
    generated: bool = False

    @property
    def ignored(self) -> bool:
        """True when any heuristic excludes the path from language counts."""
        return self.vendor or self.dotfile or self.documentation or self.configuration or self.generated


class FileClassifierInterface(ABC):
    """Oracle used by the language scanner to classify files."""

    @abstractmethod
    def classify(self, relative_path: str, sample: bytes | None = None) -> Classification:
        """Classify a project-relative path.

        Directory paths end with ``/``. ``sample`` is ``None`` for the
        path-only pass and the bounded content prefix afterwards.
        """

    @abstractmethod
    def detect_language(self, filename: str, sample: bytes) -> str | None:
        """Return the language name for a file, or None when unknown."""

    @abstractmethod
    def language_kind(self, language: str) -> LanguageKind:
        """Return the kind of a language returned by detect_language."""


class TelemetrySinkInterface(ABC):
    """Best-effort uploader for collected statistics events."""

    @abstractmethod
    def send(self, events_file: Path, device_id: str) -> None:
        """Deliver the serialized events file on behalf of a device."""


class EngineLauncherInterface(ABC):
    """Starts an analysis engine with a resolved options file."""

    @abstractmethod
    def launch(self, engine: str, options_file: Path) -> int:
        """Run the engine and return its exit code."""


def validate_project_path(path: Path) -> bool:
    """Validate that a path exists and is a directory."""
    return path.exists() and path.is_dir()
