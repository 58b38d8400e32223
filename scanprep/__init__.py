"""
scanprep - language detection, engine selection and runtime option resolution for code analysis runs.
"""

# CLI import removed to avoid circular imports
from .core.engine import CoreEngine, PreparedRun
from .core.languages import LanguageScanner, PygmentsClassifier, detect_languages
from .core.linters import ALL_IMAGES, choose_engine, engine_family, image, select_candidates
from .core.properties import get_properties, write_properties
from .models.exceptions import (
    ConfigurationError,
    CustomPluginsError,
    FileOperationError,
    LanguageDetectionError,
    ScanprepError,
    UnknownLinterError,
)
from .models.interfaces import EngineFamily, LanguageKind
from .models.options import DotNetOptions, ProjectConfig, RunContext, RunOptions

__version__ = "0.1.0"
__description__ = "Prepare code analysis runs: detect languages, select linters, resolve engine options"

__all__ = [
    "ALL_IMAGES",
    "ConfigurationError",
    "CoreEngine",
    "CustomPluginsError",
    "DotNetOptions",
    "EngineFamily",
    "FileOperationError",
    "LanguageDetectionError",
    "LanguageKind",
    "LanguageScanner",
    "PreparedRun",
    "ProjectConfig",
    "PygmentsClassifier",
    "RunContext",
    "RunOptions",
    "ScanprepError",
    "UnknownLinterError",
    "choose_engine",
    "detect_languages",
    "engine_family",
    "get_properties",
    "image",
    "select_candidates",
    "write_properties",
]
