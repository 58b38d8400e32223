"""Language detection for project trees.

Usage:
    from scanprep.core.languages import LanguageScanner

    scanner = LanguageScanner()
    languages = scanner.detect(project_path)  # e.g. ["Java", "Kotlin"]
"""

from .classifier import PygmentsClassifier
from .scanner import (
    SAMPLE_LIMIT,
    LanguageScanner,
    detect_languages,
    rank_languages,
    read_idea_dir,
    read_sample,
)

__all__ = [
    "SAMPLE_LIMIT",
    "LanguageScanner",
    "PygmentsClassifier",
    "detect_languages",
    "rank_languages",
    "read_idea_dir",
    "read_sample",
]
