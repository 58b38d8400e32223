"""Project tree scanner that ranks the programming languages it finds."""

import os
from pathlib import Path

from ...models.exceptions import LanguageDetectionError
from ...models.interfaces import FileClassifierInterface, LanguageKind, validate_project_path
from ...utils.logger import get_logger
from .classifier import PygmentsClassifier

logger = get_logger()

# Upper bound of bytes read from a single file.
SAMPLE_LIMIT = 64 * 1024

IGNORED_DIRECTORIES = frozenset({".idea", ".vscode", ".git"})

IDEA_DIRECTORY = ".idea"
IDEA_MODULE_EXTENSION = ".iml"
IDEA_MODULE_MARKERS = (
    ("JAVA_MODULE", "Java"),
    ("PYTHON_MODULE", "Python"),
    ('name="Go"', "Go"),
)


def read_sample(path: Path, limit: int = SAMPLE_LIMIT) -> bytes:
    """Read at most ``limit`` bytes from the start of a file."""
    with path.open("rb") as handle:
        return handle.read(limit)


def is_in_ignored_directory(relative_path: str) -> bool:
    """Check whether any segment of a relative path is a tooling directory."""
    parts = relative_path.replace("\\", "/").split("/")
    return any(part in IGNORED_DIRECTORIES for part in parts)


def rank_languages(counts: dict[str, int]) -> list[str]:
    """Order languages by descending count, then by name."""
    return [language for language, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0]))]


def read_idea_dir(project_path: Path) -> list[str]:
    """Detect languages from IntelliJ module descriptors under ``.idea``.

    Returns languages in order of first detection. A missing ``.idea``
    directory yields an empty list.
    """
    languages: list[str] = []
    idea_dir = project_path / IDEA_DIRECTORY
    if not idea_dir.is_dir():
        return languages

    modules: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(idea_dir):
        dirnames.sort()
        modules.extend(Path(dirpath) / name for name in sorted(filenames) if name.endswith(IDEA_MODULE_EXTENSION))

    for module in modules:
        try:
            text = module.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.debug(f"Skipping unreadable module file {module}: {exc}")
            continue
        for marker, language in IDEA_MODULE_MARKERS:
            if marker in text and language not in languages:
                languages.append(language)

    return languages


class LanguageScanner:
    """Walks a project tree and counts files per programming language.

    The scanner is stateless between calls: every ``detect`` performs a fresh
    walk and classification.
    """

    def __init__(
        self,
        classifier: FileClassifierInterface | None = None,
        sample_limit: int = SAMPLE_LIMIT,
    ) -> None:
        self.classifier = classifier or PygmentsClassifier()
        self.sample_limit = sample_limit

    def detect(self, project_path: Path) -> list[str]:
        """Detect languages used in a project.

        Args:
            project_path: Path to the project directory

        Returns:
            Languages ranked by file count, followed by languages found only
            in IDE module descriptors

        Raises:
            LanguageDetectionError: If the project root cannot be read
        """
        languages = rank_languages(self.count_languages(project_path))
        for language in read_idea_dir(Path(project_path)):
            if language not in languages:
                languages.append(language)

        logger.info(f"Detected languages: {', '.join(languages) or 'none'}", languages=languages)
        return languages

    def count_languages(self, project_path: Path) -> dict[str, int]:
        """Count programming language files below ``project_path``."""
        root = Path(project_path)
        if not validate_project_path(root):
            raise LanguageDetectionError(f"Invalid project path: {root}", project_path=str(root))
        try:
            with os.scandir(root):
                pass
        except OSError as exc:
            raise LanguageDetectionError(f"Cannot read project directory {root}: {exc}", project_path=str(root)) from exc

        def on_error(exc: OSError) -> None:
            if exc.filename is not None and Path(exc.filename) == root:
                raise LanguageDetectionError(
                    f"Cannot read project directory {root}: {exc}",
                    project_path=str(root),
                ) from exc
            logger.debug(f"Skipping unreadable directory {exc.filename}: {exc.strerror}")

        counts: dict[str, int] = {}
        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            current = Path(dirpath)
            relative_dir = current.relative_to(root).as_posix()
            prefix = "" if relative_dir == "." else f"{relative_dir}/"

            dirnames[:] = [
                name for name in sorted(dirnames) if not self._skip_directory(current / name, f"{prefix}{name}/")
            ]

            for name in sorted(filenames):
                language = self._file_language(current / name, f"{prefix}{name}")
                if language is not None:
                    counts[language] = counts.get(language, 0) + 1

        return counts

    def _skip_directory(self, path: Path, relative_path: str) -> bool:
        if path.is_symlink() or is_in_ignored_directory(relative_path):
            return True
        return self.classifier.classify(relative_path).ignored

    def _file_language(self, path: Path, relative_path: str) -> str | None:
        if is_in_ignored_directory(relative_path) or self.classifier.classify(relative_path).ignored:
            return None
        if path.is_symlink() or not path.is_file():
            return None

        try:
            sample = read_sample(path, self.sample_limit)
        except OSError as exc:
            logger.debug(f"Skipping unreadable file {relative_path}: {exc}")
            return None

        if self.classifier.classify(relative_path, sample).generated:
            return None

        language = self.classifier.detect_language(path.name, sample)
        if language is None:
            return None
        if self.classifier.language_kind(language) is not LanguageKind.PROGRAMMING:
            return None
        return language


def detect_languages(project_path: Path, classifier: FileClassifierInterface | None = None) -> list[str]:
    """Detect project languages with a fresh scanner."""
    return LanguageScanner(classifier=classifier).detect(project_path)
