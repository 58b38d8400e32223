"""Tests for the project language scanner."""

from pathlib import Path

import pytest

from scanprep.core.languages import scanner as scanner_module
from scanprep.core.languages.scanner import (
    SAMPLE_LIMIT,
    LanguageScanner,
    detect_languages,
    rank_languages,
    read_idea_dir,
)
from scanprep.models.exceptions import LanguageDetectionError
from scanprep.models.interfaces import Classification, FileClassifierInterface, LanguageKind


class ExtensionClassifier(FileClassifierInterface):
    """Deterministic classifier keyed on file extension."""

    LANGUAGES = {".java": "Java", ".go": "Go", ".kt": "Kotlin", ".md": "Markdown"}

    def __init__(self) -> None:
        self.samples: dict[str, int] = {}

    def classify(self, relative_path: str, sample: bytes | None = None) -> Classification:
        return Classification(vendor=relative_path.startswith("third/"))

    def detect_language(self, filename: str, sample: bytes) -> str | None:
        self.samples[filename] = len(sample)
        return self.LANGUAGES.get(Path(filename).suffix)

    def language_kind(self, language: str) -> LanguageKind:
        return LanguageKind.PROSE if language == "Markdown" else LanguageKind.PROGRAMMING


def write(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestRankLanguages:
    def test_orders_by_count_then_name(self) -> None:
        assert rank_languages({"Go": 1, "Java": 3, "Kotlin": 1}) == ["Java", "Go", "Kotlin"]

    def test_empty(self) -> None:
        assert rank_languages({}) == []


class TestReadIdeaDir:
    """Tests for IDE module descriptor detection."""

    def test_missing_idea_dir(self, tmp_path: Path) -> None:
        assert read_idea_dir(tmp_path) == []

    def test_module_markers(self, tmp_path: Path) -> None:
        write(tmp_path, ".idea/a.iml", '<module type="JAVA_MODULE" version="4"/>')
        write(tmp_path, ".idea/b.iml", '<module type="PYTHON_MODULE"/><orderEntry name="Go"/>')
        write(tmp_path, ".idea/c.iml", '<module type="JAVA_MODULE"/>')
        write(tmp_path, ".idea/workspace.xml", "PYTHON_MODULE")

        assert read_idea_dir(tmp_path) == ["Java", "Python", "Go"]


class TestLanguageScanner:
    """Tests for LanguageScanner with a stub classifier."""

    def test_ranks_by_file_count(self, tmp_path: Path) -> None:
        write(tmp_path, "src/A.java")
        write(tmp_path, "src/B.java")
        write(tmp_path, "src/C.java")
        write(tmp_path, "tools/main.go")

        assert LanguageScanner(ExtensionClassifier()).detect(tmp_path) == ["Java", "Go"]

    def test_ties_break_by_name(self, tmp_path: Path) -> None:
        write(tmp_path, "z/App.kt")
        write(tmp_path, "a/main.go")

        assert LanguageScanner(ExtensionClassifier()).detect(tmp_path) == ["Go", "Kotlin"]

    def test_non_programming_languages_are_dropped(self, tmp_path: Path) -> None:
        write(tmp_path, "notes.md", "# notes")
        write(tmp_path, "data.unknown")

        assert LanguageScanner(ExtensionClassifier()).detect(tmp_path) == []

    def test_ignored_directories_are_pruned(self, tmp_path: Path) -> None:
        write(tmp_path, "third/lib/A.java")
        write(tmp_path, ".git/hooks/B.java")
        write(tmp_path, ".vscode/C.java")
        write(tmp_path, "main.go")

        classifier = ExtensionClassifier()
        assert LanguageScanner(classifier).detect(tmp_path) == ["Go"]
        assert set(classifier.samples) == {"main.go"}

    def test_sample_is_bounded(self, tmp_path: Path) -> None:
        write(tmp_path, "Big.java", "x" * (SAMPLE_LIMIT * 3))
        classifier = ExtensionClassifier()

        LanguageScanner(classifier).detect(tmp_path)

        assert classifier.samples["Big.java"] == SAMPLE_LIMIT

    def test_custom_sample_limit(self, tmp_path: Path) -> None:
        write(tmp_path, "Small.java", "x" * 100)
        classifier = ExtensionClassifier()

        LanguageScanner(classifier, sample_limit=10).detect(tmp_path)

        assert classifier.samples["Small.java"] == 10

    def test_unreadable_file_is_skipped(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write(tmp_path, "A.java")
        write(tmp_path, "B.java")
        original = scanner_module.read_sample

        def flaky_read(path: Path, limit: int = SAMPLE_LIMIT) -> bytes:
            if path.name == "B.java":
                raise PermissionError(13, "Permission denied", str(path))
            return original(path, limit)

        monkeypatch.setattr(scanner_module, "read_sample", flaky_read)

        assert LanguageScanner(ExtensionClassifier()).count_languages(tmp_path) == {"Java": 1}

    def test_symlinks_are_not_followed(self, tmp_path: Path) -> None:
        outside = tmp_path / "outside"
        write(outside, "A.java")
        write(outside, "B.java")
        project = tmp_path / "project"
        write(project, "main.go")
        (project / "linked").symlink_to(outside, target_is_directory=True)
        (project / "Link.java").symlink_to(outside / "A.java")

        assert LanguageScanner(ExtensionClassifier()).detect(project) == ["Go"]

    def test_idea_languages_are_appended(self, tmp_path: Path) -> None:
        write(tmp_path, "main.go")
        write(tmp_path, ".idea/project.iml", '<module type="JAVA_MODULE"/><x name="Go"/>')

        assert LanguageScanner(ExtensionClassifier()).detect(tmp_path) == ["Go", "Java"]

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(LanguageDetectionError) as exc_info:
            LanguageScanner(ExtensionClassifier()).detect(tmp_path / "missing")

        assert exc_info.value.details["project_path"] == str(tmp_path / "missing")

    def test_root_that_is_a_file_raises(self, tmp_path: Path) -> None:
        target = write(tmp_path, "A.java")

        with pytest.raises(LanguageDetectionError):
            LanguageScanner(ExtensionClassifier()).detect(target)

    def test_repeated_scans_are_identical(self, tmp_path: Path) -> None:
        for name in ("a/A.java", "b/main.go", "c/App.kt", "d/x.go"):
            write(tmp_path, name)
        scanner = LanguageScanner(ExtensionClassifier())

        assert scanner.detect(tmp_path) == scanner.detect(tmp_path) == ["Go", "Java", "Kotlin"]


class TestDefaultClassifierScan:
    """End-to-end scans with the Pygments classifier."""

    def test_detects_java_project(self, tmp_path: Path) -> None:
        write(tmp_path, "src/main/java/App.java", "public class App {}\n")
        write(tmp_path, "src/main/java/Util.java", "class Util {}\n")
        write(tmp_path, "src/main/kotlin/Ext.kt", "fun ext() = 1\n")
        write(tmp_path, "README.md", "# Project\n")
        write(tmp_path, "settings.json", "{}\n")
        write(tmp_path, "notes.txt", "plain text\n")

        assert detect_languages(tmp_path) == ["Java", "Kotlin"]

    def test_excluded_paths(self, tmp_path: Path) -> None:
        write(tmp_path, "main.go", "package main\n")
        write(tmp_path, "vendor/github.com/x/lib.go", "package lib\n")
        write(tmp_path, "node_modules/pkg/Index.java", "class Index {}\n")
        write(tmp_path, "docs/Example.java", "class Example {}\n")
        write(tmp_path, ".hidden/Secret.java", "class Secret {}\n")
        write(tmp_path, "api/service.pb.go", "package api\n")
        write(tmp_path, "gen/enum_string.go", "// Code generated by stringer; DO NOT EDIT.\npackage gen\n")
        (tmp_path / "Blob.java").write_bytes(b"\x00\x01binary")

        assert detect_languages(tmp_path) == ["Go"]

    def test_detects_fsharp_project(self, tmp_path: Path) -> None:
        write(tmp_path, "src/Lib.fs", "module Lib\nopen System\nlet add a b = a + b\n")
        write(tmp_path, "src/Program.fs", "[<EntryPoint>]\nlet main argv = 0\n")
        write(tmp_path, "src/App.fsproj", "<Project Sdk=\"Microsoft.NET.Sdk\" />\n")

        assert detect_languages(tmp_path) == ["F#"]

    def test_sql_files_do_not_count(self, tmp_path: Path) -> None:
        write(tmp_path, "db/schema.sql", "CREATE TABLE users (id INT PRIMARY KEY);\n")
        write(tmp_path, "db/seed.sql", "INSERT INTO users VALUES (1);\n")
        write(tmp_path, "src/Main.java", "public class Main {}\n")

        assert detect_languages(tmp_path) == ["Java"]

    def test_empty_project(self, tmp_path: Path) -> None:
        assert detect_languages(tmp_path) == []
