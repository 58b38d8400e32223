"""Default file classifier backed by Pygments lexers and path heuristics."""

import posixpath
import re

from pygments.lexers import find_lexer_class, guess_lexer_for_filename
from pygments.util import ClassNotFound

from ...models.interfaces import Classification, FileClassifierInterface, LanguageKind

# Third-party and bundled code.
VENDOR_PATTERNS = (
    r"(^|/)cache/",
    r"^[Dd]ependencies/",
    r"(^|/)dist/",
    r"^deps/",
    r"(^|/)configure$",
    r"(^|/)node_modules/",
    r"(^|/)bower_components/",
    r"(^|/)[Vv]endor/",
    r"(^|/)_vendor/",
    r"(^|/)[Tt]hird[-_]?[Pp]arty/",
    r"(^|/)(\.?venv|virtualenv)/",
    r"(^|/)site-packages/",
    r"(^|/)Godeps/_workspace/",
    r"(^|/)[Pp]ackages/.+\.\d+/",
    r"(^|/)gradlew(\.bat)?$",
    r"(^|/)mvnw(\.cmd)?$",
    r"(^|/)\.mvn/wrapper/",
    r"(^|/)gradle/wrapper/",
    r"\.min\.(js|css)$",
    r"(^|/)jquery([^.]*)\.js$",
    r"(^|/)bootstrap([^/.]*)(\..*)?\.(js|css|less|scss|styl)$",
)

DOCUMENTATION_PATTERNS = (
    r"^[Dd]ocs?/",
    r"(^|/)[Dd]ocumentation/",
    r"(^|/)[Gg]roovydoc/",
    r"(^|/)[Jj]avadoc/",
    r"^[Mm]an/",
    r"^[Ee]xamples/",
    r"^[Dd]emos?/",
    r"(^|/)inst/doc/",
    r"(^|/)CITATION(\.cff|S)?(\.(bib|md))?$",
    r"(^|/)CHANGE(S|LOG)?(\.|$)",
    r"(^|/)CONTRIBUTING(\.|$)",
    r"(^|/)COPYING(\.|$)",
    r"(^|/)INSTALL(\.|$)",
    r"(^|/)LICEN[CS]E(\.|$)",
    r"(^|/)[Ll]icen[cs]e(\.|$)",
    r"(^|/)README(\.|$)",
    r"(^|/)[Rr]eadme(\.|$)",
    r"^[Ss]amples?/",
)

GENERATED_PATH_PATTERNS = (
    r"(^|/)__generated__/",
    r"\.pb\.go$",
    r"_pb2(_grpc)?\.py$",
    r"\.(designer|g|g\.i)\.cs$",
    r"\.(js|css)\.map$",
    r"(^|/)(package-lock\.json|yarn\.lock|pnpm-lock\.yaml|poetry\.lock|Cargo\.lock|go\.sum|composer\.lock)$",
    r"\.(nib|xcworkspacedata|xcuserstate)$",
)

GENERATED_CONTENT_MARKERS = re.compile(
    r"code generated .* do not edit"
    r"|<auto-generated"
    r"|@generated"
    r"|this file (was|is) (automatically|auto-?)generated"
    r"|generated by the protocol buffer compiler"
    r"|autogenerated by thrift",
    re.IGNORECASE,
)

# Only the head of a file carries generator banners.
GENERATED_HEADER_LINES = 10

CONFIGURATION_EXTENSIONS = frozenset(
    {
        ".ini",
        ".json",
        ".toml",
        ".xml",
        ".yaml",
        ".yml",
        ".csproj",
        ".fsproj",
        ".vbproj",
        ".props",
        ".targets",
    },
)

# Pygments display names that differ from the names the linter catalog uses.
LANGUAGE_ALIASES = {
    "VB.net": "Visual Basic .NET",
    "Python 2.x": "Python",
    "TSX": "TypeScript",
    "JSX": "JavaScript",
    "Bash": "Shell",
    "Go template": "Go",
}

# Extensions several lexers claim (F#/Forth, PHP/HTML+PHP), pinned to the
# language the linter catalog knows.
CATALOG_EXTENSIONS = {
    ".fs": "F#",
    ".fsi": "F#",
    ".fsx": "F#",
    ".php": "PHP",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
}

KNOWN_KINDS = {
    "Java": LanguageKind.PROGRAMMING,
    "Kotlin": LanguageKind.PROGRAMMING,
    "PHP": LanguageKind.PROGRAMMING,
    "Python": LanguageKind.PROGRAMMING,
    "JavaScript": LanguageKind.PROGRAMMING,
    "TypeScript": LanguageKind.PROGRAMMING,
    "Go": LanguageKind.PROGRAMMING,
    "C#": LanguageKind.PROGRAMMING,
    "F#": LanguageKind.PROGRAMMING,
    "Visual Basic .NET": LanguageKind.PROGRAMMING,
    "Shell": LanguageKind.PROGRAMMING,
    "JSON": LanguageKind.DATA,
    "YAML": LanguageKind.DATA,
    "TOML": LanguageKind.DATA,
    "XML": LanguageKind.DATA,
    "INI": LanguageKind.DATA,
    "SQL": LanguageKind.DATA,
    "HTML": LanguageKind.MARKUP,
    "CSS": LanguageKind.MARKUP,
    "SCSS": LanguageKind.MARKUP,
    "Sass": LanguageKind.MARKUP,
    "Markdown": LanguageKind.PROSE,
    "reStructuredText": LanguageKind.PROSE,
    "TeX": LanguageKind.PROSE,
    "Text only": LanguageKind.PROSE,
}

MODULE_KINDS = {
    "pygments.lexers.data": LanguageKind.DATA,
    "pygments.lexers.configs": LanguageKind.DATA,
    "pygments.lexers.sql": LanguageKind.DATA,
    "pygments.lexers.textfmts": LanguageKind.DATA,
    "pygments.lexers.diff": LanguageKind.DATA,
    "pygments.lexers.markup": LanguageKind.MARKUP,
    "pygments.lexers.html": LanguageKind.MARKUP,
    "pygments.lexers.css": LanguageKind.MARKUP,
    "pygments.lexers.templates": LanguageKind.MARKUP,
    "pygments.lexers.special": LanguageKind.UNKNOWN,
}


def _compile(patterns: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile("|".join(f"(?:{pattern})" for pattern in patterns))


_VENDOR_RE = _compile(VENDOR_PATTERNS)
_DOCUMENTATION_RE = _compile(DOCUMENTATION_PATTERNS)
_GENERATED_PATH_RE = _compile(GENERATED_PATH_PATTERNS)
_DOTFILE_RE = re.compile(r"(^|/)\.([^./][^/]*)/?$")


def is_vendor(path: str) -> bool:
    return bool(_VENDOR_RE.search(path))


def is_documentation(path: str) -> bool:
    return bool(_DOCUMENTATION_RE.search(path))


def is_dotfile(path: str) -> bool:
    return bool(_DOTFILE_RE.search(path))


def is_configuration(path: str) -> bool:
    if path.endswith("/"):
        return False
    _, extension = posixpath.splitext(path)
    return extension.lower() in CONFIGURATION_EXTENSIONS


def is_generated(path: str, sample: bytes | None = None) -> bool:
    """Check generated-code markers in the path and, if given, the content head."""
    if _GENERATED_PATH_RE.search(path):
        return True
    if not sample:
        return False
    head = sample.decode("utf-8", errors="replace").splitlines()[:GENERATED_HEADER_LINES]
    return any(GENERATED_CONTENT_MARKERS.search(line) for line in head)


def is_binary(sample: bytes) -> bool:
    return b"\x00" in sample


class PygmentsClassifier(FileClassifierInterface):
    """File classifier using linguist-style path rules and Pygments lexers.

    Paths are POSIX style and relative to the project root; directories carry
    a trailing slash so directory-only rules (``vendor/``) match them.
    """

    def classify(self, relative_path: str, sample: bytes | None = None) -> Classification:
        path = relative_path.replace("\\", "/")
        return Classification(
            vendor=is_vendor(path),
            dotfile=is_dotfile(path),
            documentation=is_documentation(path),
            configuration=is_configuration(path),
            generated=is_generated(path, sample),
        )

    def detect_language(self, filename: str, sample: bytes) -> str | None:
        if is_binary(sample):
            return None
        _, extension = posixpath.splitext(filename)
        if extension.lower() in CATALOG_EXTENSIONS:
            return CATALOG_EXTENSIONS[extension.lower()]
        text = sample.decode("utf-8", errors="replace")
        try:
            lexer = guess_lexer_for_filename(filename, text)
        except ClassNotFound:
            return None
        return LANGUAGE_ALIASES.get(lexer.name, lexer.name)

    def language_kind(self, language: str) -> LanguageKind:
        if language in KNOWN_KINDS:
            return KNOWN_KINDS[language]
        lexer_class = find_lexer_class(language)
        if lexer_class is None:
            return LanguageKind.UNKNOWN
        return MODULE_KINDS.get(lexer_class.__module__, LanguageKind.PROGRAMMING)
