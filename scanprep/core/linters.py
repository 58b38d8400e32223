"""Catalog of analysis engines and language-based engine selection."""

from collections.abc import Iterable
from types import MappingProxyType

from ..models.exceptions import UnknownLinterError
from ..models.interfaces import EngineFamily

VERSION = "2023.2"
EAP_SUFFIX = "-eap"

QDJVMC = "QDJVMC"
QDJVM = "QDJVM"
QDANDC = "QDANDC"
QDPHP = "QDPHP"
QDPY = "QDPY"
QDPYC = "QDPYC"
QDJS = "QDJS"
QDGO = "QDGO"
QDNET = "QDNET"
QDNETC = "QDNETC"

PRODUCT_IMAGES = MappingProxyType(
    {
        QDJVMC: "qodana-jvm-community",
        QDJVM: "qodana-jvm",
        QDANDC: "qodana-jvm-android",
        QDPHP: "qodana-php",
        QDPY: "qodana-python",
        QDPYC: "qodana-python-community",
        QDJS: "qodana-js",
        QDGO: "qodana-go",
        QDNET: "qodana-dotnet",
        QDNETC: "qodana-cdnet",
    },
)

# Codes whose images are only published as EAP builds.
EAP_CODES = frozenset({QDNETC})

CODE_FAMILIES = MappingProxyType(
    {
        QDJVMC: EngineFamily.JVM,
        QDJVM: EngineFamily.JVM,
        QDANDC: EngineFamily.JVM,
        QDPHP: EngineFamily.PHP,
        QDPY: EngineFamily.PYTHON,
        QDPYC: EngineFamily.PYTHON,
        QDJS: EngineFamily.JS,
        QDGO: EngineFamily.GO,
        QDNET: EngineFamily.DOTNET_CONTAINER_FULL,
        QDNETC: EngineFamily.DOTNET_CONTAINER_COMMUNITY,
    },
)


def image(code: str) -> str:
    """Return the container image reference for a product code."""
    try:
        name = PRODUCT_IMAGES[code]
    except KeyError:
        raise UnknownLinterError(code) from None
    suffix = EAP_SUFFIX if code in EAP_CODES else ""
    return f"jetbrains/{name}:{VERSION}{suffix}"


def version_branch(version: str = VERSION) -> str:
    """Short branch of a product version, ``2023.2`` becomes ``232``."""
    return version[2:].replace(".", "", 1)


ALL_SUPPORTED_FREE_CODES = (QDJVMC, QDPYC, QDANDC)
ALL_SUPPORTED_PAID_CODES = (QDJVM, QDPHP, QDPY, QDJS, QDGO, QDNET)

ALL_SUPPORTED_FREE_IMAGES = tuple(image(code) for code in ALL_SUPPORTED_FREE_CODES)
ALL_IMAGES = ALL_SUPPORTED_FREE_IMAGES + tuple(image(code) for code in ALL_SUPPORTED_PAID_CODES)

_JVM_CANDIDATES = (image(QDJVMC), image(QDJVM), image(QDANDC))
_PYTHON_CANDIDATES = (image(QDPYC), image(QDPY))
_JS_CANDIDATES = (image(QDJS),)
_DOTNET_CANDIDATES = (QDNET, image(QDNET), image(QDNETC))

LANGUAGE_LINTERS = MappingProxyType(
    {
        "Java": _JVM_CANDIDATES,
        "Kotlin": _JVM_CANDIDATES,
        "PHP": (image(QDPHP),),
        "Python": _PYTHON_CANDIDATES,
        "JavaScript": _JS_CANDIDATES,
        "TypeScript": _JS_CANDIDATES,
        "Go": (image(QDGO),),
        "C#": _DOTNET_CANDIDATES,
        "F#": _DOTNET_CANDIDATES,
        "Visual Basic .NET": _DOTNET_CANDIDATES,
    },
)


def _build_engine_families() -> MappingProxyType:
    families = {image(code): family for code, family in CODE_FAMILIES.items()}
    families[QDNET] = EngineFamily.DOTNET_STANDALONE
    return MappingProxyType(families)


ENGINE_FAMILIES = _build_engine_families()


def engine_family(linter: str) -> EngineFamily | None:
    """Resolve the family of an engine identifier, None if it is not in the catalog."""
    return ENGINE_FAMILIES.get(linter)


def require_engine_family(linter: str) -> EngineFamily:
    family = engine_family(linter)
    if family is None:
        raise UnknownLinterError(linter)
    return family


def normalize_linter(linter: str) -> str:
    """Accept an engine identifier or a product code and return the identifier."""
    if linter in ENGINE_FAMILIES:
        return linter
    if linter in PRODUCT_IMAGES:
        return image(linter)
    raise UnknownLinterError(linter)


def is_dotnet_linter(linter: str) -> bool:
    family = engine_family(linter)
    return family is not None and family.is_dotnet


def is_native_linter(linter: str) -> bool:
    return engine_family(linter) is EngineFamily.DOTNET_STANDALONE


def select_candidates(languages: Iterable[str]) -> list[str]:
    """Map ranked languages to engine candidates.

    Candidates keep their per-language order; an engine suggested by several
    languages stays at the position of its first occurrence. Languages
    without catalog entries contribute nothing.
    """
    candidates: list[str] = []
    for language in languages:
        for linter in LANGUAGE_LINTERS.get(language, ()):
            if linter not in candidates:
                candidates.append(linter)
    return candidates


def choose_engine(candidates: Iterable[str], native: bool = False) -> str | None:
    """Pick the first candidate runnable in the requested mode.

    Native runs only accept the non-containerized engine, container runs
    accept everything else.
    """
    for linter in candidates:
        family = engine_family(linter)
        if family is None:
            continue
        if native != family.is_containerized:
            return linter
    return None
