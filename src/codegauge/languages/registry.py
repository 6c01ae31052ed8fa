from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePath

from codegauge.engine.errors import UnsupportedLanguage
from codegauge.engine.types import Language


@dataclass(frozen=True, slots=True)
class LanguageSpec:
    language: Language
    extensions: tuple[str, ...]
    grammar: str
    comment_markers: tuple[str, ...]

    @property
    def name(self) -> str:
        return self.language.value


LANGUAGES: tuple[LanguageSpec, ...] = (
    LanguageSpec(Language.RUST, (".rs",), "rust", ("//", "/*")),
    LanguageSpec(Language.JAVASCRIPT, (".js", ".mjs"), "javascript", ("//", "/*")),
    LanguageSpec(Language.TYPESCRIPT, (".ts",), "typescript", ("//", "/*")),
    LanguageSpec(Language.PYTHON, (".py",), "python", ("#",)),
)

_EXT_TO_LANG = {ext: spec.language for spec in LANGUAGES for ext in spec.extensions}
_SPEC_BY_LANG = {spec.language: spec for spec in LANGUAGES}


def detect_language(path: str | PurePath) -> Language:
    """
    Map a file path (or a bare extension such as ".rs") to a `Language`.

    The mapping is total: anything unrecognised maps to `Language.UNKNOWN`,
    which `spec_for` rejects with `UnsupportedLanguage`.
    """

    raw = str(path)
    suffix = PurePath(raw).suffix.lower()
    if not suffix and raw.startswith(".") and "/" not in raw:
        suffix = raw.lower()
    return _EXT_TO_LANG.get(suffix, Language.UNKNOWN)


def parse_language(value: str) -> Language:
    """Normalise a user-supplied language hint (case-insensitive)."""

    normalized = value.strip().lower()
    try:
        return Language(normalized)
    except ValueError:
        raise UnsupportedLanguage(value) from None


def resolve_language(file_path: str, language_hint: str | None = None) -> Language:
    if language_hint is not None and language_hint.strip():
        return parse_language(language_hint)
    return detect_language(file_path)


def spec_for(language: Language) -> LanguageSpec:
    spec = _SPEC_BY_LANG.get(language)
    if spec is None:
        raise UnsupportedLanguage(language.value)
    return spec


def supported_languages() -> tuple[Language, ...]:
    return tuple(spec.language for spec in LANGUAGES)


def allowed_extensions(enabled_languages: tuple[str, ...]) -> set[str]:
    enabled = {lang.strip().lower() for lang in enabled_languages}
    exts: set[str] = set()
    for spec in LANGUAGES:
        if spec.name in enabled:
            exts.update(spec.extensions)
    return exts


def is_supported_path(path: Path) -> bool:
    return detect_language(path) is not Language.UNKNOWN
