from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any, Protocol, cast

from tree_sitter import Parser as _TreeSitterParser
from tree_sitter_language_pack import get_language as _tree_sitter_get_language

from codegauge.engine.errors import AnalysisError, ParseFailure, UnsupportedLanguage
from codegauge.engine.types import Language
from codegauge.languages.registry import LANGUAGES, LanguageSpec

logger = logging.getLogger(__name__)


class _ParserLike(Protocol):
    def parse(self, source: bytes) -> object: ...


class SyntaxTree(Protocol):
    # tree-sitter Tree exposes `root_node`; we treat nodes structurally.
    root_node: Any


# Expose these for tests and for light monkeypatching in downstream tooling.
Parser: Callable[[object], _ParserLike] = cast(Callable[[object], _ParserLike], _TreeSitterParser)
get_language: Callable[[str], object] = cast(Callable[[str], object], _tree_sitter_get_language)


class TreeSitterError(AnalysisError):
    """Raised when tree-sitter cannot load a grammar."""


class GrammarRegistry:
    """
    Process-wide set of tree-sitter grammars, one per supported language.

    Grammars are loaded once in the constructor and never change afterwards.
    tree-sitter Parser objects are not thread-safe, so parsers are handed out
    per thread: each thread lazily builds its own Parser for a language and
    reuses it for later calls on that thread.
    """

    def __init__(self, specs: Iterable[LanguageSpec] = LANGUAGES) -> None:
        grammars: dict[Language, object] = {}
        for spec in specs:
            try:
                grammars[spec.language] = get_language(spec.grammar)
            except (LookupError, ValueError, RuntimeError, OSError) as exc:
                raise TreeSitterError(f"tree-sitter grammar not available: {spec.grammar!r}") from exc
            logger.debug("loaded tree-sitter grammar %s", spec.grammar)
        self._grammars = grammars
        self._local = threading.local()

    @property
    def languages(self) -> tuple[Language, ...]:
        return tuple(self._grammars)

    def grammar_for(self, language: Language) -> _ParserLike:
        grammar = self._grammars.get(language)
        if grammar is None:
            raise UnsupportedLanguage(language.value)

        parsers = self._thread_parsers()
        parser = parsers.get(language)
        if parser is None:
            parser = Parser(grammar)
            parsers[language] = parser
        return parser

    def parse(self, language: Language, source: str) -> SyntaxTree:
        """
        Parse `source` and return the tree.

        Syntax errors do not fail the call: tree-sitter recovers and marks them
        with ERROR nodes. Only a missing tree raises `ParseFailure`.
        """

        parser = self.grammar_for(language)
        try:
            tree = parser.parse(source.encode("utf-8", errors="replace"))
        except (ValueError, TypeError, RuntimeError) as exc:
            # Never hand a parser that blew up mid-parse to the next caller.
            self._thread_parsers().pop(language, None)
            logger.debug("discarded %s parser after failure: %s", language.value, exc)
            raise ParseFailure(f"Failed to parse {language.value} source: {exc}") from exc

        if tree is None or getattr(tree, "root_node", None) is None:
            raise ParseFailure(f"Failed to parse {language.value} source")
        return cast(SyntaxTree, tree)

    def _thread_parsers(self) -> dict[Language, _ParserLike]:
        parsers: dict[Language, _ParserLike] | None = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = {}
            self._local.parsers = parsers
        return parsers


_REGISTRY: GrammarRegistry | None = None
_REGISTRY_LOCK = threading.Lock()


def get_registry() -> GrammarRegistry:
    """Return the shared registry, building it on first use."""

    global _REGISTRY
    with _REGISTRY_LOCK:
        if _REGISTRY is None:
            _REGISTRY = GrammarRegistry()
        return _REGISTRY
