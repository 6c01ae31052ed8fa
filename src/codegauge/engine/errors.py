from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base class for failures that abort a single `analyze` call."""


class UnsupportedLanguage(AnalysisError):
    """Raised when a language hint or file extension has no registered grammar."""

    def __init__(self, language: str) -> None:
        super().__init__(f"Unsupported language: {language}")
        self.language = language


class ParseFailure(AnalysisError):
    """Raised when a grammar produces no syntax tree at all."""
