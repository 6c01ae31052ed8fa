from __future__ import annotations

import logging
import time

from codegauge.config import RulesConfig
from codegauge.engine.metrics import compute_metrics, count_structure, source_lines
from codegauge.engine.tree_sitter import GrammarRegistry, get_registry
from codegauge.engine.types import AnalysisResult
from codegauge.heuristics.dependencies import extract_dependencies
from codegauge.heuristics.rules import SourceText, detect_issues
from codegauge.languages.registry import resolve_language, spec_for

logger = logging.getLogger(__name__)


def analyze(
    content: str,
    language_hint: str | None = None,
    *,
    file_path: str = "",
    rules: RulesConfig | None = None,
    registry: GrammarRegistry | None = None,
) -> AnalysisResult:
    """
    Analyze one source file's text.

    Without `language_hint` the language comes from `file_path`'s extension.
    Raises `UnsupportedLanguage` when neither resolves to a registered
    grammar, and `ParseFailure` when the grammar yields no tree. The result
    depends only on (content, resolved language, rules config).
    """

    started = time.perf_counter()
    language = resolve_language(file_path, language_hint)
    spec = spec_for(language)
    tree = (registry or get_registry()).parse(language, content)

    lines = source_lines(content)
    structure = count_structure(tree.root_node, language)
    metrics = compute_metrics(lines, spec.comment_markers, cyclomatic_complexity=structure.cyclomatic_complexity)
    dependencies = extract_dependencies(lines, language)
    issues = detect_issues(SourceText(language, lines, spec.comment_markers), config=rules)

    logger.debug(
        "analyzed %s (%s, %d lines) in %.1fms",
        file_path or "<content>",
        language.value,
        len(lines),
        (time.perf_counter() - started) * 1000,
    )

    return AnalysisResult(
        file_path=file_path,
        language=language.value,
        line_count=len(lines),
        function_count=structure.function_count,
        struct_count=structure.struct_count,
        complexity_score=float(structure.cyclomatic_complexity),
        dependencies=dependencies,
        issues=issues,
        metrics=metrics,
    )
