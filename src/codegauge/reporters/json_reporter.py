from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from codegauge import __version__
from codegauge.engine.types import AnalysisResult, Issue, Metrics

REPORT_SCHEMA_VERSION = 1

_SEVERITIES = {"info", "warning", "error"}


def result_to_dict(result: AnalysisResult) -> dict[str, Any]:
    return {
        "file_path": result.file_path,
        "language": result.language,
        "line_count": result.line_count,
        "function_count": result.function_count,
        "struct_count": result.struct_count,
        "complexity_score": result.complexity_score,
        "dependencies": list(result.dependencies),
        "issues": [_issue_to_dict(issue) for issue in result.issues],
        "metrics": {
            "cyclomatic_complexity": result.metrics.cyclomatic_complexity,
            "lines_of_code": result.metrics.lines_of_code,
            "comment_ratio": result.metrics.comment_ratio,
            "maintainability_index": result.metrics.maintainability_index,
        },
    }


def _issue_to_dict(issue: Issue) -> dict[str, Any]:
    return {
        "severity": issue.severity,
        "message": issue.message,
        "line": issue.line,
        "column": issue.column,
    }


def render_json(results: Iterable[AnalysisResult], *, errors: dict[str, str] | None = None) -> str:
    payload = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "tool": {"name": "codegauge", "version": __version__},
        "results": [result_to_dict(r) for r in results],
        "errors": [{"file_path": path, "message": message} for path, message in sorted((errors or {}).items())],
    }
    return json.dumps(payload, indent=2, sort_keys=False)


def parse_json_report(text: str) -> list[AnalysisResult]:
    """
    Parse a JSON report produced by `render_json()` back into results.

    A bare result object (as produced by `result_to_dict`) is also accepted.
    """

    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("JSON report must be an object.")

    if "results" not in data:
        return [_parse_result(data)]

    raw_results = data.get("results")
    if not isinstance(raw_results, list):
        raise ValueError("JSON report `results` must be a list.")
    return [_parse_result(item) for item in raw_results if isinstance(item, dict)]


def _parse_result(item: dict[str, Any]) -> AnalysisResult:
    metrics_raw = item.get("metrics")
    if not isinstance(metrics_raw, dict):
        raise ValueError("JSON result is missing the `metrics` object.")

    try:
        metrics = Metrics(
            cyclomatic_complexity=int(metrics_raw["cyclomatic_complexity"]),
            lines_of_code=int(metrics_raw["lines_of_code"]),
            comment_ratio=float(metrics_raw["comment_ratio"]),
            maintainability_index=float(metrics_raw["maintainability_index"]),
        )
        raw_issues = item.get("issues", [])
        raw_deps = item.get("dependencies", [])
        return AnalysisResult(
            file_path=str(item.get("file_path", "")),
            language=str(item["language"]),
            line_count=int(item["line_count"]),
            function_count=int(item["function_count"]),
            struct_count=int(item["struct_count"]),
            complexity_score=float(item["complexity_score"]),
            dependencies=tuple(str(d) for d in raw_deps) if isinstance(raw_deps, list) else (),
            issues=tuple(_parse_issue(i) for i in raw_issues if isinstance(i, dict)) if isinstance(raw_issues, list) else (),
            metrics=metrics,
        )
    except KeyError as exc:
        raise ValueError(f"JSON result missing required field: {exc.args[0]}") from exc


def _parse_issue(item: dict[str, Any]) -> Issue:
    severity = str(item.get("severity", "info")).strip().lower()
    if severity == "warn":
        severity = "warning"
    if severity not in _SEVERITIES:
        severity = "info"

    raw_line = item.get("line")
    raw_column = item.get("column")
    line = raw_line if isinstance(raw_line, int) and raw_line > 0 else None
    column = raw_column if isinstance(raw_column, int) and raw_column >= 0 else None

    return Issue(
        severity=severity,  # type: ignore[arg-type]
        message=str(item.get("message", "")),
        line=line,
        column=column,
    )
