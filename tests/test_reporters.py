from __future__ import annotations

import json

import pytest
from rich.console import Console

from codegauge.engine.types import AnalysisResult, Issue, Metrics
from codegauge.reporters.json_reporter import (
    REPORT_SCHEMA_VERSION,
    parse_json_report,
    render_json,
    result_to_dict,
)
from codegauge.reporters.terminal import render_terminal


def _result(file_path: str = "src/main.rs") -> AnalysisResult:
    return AnalysisResult(
        file_path=file_path,
        language="rust",
        line_count=12,
        function_count=2,
        struct_count=1,
        complexity_score=4.0,
        dependencies=("serde", "std"),
        issues=(
            Issue(severity="warning", message="Consider using proper error handling instead of unwrap()", line=3, column=14),
            Issue(severity="info", message="repo-wide note"),
        ),
        metrics=Metrics(
            cyclomatic_complexity=4,
            lines_of_code=10,
            comment_ratio=2 / 12,
            maintainability_index=100.0,
        ),
    )


def test_result_to_dict_field_names() -> None:
    data = result_to_dict(_result())
    assert list(data) == [
        "file_path",
        "language",
        "line_count",
        "function_count",
        "struct_count",
        "complexity_score",
        "dependencies",
        "issues",
        "metrics",
    ]
    assert data["dependencies"] == ["serde", "std"]
    assert data["issues"][1] == {"severity": "info", "message": "repo-wide note", "line": None, "column": None}
    assert set(data["metrics"]) == {
        "cyclomatic_complexity",
        "lines_of_code",
        "comment_ratio",
        "maintainability_index",
    }


def test_render_json_payload_and_parse_back() -> None:
    text = render_json([_result()], errors={"b.xyz": "Unsupported language: unknown", "a.rs": "boom"})
    payload = json.loads(text)
    assert payload["schema_version"] == REPORT_SCHEMA_VERSION
    assert payload["tool"]["name"] == "codegauge"
    assert payload["errors"] == [
        {"file_path": "a.rs", "message": "boom"},
        {"file_path": "b.xyz", "message": "Unsupported language: unknown"},
    ]
    assert parse_json_report(text) == [_result()]


def test_parse_json_report_accepts_bare_result() -> None:
    text = json.dumps(result_to_dict(_result("lib.rs")))
    assert parse_json_report(text) == [_result("lib.rs")]


def test_parse_json_report_normalizes_issue_fields() -> None:
    data = result_to_dict(_result())
    data["issues"] = [{"severity": "WARN", "message": "x", "line": 0, "column": -1}, {"severity": "weird"}]
    parsed = parse_json_report(json.dumps(data))[0]
    assert parsed.issues == (
        Issue(severity="warning", message="x", line=None, column=None),
        Issue(severity="info", message=""),
    )


@pytest.mark.parametrize(
    "text",
    [
        "[]",
        '{"results": {}}',
        '{"language": "rust"}',
        json.dumps({"results": [{"language": "rust", "metrics": {}}]}),
        "{not json",
    ],
)
def test_parse_json_report_rejects_invalid_input(text: str) -> None:
    with pytest.raises(ValueError):
        parse_json_report(text)


def test_render_terminal_summary_details_and_errors() -> None:
    console = Console(record=True, width=160)
    render_terminal([_result()], console=console, errors={"notes.xyz": "Unsupported language: unknown"})
    text = console.export_text()

    assert "Analyzed 1 file(s)" in text
    assert "src/main.rs" in text
    assert "dependencies: serde, std" in text
    assert "(3:14)" in text
    assert "unwrap()" in text
    assert "repo-wide note" in text
    assert "notes.xyz: Unsupported language: unknown" in text


def test_render_terminal_without_details() -> None:
    console = Console(record=True, width=160)
    render_terminal([_result()], console=console, show_details=False)
    text = console.export_text()
    assert "Summary" in text
    assert "dependencies:" not in text


def test_render_terminal_empty() -> None:
    console = Console(record=True, width=120)
    render_terminal([], console=console)
    text = console.export_text()
    assert "Analyzed 0 file(s)" in text
    assert "Summary" not in text
