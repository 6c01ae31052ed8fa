from __future__ import annotations

import math
from dataclasses import FrozenInstanceError

import pytest

from codegauge.config import RulesConfig
from codegauge.engine.analyzer import analyze
from codegauge.engine.errors import UnsupportedLanguage
from codegauge.engine.tree_sitter import GrammarRegistry
from codegauge.engine.types import AnalysisResult


@pytest.mark.parametrize("language", ["rust", "javascript", "typescript", "python"])
def test_empty_source_has_baseline_metrics(language: str, registry: GrammarRegistry) -> None:
    result = analyze("", language, registry=registry)
    assert result.language == language
    assert result.line_count == 0
    assert result.complexity_score == 1
    assert result.function_count == 0
    assert result.struct_count == 0
    assert result.dependencies == ()
    assert result.issues == ()
    assert result.metrics.cyclomatic_complexity == 1
    assert result.metrics.lines_of_code == 0
    assert result.metrics.comment_ratio == 0.0
    assert math.isfinite(result.metrics.maintainability_index)
    assert 0.0 <= result.metrics.maintainability_index <= 100.0


def test_rust_function_with_if(registry: GrammarRegistry) -> None:
    result = analyze("fn main() { if true { } }", "rust", registry=registry)
    assert result.function_count == 1
    assert result.complexity_score == 2
    assert result.metrics.cyclomatic_complexity == 2


def test_rust_structs_and_loops(registry: GrammarRegistry) -> None:
    source = (
        "use std::collections::HashMap;\n"
        "use crate::config::Settings;\n"
        "\n"
        "// A point.\n"
        "struct Point { x: i32, y: i32 }\n"
        "\n"
        "fn walk(items: &[i32]) {\n"
        "    for item in items {\n"
        "        match item { 0 => {}, _ => {} }\n"
        "    }\n"
        "    loop { break; }\n"
        "}\n"
    )
    result = analyze(source, file_path="src/walk.rs", registry=registry)
    assert result.language == "rust"
    assert result.file_path == "src/walk.rs"
    assert result.line_count == 12
    assert result.function_count == 1
    assert result.struct_count == 1
    # 1 base + for(2) + match(1) + loop(2)
    assert result.complexity_score == 6
    assert result.dependencies == ("std",)
    assert result.metrics.lines_of_code == 11
    assert result.metrics.comment_ratio == pytest.approx(1 / 12)


def test_javascript_counts(registry: GrammarRegistry) -> None:
    source = (
        "import React from 'react';\n"
        "const path = require('path');\n"
        "function f(x) {\n"
        "  if (x) { return 1; }\n"
        "  while (x) { x--; }\n"
        "  console.log(x);\n"
        "}\n"
        "class A {}\n"
    )
    result = analyze(source, file_path="app.js", registry=registry)
    assert result.function_count == 1
    assert result.struct_count == 1
    assert result.complexity_score == 4
    assert result.dependencies == ("path", "react")
    assert [(i.severity, i.line, i.column) for i in result.issues] == [("info", 6, 2)]


def test_typescript_uses_its_own_grammar(registry: GrammarRegistry) -> None:
    source = (
        "abstract class Base {}\n"
        "class Impl extends Base {}\n"
        "function run(n: number): void {\n"
        "  for (let i = 0; i < n; i++) {}\n"
        "}\n"
    )
    result = analyze(source, file_path="lib.ts", registry=registry)
    assert result.language == "typescript"
    assert result.struct_count == 2
    assert result.function_count == 1
    assert result.complexity_score == 3


def test_python_counts_and_dependencies(registry: GrammarRegistry) -> None:
    source = (
        "import os\n"
        "from sys import path\n"
        "\n"
        "class Walker:\n"
        "    def walk(self, items):\n"
        "        for item in items:\n"
        "            if item:\n"
        "                pass\n"
        "            elif item is None:\n"
        "                pass\n"
    )
    result = analyze(source, "python", registry=registry)
    assert result.dependencies == ("os", "sys")
    assert result.function_count == 1
    assert result.struct_count == 1
    # 1 base + for(2) + if(1) + elif(1)
    assert result.complexity_score == 5


def test_long_line_issue(registry: GrammarRegistry) -> None:
    line = "x = " + "1" * 146
    assert len(line) == 150
    result = analyze(line + "\n", "python", registry=registry)
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.severity == "warning"
    assert "150" in issue.message
    assert issue.column == 100
    assert issue.line == 1


def test_rust_unwrap_issue(registry: GrammarRegistry) -> None:
    source = "fn main() {\n    let v = parse(s).unwrap();\n}\n"
    result = analyze(source, "rust", registry=registry)
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.severity == "warning"
    assert issue.line == 2
    assert issue.column == "    let v = parse(s).unwrap();".index(".unwrap()")


def test_issue_lines_exist_in_source(registry: GrammarRegistry) -> None:
    source = "print('a')\n\n    print('b')\n" + "y = '" + "z" * 120 + "'\n"
    result = analyze(source, "python", registry=registry)
    line_count = len(source.splitlines())
    assert result.issues
    assert all(issue.line is not None and 1 <= issue.line <= line_count for issue in result.issues)


def test_syntax_errors_do_not_abort(registry: GrammarRegistry) -> None:
    result = analyze("fn ok() {}\nfn broken( {\n", "rust", registry=registry)
    assert result.line_count == 2
    assert result.complexity_score >= 1


def test_unknown_extension_is_unsupported(registry: GrammarRegistry) -> None:
    with pytest.raises(UnsupportedLanguage):
        analyze("whatever", file_path="notes.xyz", registry=registry)


def test_unknown_hint_is_unsupported(registry: GrammarRegistry) -> None:
    with pytest.raises(UnsupportedLanguage):
        analyze("whatever", "cobol", registry=registry)
    with pytest.raises(UnsupportedLanguage):
        analyze("whatever", "unknown", registry=registry)


def test_analysis_is_deterministic(registry: GrammarRegistry) -> None:
    source = "import os\nimport os\n\ndef f():\n    print(1)\n"
    first = analyze(source, "python", file_path="a.py", registry=registry)
    second = analyze(source, "python", file_path="a.py", registry=registry)
    assert first == second
    assert isinstance(first, AnalysisResult)
    with pytest.raises(FrozenInstanceError):
        first.line_count = 0  # type: ignore[misc]


def test_rules_config_is_applied(registry: GrammarRegistry) -> None:
    source = "fn main() {\n    dbg!(x).unwrap();\n}\n"
    rules = RulesConfig(disable=("R04",), severity_overrides={"R01": "error"})
    result = analyze(source, "rust", registry=registry, rules=rules)
    assert [(i.severity, i.message) for i in result.issues] == [
        ("error", "Consider using proper error handling instead of unwrap()")
    ]


def test_unicode_line_separator_does_not_split_lines(registry: GrammarRegistry) -> None:
    source = 'let s = "a\u2028b";\nlet v = x.unwrap();\n'
    result = analyze(source, "rust", registry=registry)
    assert result.line_count == 2
    assert result.metrics.lines_of_code == 2
    assert [(i.line, i.column) for i in result.issues] == [(2, 9)]


def test_form_feed_does_not_split_lines(registry: GrammarRegistry) -> None:
    source = "import os\n\x0c\ndef f():\n    print(1)\n"
    result = analyze(source, "python", registry=registry)
    assert result.line_count == 4
    assert result.dependencies == ("os",)
    assert [(i.line, i.column) for i in result.issues] == [(4, 4)]
