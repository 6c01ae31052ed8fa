from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

Severity = Literal["info", "warning", "error"]


class Language(str, Enum):
    RUST = "rust"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


class NodeCategory(Enum):
    FUNCTION_DECL = "function_decl"
    TYPE_DECL = "type_decl"
    CONTROL_FLOW_LIGHT = "control_flow_light"
    CONTROL_FLOW_HEAVY = "control_flow_heavy"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    message: str
    line: int | None = None  # 1-based
    column: int | None = None  # 0-based


@dataclass(frozen=True, slots=True)
class Metrics:
    cyclomatic_complexity: int
    lines_of_code: int
    comment_ratio: float
    maintainability_index: float


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    file_path: str
    language: str
    line_count: int
    function_count: int
    struct_count: int
    complexity_score: float
    dependencies: tuple[str, ...]
    issues: tuple[Issue, ...]
    metrics: Metrics
