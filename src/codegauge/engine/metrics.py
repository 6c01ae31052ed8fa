from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from codegauge.engine.traversal import iter_classified
from codegauge.engine.types import Language, Metrics, NodeCategory
from codegauge.languages.classifier import complexity_weight

BASE_COMPLEXITY = 1

MI_MIN = 0.0
MI_MAX = 100.0


@dataclass(frozen=True, slots=True)
class StructureCounts:
    function_count: int
    struct_count: int
    cyclomatic_complexity: int


def source_lines(content: str) -> tuple[str, ...]:
    """
    Split `content` into lines the way tree-sitter counts rows.

    Only "\\n" ends a line and a trailing "\\r" is dropped, so form feeds and
    U+2028/U+2029 stay inside their line. A final newline does not open an
    extra empty line.
    """

    if not content:
        return ()
    pieces = content.split("\n")
    if pieces[-1] == "":
        pieces.pop()
    return tuple(piece[:-1] if piece.endswith("\r") else piece for piece in pieces)


def count_structure(root: Any, language: Language) -> StructureCounts:
    """
    Single pass over the syntax tree.

    Contributions are summed, so the result does not depend on the order in
    which siblings are visited. ERROR nodes classify as OTHER and add nothing
    themselves; their children are still visited.
    """

    functions = 0
    structs = 0
    complexity = BASE_COMPLEXITY
    for _node, category in iter_classified(root, language):
        if category is NodeCategory.FUNCTION_DECL:
            functions += 1
        elif category is NodeCategory.TYPE_DECL:
            structs += 1
        else:
            complexity += complexity_weight(category)
    return StructureCounts(function_count=functions, struct_count=structs, cyclomatic_complexity=complexity)


def is_comment_line(line: str, markers: Sequence[str]) -> bool:
    stripped = line.strip()
    if not stripped:
        return False
    return stripped.startswith(tuple(markers))


def count_comment_lines(lines: Sequence[str], markers: Sequence[str]) -> int:
    # Comments are detected lexically; grammars do not reliably keep comment
    # tokens in the tree.
    return sum(1 for line in lines if is_comment_line(line, markers))


def comment_ratio(comment_lines: int, total_lines: int) -> float:
    if total_lines <= 0:
        return 0.0
    return comment_lines / total_lines


def maintainability_index(lines_of_code: int, cyclomatic_complexity: int) -> float:
    """
    171 - 5.2*ln(LOC) - 0.23*CC + 16.2*ln(LOC), clamped to [0, 100].

    LOC is floored at 1 so empty or all-comment files stay finite.
    """

    loc = max(lines_of_code, 1)
    log_loc = math.log(loc)
    raw = 171.0 - 5.2 * log_loc - 0.23 * cyclomatic_complexity + 16.2 * log_loc
    return max(MI_MIN, min(MI_MAX, raw))


def compute_metrics(lines: Sequence[str], markers: Sequence[str], *, cyclomatic_complexity: int) -> Metrics:
    total = len(lines)
    comments = count_comment_lines(lines, markers)
    loc = total - comments
    return Metrics(
        cyclomatic_complexity=cyclomatic_complexity,
        lines_of_code=loc,
        comment_ratio=comment_ratio(comments, total),
        maintainability_index=maintainability_index(loc, cyclomatic_complexity),
    )
