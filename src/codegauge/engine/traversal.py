from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from codegauge.engine.types import Language, NodeCategory
from codegauge.languages.classifier import classify


def iter_nodes(root: Any) -> Iterator[Any]:
    """
    Yield every node under `root` (inclusive) exactly once.

    Uses an explicit stack instead of recursion so deeply nested trees cannot
    hit the interpreter recursion limit. Nodes only need `.children`.
    """

    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        children = getattr(node, "children", None)
        if children:
            stack.extend(reversed(children))


def iter_classified(root: Any, language: Language) -> Iterator[tuple[Any, NodeCategory]]:
    for node in iter_nodes(root):
        yield node, classify(language, node.type)
