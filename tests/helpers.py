from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class FakeNode:
    """Minimal stand-in for a tree-sitter node: just `.type` and `.children`."""

    def __init__(self, node_type: str, children: list[FakeNode] | None = None) -> None:
        self.type = node_type
        self.children = children or []


@dataclass
class FakeTree:
    root_node: Any


def node(node_type: str, *children: FakeNode) -> FakeNode:
    return FakeNode(node_type, list(children))
