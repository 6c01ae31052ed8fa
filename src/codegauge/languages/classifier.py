from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from codegauge.engine.types import Language, NodeCategory

_F = NodeCategory.FUNCTION_DECL
_T = NodeCategory.TYPE_DECL
_LIGHT = NodeCategory.CONTROL_FLOW_LIGHT
_HEAVY = NodeCategory.CONTROL_FLOW_HEAVY

# Node kinds follow the tree-sitter grammar vocabularies. Older grammar
# releases still emit `if_let_expression` / `while_let_expression`, so both
# spellings are kept.
_RUST: dict[str, NodeCategory] = {
    "function_item": _F,
    "struct_item": _T,
    "if_expression": _LIGHT,
    "if_let_expression": _LIGHT,
    "match_expression": _LIGHT,
    "while_expression": _HEAVY,
    "while_let_expression": _HEAVY,
    "for_expression": _HEAVY,
    "loop_expression": _HEAVY,
}

_JAVASCRIPT: dict[str, NodeCategory] = {
    "function_declaration": _F,
    "generator_function_declaration": _F,
    "class_declaration": _T,
    "if_statement": _LIGHT,
    "switch_statement": _LIGHT,
    "try_statement": _LIGHT,
    "while_statement": _HEAVY,
    "do_statement": _HEAVY,
    "for_statement": _HEAVY,
    "for_in_statement": _HEAVY,
}

_TYPESCRIPT: dict[str, NodeCategory] = {
    **_JAVASCRIPT,
    "abstract_class_declaration": _T,
}

_PYTHON: dict[str, NodeCategory] = {
    "function_definition": _F,
    "class_definition": _T,
    "if_statement": _LIGHT,
    "elif_clause": _LIGHT,
    "try_statement": _LIGHT,
    "match_statement": _LIGHT,
    "while_statement": _HEAVY,
    "for_statement": _HEAVY,
}

TABLES: Mapping[Language, Mapping[str, NodeCategory]] = MappingProxyType(
    {
        Language.RUST: MappingProxyType(_RUST),
        Language.JAVASCRIPT: MappingProxyType(_JAVASCRIPT),
        Language.TYPESCRIPT: MappingProxyType(_TYPESCRIPT),
        Language.PYTHON: MappingProxyType(_PYTHON),
    }
)

_EMPTY: Mapping[str, NodeCategory] = MappingProxyType({})

COMPLEXITY_WEIGHTS: Mapping[NodeCategory, int] = MappingProxyType(
    {
        _LIGHT: 1,
        _HEAVY: 2,
    }
)


def table_for(language: Language) -> Mapping[str, NodeCategory]:
    return TABLES.get(language, _EMPTY)


def classify(language: Language, node_kind: str) -> NodeCategory:
    """Map a grammar node kind to its category; anything unlisted is OTHER."""

    return table_for(language).get(node_kind, NodeCategory.OTHER)


def complexity_weight(category: NodeCategory) -> int:
    return COMPLEXITY_WEIGHTS.get(category, 0)
