from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence

from codegauge.engine.types import Language

_RUST_USE_RE = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?use\s+(?:::)?(?P<name>[A-Za-z_][A-Za-z0-9_]*)")
_RUST_EXTERN_CRATE_RE = re.compile(r"^\s*extern\s+crate\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)")
_RUST_LOCAL_ROOTS = frozenset({"crate", "self", "super"})

_JS_IMPORT_FROM_RE = re.compile(r"^\s*(?:import|export)\b.*?\bfrom\s*(?P<q>['\"])(?P<spec>[^'\"]+)(?P=q)")
_JS_SIDE_EFFECT_IMPORT_RE = re.compile(r"^\s*import\s*(?P<q>['\"])(?P<spec>[^'\"]+)(?P=q)")
_JS_CALL_RE = re.compile(r"\b(?:require|import)\s*\(\s*(?P<q>['\"])(?P<spec>[^'\"]+)(?P=q)\s*\)")

_PY_IMPORT_RE = re.compile(r"^\s*import\s+(?P<names>[^#;]+)")
_PY_FROM_RE = re.compile(r"^\s*from\s+(?P<module>\S+)\s+import\b")
_PY_DOTTED_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*")


def _rust_dependencies(lines: Iterable[str]) -> Iterable[str]:
    for line in lines:
        m = _RUST_USE_RE.match(line) or _RUST_EXTERN_CRATE_RE.match(line)
        if m is None:
            continue
        name = m.group("name")
        if name not in _RUST_LOCAL_ROOTS:
            yield name


def _js_package_name(spec: str) -> str | None:
    if spec.startswith((".", "/")):
        return None
    parts = spec.split("/")
    if spec.startswith("@") and len(parts) >= 2:
        return "/".join(parts[:2])
    return parts[0] or None


def _js_dependencies(lines: Iterable[str]) -> Iterable[str]:
    for line in lines:
        specs: list[str] = []
        m = _JS_IMPORT_FROM_RE.match(line) or _JS_SIDE_EFFECT_IMPORT_RE.match(line)
        if m is not None:
            specs.append(m.group("spec"))
        specs.extend(call.group("spec") for call in _JS_CALL_RE.finditer(line))
        for spec in specs:
            name = _js_package_name(spec.strip())
            if name:
                yield name


def _python_dependencies(lines: Iterable[str]) -> Iterable[str]:
    for line in lines:
        m = _PY_FROM_RE.match(line)
        if m is not None:
            module = m.group("module")
            # Relative imports point back into the same package.
            if module.startswith("."):
                continue
            top = _PY_DOTTED_RE.match(module)
            if top is not None:
                yield top.group(0)
            continue

        m = _PY_IMPORT_RE.match(line)
        if m is None:
            continue
        for raw in m.group("names").split(","):
            top = _PY_DOTTED_RE.match(raw.strip())
            if top is not None:
                yield top.group(0)


_EXTRACTORS: dict[Language, Callable[[Iterable[str]], Iterable[str]]] = {
    Language.RUST: _rust_dependencies,
    Language.JAVASCRIPT: _js_dependencies,
    Language.TYPESCRIPT: _js_dependencies,
    Language.PYTHON: _python_dependencies,
}


def extract_dependencies(lines: Sequence[str], language: Language) -> tuple[str, ...]:
    """
    Collect top-level module/package names referenced by import statements.

    This is a line-oriented heuristic: multi-line import statements are only
    picked up when the module name sits on the statement's first line, and
    matches inside strings or comments are not filtered out.
    """

    extractor = _EXTRACTORS.get(language)
    if extractor is None:
        return ()
    return tuple(sorted(set(extractor(lines))))
