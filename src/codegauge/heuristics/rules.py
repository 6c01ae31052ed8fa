from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from codegauge.config import RulesConfig
from codegauge.engine.metrics import is_comment_line
from codegauge.engine.types import Issue, Language, Severity

MAX_LINE_LENGTH = 100

_ALL = frozenset(Language) - {Language.UNKNOWN}
_RUST = frozenset({Language.RUST})
_JS_TS = frozenset({Language.JAVASCRIPT, Language.TYPESCRIPT})
_PYTHON = frozenset({Language.PYTHON})

_RUST_UNWRAP_RE = re.compile(r"\.\s*unwrap\s*\(\s*\)")
_RUST_EXPECT_RE = re.compile(r"\.\s*expect\s*\(")
_RUST_TODO_RE = re.compile(r"\b(?P<macro>todo|unimplemented)!\s*\(")
_RUST_DBG_RE = re.compile(r"\bdbg!\s*\(")
_JS_CONSOLE_RE = re.compile(r"\bconsole\.(?P<method>log|debug|trace|dir)\b")
_JS_DEBUGGER_RE = re.compile(r"^\s*(?P<hit>debugger)\s*;?\s*$")
_JS_EVAL_RE = re.compile(r"(?<![\w.$])eval\s*\(")
_PY_PRINT_RE = re.compile(r"^\s*(?P<hit>print)\s*\(")
_PY_BREAKPOINT_RE = re.compile(r"\b(?:breakpoint\s*\(\s*\)|pdb\.set_trace\s*\()")
_PY_BARE_EXCEPT_RE = re.compile(r"^\s*(?P<hit>except)\s*:")


@dataclass(frozen=True, slots=True)
class RuleMeta:
    rule_id: str
    default_severity: Severity
    languages: frozenset[Language]


@dataclass(frozen=True, slots=True)
class SourceText:
    language: Language
    lines: tuple[str, ...]
    comment_markers: tuple[str, ...]


class BaseRule(ABC):
    meta: RuleMeta

    def applies_to(self, language: Language) -> bool:
        return language in self.meta.languages

    @abstractmethod
    def check(self, source: SourceText) -> list[Issue]: ...

    def _issue(self, *, message: str, line: int, column: int | None) -> Issue:
        return Issue(severity=self.meta.default_severity, message=message, line=line, column=column)


class L01LineTooLong(BaseRule):
    meta = RuleMeta("L01", "warning", _ALL)

    def check(self, source: SourceText) -> list[Issue]:
        issues: list[Issue] = []
        for idx, line in enumerate(source.lines, start=1):
            length = len(line)
            if length > MAX_LINE_LENGTH:
                issues.append(
                    self._issue(message=f"Line too long ({length} characters)", line=idx, column=MAX_LINE_LENGTH)
                )
        return issues


class PatternRule(BaseRule):
    """
    One issue per regex match on non-comment lines.

    The column is the start of the `hit` group when the pattern defines one,
    otherwise the start of the whole match. `message` may reference named
    groups with `{name}` placeholders.
    """

    pattern: re.Pattern[str]
    message: str

    def check(self, source: SourceText) -> list[Issue]:
        issues: list[Issue] = []
        for idx, line in enumerate(source.lines, start=1):
            if is_comment_line(line, source.comment_markers):
                continue
            for m in self.pattern.finditer(line):
                column = m.start("hit") if "hit" in self.pattern.groupindex else m.start()
                message = self.message.format_map(m.groupdict())
                issues.append(self._issue(message=message, line=idx, column=column))
        return issues


class R01RustUnwrapUsed(PatternRule):
    meta = RuleMeta("R01", "warning", _RUST)
    pattern = _RUST_UNWRAP_RE
    message = "Consider using proper error handling instead of unwrap()"


class R02RustExpectUsed(PatternRule):
    meta = RuleMeta("R02", "info", _RUST)
    pattern = _RUST_EXPECT_RE
    message = "Consider propagating the error with ? instead of expect()"


class R03RustUnfinishedMacro(PatternRule):
    meta = RuleMeta("R03", "warning", _RUST)
    pattern = _RUST_TODO_RE
    message = "{macro}!() panics when reached"


class R04RustDbgMacro(PatternRule):
    meta = RuleMeta("R04", "info", _RUST)
    pattern = _RUST_DBG_RE
    message = "Remove dbg!() debugging output"


class J01ConsoleDebugOutput(PatternRule):
    meta = RuleMeta("J01", "info", _JS_TS)
    pattern = _JS_CONSOLE_RE
    message = "Consider removing console.{method} in production code"


class J02DebuggerStatement(PatternRule):
    meta = RuleMeta("J02", "warning", _JS_TS)
    pattern = _JS_DEBUGGER_RE
    message = "Remove debugger statement"


class J03EvalUsed(PatternRule):
    meta = RuleMeta("J03", "warning", _JS_TS)
    pattern = _JS_EVAL_RE
    message = "Avoid eval(); it executes arbitrary strings as code"


class P01PrintStatement(PatternRule):
    meta = RuleMeta("P01", "info", _PYTHON)
    pattern = _PY_PRINT_RE
    message = "Consider using logging instead of print"


class P02DebuggerBreakpoint(PatternRule):
    meta = RuleMeta("P02", "warning", _PYTHON)
    pattern = _PY_BREAKPOINT_RE
    message = "Remove debugger breakpoint"


class P03BareExcept(PatternRule):
    meta = RuleMeta("P03", "warning", _PYTHON)
    pattern = _PY_BARE_EXCEPT_RE
    message = "Bare except also catches KeyboardInterrupt and SystemExit; catch Exception instead"


def builtin_rules() -> tuple[BaseRule, ...]:
    return (
        L01LineTooLong(),
        R01RustUnwrapUsed(),
        R02RustExpectUsed(),
        R03RustUnfinishedMacro(),
        R04RustDbgMacro(),
        J01ConsoleDebugOutput(),
        J02DebuggerStatement(),
        J03EvalUsed(),
        P01PrintStatement(),
        P02DebuggerBreakpoint(),
        P03BareExcept(),
    )


_BUILTIN_RULES = builtin_rules()


def builtin_rule_ids() -> tuple[str, ...]:
    return tuple(rule.meta.rule_id for rule in _BUILTIN_RULES)


def rules_for(language: Language, *, config: RulesConfig | None = None) -> list[BaseRule]:
    disabled = set(config.disable) if config is not None else set()
    return [r for r in _BUILTIN_RULES if r.applies_to(language) and r.meta.rule_id not in disabled]


def detect_issues(
    source: SourceText,
    *,
    config: RulesConfig | None = None,
    rules: Iterable[BaseRule] | None = None,
) -> tuple[Issue, ...]:
    """
    Run the line rules for `source.language`.

    Issues come back ordered by (line, column, rule id) so output is stable
    regardless of rule order.
    """

    active: Sequence[BaseRule] = list(rules) if rules is not None else rules_for(source.language, config=config)
    found: list[tuple[int, int, str, Issue]] = []
    for rule in active:
        severity = config.severity_overrides.get(rule.meta.rule_id) if config is not None else None
        for issue in rule.check(source):
            if severity is not None:
                issue = replace(issue, severity=severity)
            found.append((issue.line or 0, issue.column or 0, rule.meta.rule_id, issue))
    found.sort(key=lambda item: item[:3])
    return tuple(item[3] for item in found)
