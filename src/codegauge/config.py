from __future__ import annotations

import fnmatch
import re
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, cast

from codegauge.engine.types import Severity


class ConfigError(ValueError):
    """Raised when a codegauge configuration file is invalid."""


RuleId = str

_RULE_ID_RE = re.compile(r"^[A-Z][0-9]{2,}$")

DEFAULT_LANGUAGES: tuple[str, ...] = (
    "rust",
    "javascript",
    "typescript",
    "python",
)
_KNOWN_LANGUAGES = frozenset(DEFAULT_LANGUAGES)


def _validate_str_list(value: Any, *, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or any(not isinstance(v, str) for v in value):
        raise ConfigError(f"`{field_name}` must be a list of strings.")
    return tuple(v.strip() for v in value)


def _normalize_rule_id(value: str) -> str:
    # Rule IDs are case-insensitive in UX, but canonicalized internally.
    return value.strip().upper()


def _validate_severity(value: Any, *, field_name: str) -> Severity:
    if not isinstance(value, str):
        raise ConfigError(f"`{field_name}` must be a string.")
    normalized = value.strip().lower()
    if normalized == "warn":
        normalized = "warning"
    if normalized not in {"info", "warning", "error"}:
        raise ConfigError(f"`{field_name}` must be one of: info, warning, error.")
    return cast(Severity, normalized)


@dataclass(frozen=True, slots=True)
class RulesConfig:
    disable: tuple[RuleId, ...] = ()
    severity_overrides: Mapping[RuleId, Severity] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class IgnoreConfig:
    paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CodegaugeConfig:
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    workers: int | None = None
    rules: RulesConfig = field(default_factory=RulesConfig)
    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)


def load_config(project_dir: Path | str = ".") -> CodegaugeConfig:
    """
    Load codegauge configuration from `pyproject.toml` within `project_dir`.

    If no file / no `[tool.codegauge]` table exists, returns defaults.
    """

    project_dir_path = Path(project_dir)
    pyproject_path = project_dir_path / "pyproject.toml"
    if not pyproject_path.exists():
        return CodegaugeConfig()

    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {pyproject_path}: {exc}") from exc

    tool_table = data.get("tool", {})
    if not isinstance(tool_table, dict):
        return CodegaugeConfig()

    codegauge_table = tool_table.get("codegauge", {})
    if not isinstance(codegauge_table, dict) or not codegauge_table:
        return CodegaugeConfig()

    return _parse_codegauge_table(codegauge_table)


def _parse_codegauge_table(table: dict[str, Any]) -> CodegaugeConfig:
    languages_value = table.get("languages", list(DEFAULT_LANGUAGES))
    if not isinstance(languages_value, list) or any(not isinstance(v, str) for v in languages_value):
        raise ConfigError("`tool.codegauge.languages` must be a list of strings.")
    languages = tuple(v.strip().lower() for v in languages_value)
    unknown = [lang for lang in languages if lang not in _KNOWN_LANGUAGES]
    if unknown:
        valid = ", ".join(DEFAULT_LANGUAGES)
        raise ConfigError(f"`tool.codegauge.languages` contains unsupported language(s): {', '.join(unknown)}. ({valid})")

    workers = table.get("workers")
    if workers is not None:
        if not isinstance(workers, int) or isinstance(workers, bool):
            raise ConfigError("`tool.codegauge.workers` must be an integer.")
        if workers <= 0:
            raise ConfigError("`tool.codegauge.workers` must be > 0.")

    rules = _parse_rules_config(table.get("rules", {}))
    ignore = _parse_ignore_config(table.get("ignore", {}))

    return CodegaugeConfig(languages=languages, workers=workers, rules=rules, ignore=ignore)


def _parse_rules_config(value: Any) -> RulesConfig:
    if value is None:
        return RulesConfig()
    if not isinstance(value, dict):
        raise ConfigError("`tool.codegauge.rules` must be a table.")

    disable_raw = _validate_str_list(value.get("disable", []), field_name="tool.codegauge.rules.disable")
    disable: list[RuleId] = []
    for token in disable_raw:
        if not token:
            continue
        normalized = _normalize_rule_id(token)
        if not _RULE_ID_RE.match(normalized):
            raise ConfigError(f"`tool.codegauge.rules.disable` contains an invalid rule id: {token!r}.")
        disable.append(normalized)

    sev_overrides_raw = value.get("severity_overrides", value.get("severity-overrides"))
    severity_overrides: dict[RuleId, Severity] = {}
    if sev_overrides_raw is not None:
        if not isinstance(sev_overrides_raw, dict):
            raise ConfigError("`tool.codegauge.rules.severity_overrides` must be a table.")
        for raw_rule_id, raw_severity in sev_overrides_raw.items():
            normalized_rule_id = _normalize_rule_id(str(raw_rule_id))
            if not _RULE_ID_RE.match(normalized_rule_id):
                raise ConfigError(
                    f"`tool.codegauge.rules.severity_overrides.{raw_rule_id}` is invalid; expected a rule id like R01."
                )
            severity_overrides[normalized_rule_id] = _validate_severity(
                raw_severity,
                field_name=f"tool.codegauge.rules.severity_overrides.{raw_rule_id}",
            )

    return RulesConfig(disable=tuple(disable), severity_overrides=MappingProxyType(severity_overrides))


def _parse_ignore_config(value: Any) -> IgnoreConfig:
    if value is None:
        return IgnoreConfig()
    if not isinstance(value, dict):
        raise ConfigError("`tool.codegauge.ignore` must be a table.")
    paths = _validate_str_list(value.get("paths", []), field_name="tool.codegauge.ignore.paths")
    return IgnoreConfig(paths=paths)


def path_is_ignored(path: Path, *, project_root: Path, ignore_patterns: Iterable[str]) -> bool:
    """
    Match `path` against `[tool.codegauge.ignore] paths`.

    Each pattern is compared with the file's POSIX path relative to
    `project_root`. A trailing slash ("target/") excludes a whole directory;
    a slash-free glob ("*.d.ts") is tried against the file name as well; any
    other glob ("crates/*/generated/*.rs") must match the relative path.
    Files outside the project root are never excluded.
    """

    try:
        rel_posix = path.resolve().relative_to(project_root.resolve()).as_posix()
    except (ValueError, OSError, RuntimeError):
        return False
    filename = rel_posix.rsplit("/", 1)[-1]

    for raw in ignore_patterns:
        pattern = raw.strip().replace("\\", "/").removeprefix("./")
        if not pattern:
            continue
        if pattern.endswith("/"):
            matched = rel_posix.startswith(pattern)
        elif "/" in pattern:
            matched = fnmatch.fnmatch(rel_posix, pattern)
        else:
            matched = fnmatch.fnmatch(filename, pattern) or fnmatch.fnmatch(rel_posix, pattern)
        if matched:
            return True
    return False
