from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from codegauge.config import CodegaugeConfig, RulesConfig, load_config, path_is_ignored
from codegauge.engine.analyzer import analyze
from codegauge.engine.errors import AnalysisError
from codegauge.engine.types import AnalysisResult
from codegauge.languages.registry import allowed_extensions, is_supported_path

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    ".venv",
    "venv",
    "node_modules",
    "target",
    "dist",
    "build",
    "__pycache__",
}

CODEGAUGE_WORKERS_ENV = "CODEGAUGE_WORKERS"
DEFAULT_MAX_WORKERS = 32


@dataclass(frozen=True, slots=True)
class ScanTarget:
    project_root: Path
    config: CodegaugeConfig


@dataclass(frozen=True, slots=True)
class FileOutcome:
    path: Path
    result: AnalysisResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def relative_display_path(path: Path, root: Path) -> str:
    """POSIX path relative to `root`, or the path itself when it lies outside."""

    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except (ValueError, OSError):
        return path.as_posix()


def resolve_worker_count(
    raw_value: str | None,
    *,
    default: int | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> int:
    """
    Turn a `CODEGAUGE_WORKERS` value into a pool size in [1, max_workers].

    Blank, "auto", non-numeric and non-positive values mean `default`, which
    itself falls back to the CPU count.
    """

    fallback = max(1, default if default is not None else (os.cpu_count() or 1))
    text = (raw_value or "").strip().lower()
    try:
        requested = int(text) if text not in {"", "auto", "default"} else fallback
    except ValueError:
        requested = fallback
    return min(requested if requested > 0 else fallback, max_workers)


def worker_count_from_env(*, default: int | None = None) -> int:
    return resolve_worker_count(os.environ.get(CODEGAUGE_WORKERS_ENV), default=default)


def prepare_target(start: Path) -> ScanTarget:
    start = start.resolve()
    project_root = _detect_project_root(start)
    return ScanTarget(project_root=project_root, config=load_config(project_root))


def discover_files(target: ScanTarget, scan_path: Path) -> list[Path]:
    """
    Collect analyzable files under `scan_path`.

    A file passed directly is returned as-is (language support is checked by
    `analyze`); directories are walked, skipping VCS/build directories,
    unsupported extensions, disabled languages and ignored paths.
    """

    scan_path = scan_path.resolve()
    if scan_path.is_file():
        return [scan_path]

    root = target.project_root
    ignore_patterns = target.config.ignore.paths
    allowed_exts = allowed_extensions(target.config.languages)

    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(scan_path, topdown=True):
        dirnames[:] = [d for d in dirnames if d not in DEFAULT_SKIP_DIRS]
        base = Path(dirpath)

        for filename in filenames:
            path = base / filename
            if path.suffix.lower() not in allowed_exts or not is_supported_path(path):
                logger.debug("skipping unsupported file %s", path)
                continue
            if path_is_ignored(path, project_root=root, ignore_patterns=ignore_patterns):
                continue
            files.append(path)

    return sorted(set(files))


def analyze_file(
    path: Path,
    *,
    language: str | None = None,
    rules: RulesConfig | None = None,
    display_path: str | None = None,
) -> AnalysisResult:
    """Read `path` and analyze it. OSError from the read propagates unchanged."""

    text = path.read_text(encoding="utf-8", errors="replace")
    return analyze(text, language, file_path=display_path or str(path), rules=rules)


def analyze_paths(
    paths: Sequence[Path],
    *,
    project_root: Path,
    language: str | None = None,
    rules: RulesConfig | None = None,
    workers: int = 1,
) -> list[FileOutcome]:
    """
    Analyze many files, optionally in parallel.

    Ordering is deterministic: outcomes follow the input `paths` order. A
    failure on one file is recorded on its outcome and does not stop the run.
    """

    run_one = partial(_analyze_one, project_root=project_root, language=language, rules=rules)

    outcomes: list[FileOutcome] = []
    if workers <= 1 or len(paths) <= 1:
        for path in paths:
            outcomes.append(run_one(path))
        return outcomes

    max_workers = min(max(1, workers), len(paths))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        outcomes.extend(executor.map(run_one, paths))
    return outcomes


def _analyze_one(
    path: Path,
    *,
    project_root: Path,
    language: str | None,
    rules: RulesConfig | None,
) -> FileOutcome:
    try:
        result = analyze_file(
            path,
            language=language,
            rules=rules,
            display_path=relative_display_path(path, project_root),
        )
    except (AnalysisError, OSError) as exc:
        logger.warning("skipping %s: %s", path, exc)
        return FileOutcome(path=path, error=str(exc))
    return FileOutcome(path=path, result=result)


def _detect_project_root(start: Path) -> Path:
    # Prefer the closest directory containing a pyproject.toml so per-project
    # configuration is found in monorepos.
    base = start if start.is_dir() else start.parent
    for candidate in [base, *base.parents]:
        if (candidate / "pyproject.toml").exists():
            return candidate
    return base
