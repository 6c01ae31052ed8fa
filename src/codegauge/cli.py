from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated

import click
import typer
from rich.console import Console

from codegauge import __version__
from codegauge.config import ConfigError
from codegauge.engine.errors import UnsupportedLanguage
from codegauge.engine.types import AnalysisResult
from codegauge.languages.registry import LANGUAGES, parse_language, supported_languages
from codegauge.logging_utils import configure_logging
from codegauge.reporters.json_reporter import parse_json_report, render_json
from codegauge.reporters.terminal import render_terminal
from codegauge.scanner import (
    analyze_paths,
    discover_files,
    prepare_target,
    relative_display_path,
    worker_count_from_env,
)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="codegauge: structural metrics, complexity and lint hints for Rust, JavaScript, TypeScript and Python.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

_FORMATS = ("terminal", "json")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only print the summary table."),
    ] = False,
) -> None:
    """codegauge CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet}


def _cli_settings() -> dict[str, bool]:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.obj, dict):
        return {"verbose": False, "quiet": False}
    return {"verbose": bool(ctx.obj.get("verbose", False)), "quiet": bool(ctx.obj.get("quiet", False))}


def _normalize_format(fmt: str) -> str:
    normalized = fmt.strip().lower()
    if normalized not in _FORMATS:
        raise typer.BadParameter(f"Unsupported format. Use: {', '.join(_FORMATS)}.")
    return normalized


def _emit_output(fmt: str, *, results: list[AnalysisResult], errors: Mapping[str, str]) -> None:
    if fmt == "json":
        typer.echo(render_json(results, errors=dict(errors)))
        return
    render_terminal(results, console=console, errors=errors, show_details=not _cli_settings()["quiet"])


@app.command()
def analyze(
    paths: Annotated[
        list[Path],
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=True,
            resolve_path=True,
            help="Source files or directories to analyze.",
        ),
    ],
    language: Annotated[
        str | None,
        typer.Option("--language", "-l", help="Force a language instead of detecting it from the file extension."),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
    workers: Annotated[
        int | None,
        typer.Option("--workers", min=1, help="Parallel workers (default: $CODEGAUGE_WORKERS, then config, then CPU count)."),
    ] = None,
) -> None:
    """
    Analyze source files: counts, cyclomatic complexity, maintainability, dependencies and issues.
    """

    fmt = _normalize_format(output_format)

    if language is not None:
        try:
            if parse_language(language) not in supported_languages():
                raise UnsupportedLanguage(language)
        except UnsupportedLanguage as exc:
            err_console.print(str(exc))
            raise typer.Exit(code=2) from exc

    try:
        target = prepare_target(paths[0])
    except ConfigError as exc:
        err_console.print(f"Invalid configuration: {exc}")
        raise typer.Exit(code=2) from exc

    explicit_files = {p for p in paths if p.is_file()}
    files: list[Path] = []
    for path in paths:
        for found in discover_files(target, path):
            if found not in files:
                files.append(found)
    logger.debug("analyzing %d file(s) under %s", len(files), target.project_root)

    worker_count = workers or worker_count_from_env(default=target.config.workers)
    outcomes = analyze_paths(
        files,
        project_root=target.project_root,
        language=language,
        rules=target.config.rules,
        workers=worker_count,
    )

    results = [o.result for o in outcomes if o.result is not None]
    errors = {
        relative_display_path(o.path, target.project_root): o.error for o in outcomes if o.error is not None
    }
    _emit_output(fmt, results=results, errors=errors)

    if any(o.path in explicit_files and not o.ok for o in outcomes):
        raise typer.Exit(code=2)


@app.command()
def languages(
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    List supported languages with their file extensions and comment markers.
    """

    from rich.table import Table

    fmt = _normalize_format(output_format)
    rows = [
        {
            "language": spec.name,
            "extensions": list(spec.extensions),
            "grammar": spec.grammar,
            "comment_markers": list(spec.comment_markers),
        }
        for spec in LANGUAGES
    ]

    if fmt == "json":
        typer.echo(json.dumps(rows, indent=2, sort_keys=True))
        return

    table = Table(title="codegauge languages")
    table.add_column("Language", style="bold")
    table.add_column("Extensions")
    table.add_column("Grammar")
    table.add_column("Comments")
    for row in rows:
        table.add_row(
            str(row["language"]),
            ", ".join(row["extensions"]),
            str(row["grammar"]),
            " ".join(row["comment_markers"]),
        )
    console.print(table)


@app.command()
def report(
    input_json: Annotated[
        str,
        typer.Argument(help="Input JSON report path, or '-' to read from stdin."),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    Render a previously saved JSON report in another format.
    """

    fmt = _normalize_format(output_format)
    try:
        if input_json.strip() == "-":
            raw = sys.stdin.read()
        else:
            raw = Path(input_json).read_text(encoding="utf-8", errors="replace")
        results = parse_json_report(raw)
    except (OSError, ValueError) as exc:
        err_console.print(f"Invalid JSON report: {exc}")
        raise typer.Exit(code=2) from exc

    _emit_output(fmt, results=results, errors={})
