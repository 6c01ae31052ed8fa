from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from codegauge import __version__
from codegauge.engine.types import AnalysisResult, Issue

_SEVERITY_ICON = {"error": "✖", "warning": "⚠", "info": "ℹ"}
_SEVERITY_STYLE = {"error": "bold red", "warning": "yellow", "info": "dim"}


def render_terminal(
    results: Iterable[AnalysisResult],
    *,
    console: Console,
    errors: Mapping[str, str] | None = None,
    show_details: bool = True,
) -> None:
    results = list(results)
    header = Text()
    header.append("codegauge ", style="bold")
    header.append(f"v{__version__}", style="dim")

    console.print(Panel(header, subtitle=f"Analyzed {len(results)} file(s)", border_style="cyan"))

    if results:
        console.print(_summary_table(results))

    if show_details:
        for result in results:
            _print_file_details(console, result)

    for path, message in sorted((errors or {}).items()):
        console.print(Text(f"✖ {path}: {message}", style="bold red"))


def _summary_table(results: list[AnalysisResult]) -> Table:
    table = Table(title="Summary")
    table.add_column("File", style="bold")
    table.add_column("Language")
    table.add_column("Lines", justify="right")
    table.add_column("Functions", justify="right")
    table.add_column("Types", justify="right")
    table.add_column("Complexity", justify="right")
    table.add_column("Comments", justify="right")
    table.add_column("MI", justify="right")
    table.add_column("Issues", justify="right")
    for r in results:
        table.add_row(
            r.file_path or "<content>",
            r.language,
            str(r.line_count),
            str(r.function_count),
            str(r.struct_count),
            str(r.metrics.cyclomatic_complexity),
            f"{r.metrics.comment_ratio:.0%}",
            f"{r.metrics.maintainability_index:.1f}",
            str(len(r.issues)),
        )
    return table


def _print_file_details(console: Console, result: AnalysisResult) -> None:
    if not result.issues and not result.dependencies:
        return
    console.print(Text(result.file_path or "<content>", style="bold"))
    if result.dependencies:
        console.print(Text(f"  dependencies: {', '.join(result.dependencies)}", style="dim"))
    for issue in result.issues:
        _print_issue(console, issue)
    console.print()


def _print_issue(console: Console, issue: Issue) -> None:
    icon = _SEVERITY_ICON.get(issue.severity, "•")
    style = _SEVERITY_STYLE.get(issue.severity, "")

    loc = ""
    if issue.line is not None:
        loc = f"{issue.line}"
        if issue.column is not None:
            loc += f":{issue.column}"

    line = Text()
    line.append(f"  {icon} ", style=style)
    line.append(issue.severity, style=style)
    if loc:
        line.append(f"  ({loc})", style="dim")
    line.append(f"  {issue.message}")
    console.print(line)
