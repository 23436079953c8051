"""
Rendering of edit previews and analysis results.

Nothing here computes; every function takes finished values from
editwise.editor or editwise.analyzer and prints them to a rich Console.

editwise/src/editwise/reporting.py
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from editwise.analyzer import AnalysisReport, AnalysisSummary, AutoFixOutcome
from editwise.console_utils import console as default_console
from editwise.editor import EditOutcome, EditPlan, EditStatus
from editwise.models import AnalysisResult, EditSuggestion, IssueSeverity

__all__ = [
    "format_numbered_lines",
    "render_edit_plan",
    "render_edit_outcome",
    "render_analysis_result",
    "render_summary",
    "render_analysis_report",
    "render_auto_fix",
    "results_to_json",
]

_SEVERITY_STYLES = {
    IssueSeverity.ERROR: "red",
    IssueSeverity.WARNING: "yellow",
    IssueSeverity.INFO: "blue",
}


def format_numbered_lines(lines: List[str], start_line: int) -> List[str]:
    """Prefix each line with its 1-based line number, right-aligned to width 4."""
    return [f"{start_line + idx:>4}: {line}" for idx, line in enumerate(lines)]


def _render_suggestion(out: Console, index: int, suggestion: EditSuggestion) -> None:
    out.print(
        f"\n[bold]--- Change {index} (Lines {suggestion.start_line}-{suggestion.end_line}) ---[/bold]"
    )
    out.print(f"Confidence: {suggestion.confidence}%")
    out.print(f"Reasoning: {escape(suggestion.reasoning)}\n")

    out.print("[red]Current:[/red]")
    for line in format_numbered_lines(suggestion.original_lines, suggestion.start_line):
        out.print(escape(line), highlight=False, emoji=False)

    out.print("\n[green]Suggested:[/green]")
    for line in format_numbered_lines(suggestion.suggested_lines, suggestion.start_line):
        out.print(escape(line), highlight=False, emoji=False)


def render_edit_plan(plan: EditPlan, out: Optional[Console] = None) -> None:
    """Print the analysis header, risks, dependencies and each change."""
    out = out or default_console
    analysis = plan.analysis

    for skipped in plan.skipped_context:
        out.print(f"[yellow]Skipped context file: {escape(str(skipped))}[/yellow]")

    if plan.degraded:
        out.print(f"[yellow]Analysis degraded: {escape(plan.error or 'unknown error')}[/yellow]")

    out.print("\n[bold]Analysis Results:[/bold]")
    out.print(f"Language: {analysis.language}")
    out.print(f"Complexity: {analysis.complexity}/10")

    if analysis.risks:
        out.print("\n[yellow]Potential Risks:[/yellow]")
        for risk in analysis.risks:
            out.print(f"  - {escape(risk)}")

    if analysis.dependencies:
        out.print("\n[cyan]Dependencies Affected:[/cyan]")
        for dependency in analysis.dependencies:
            out.print(f"  - {escape(dependency)}")

    if not analysis.suggestions:
        return

    out.print("\n[bold]Suggested Changes:[/bold]")
    for i, suggestion in enumerate(analysis.suggestions, start=1):
        _render_suggestion(out, i, suggestion)

    if plan.apply_result.skipped:
        out.print(
            f"\n[yellow]{len(plan.apply_result.skipped)} change(s) fall outside the file "
            "and will be skipped.[/yellow]"
        )


def render_edit_outcome(outcome: EditOutcome, out: Optional[Console] = None) -> None:
    out = out or default_console
    status = outcome.status
    if status is EditStatus.NO_SUGGESTIONS:
        out.print("No changes suggested for this file.")
    elif status is EditStatus.DRY_RUN:
        out.print("\n[cyan]Dry run mode - no changes applied.[/cyan]")
    elif status is EditStatus.CANCELLED:
        out.print("\n[yellow]Changes cancelled by user.[/yellow]")
    else:
        if outcome.backup_path is not None:
            out.print(f"Created backup: {outcome.backup_path}")
        out.print("\n[green]Changes applied successfully![/green]")
        out.print(
            f"Modified {len(outcome.plan.apply_result.applied)} section(s) in "
            f"{outcome.plan.file_path}"
        )


def render_analysis_result(result: AnalysisResult, out: Optional[Console] = None) -> None:
    out = out or default_console
    metrics = result.metrics
    out.print(f"[bold]{escape(Path(result.file).name)}[/bold]")
    out.print(f"   Complexity: {metrics.complexity}/10")
    out.print(f"   Performance: {metrics.performance.value}")
    out.print(f"   Security: {metrics.security.value}")
    out.print(f"   Maintainability: {metrics.maintainability_index}/100")

    if result.issues:
        out.print(f"   Issues ({len(result.issues)}):")
        for issue in result.issues:
            style = _SEVERITY_STYLES.get(issue.severity, "")
            out.print(
                f"     [{style}]{issue.severity.value}[/{style}] "
                f"Line {issue.line}: {escape(issue.message)}"
            )

    if result.suggestions:
        out.print(f"   Suggestions ({len(result.suggestions)}):")
        for suggestion in result.suggestions:
            out.print(
                f"     {suggestion.type.value} Line {suggestion.line}: "
                f"{escape(suggestion.description)}"
            )
    out.print("")


def render_summary(summary: AnalysisSummary, out: Optional[Console] = None) -> None:
    out = out or default_console
    table = Table(title="Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Files analyzed", str(summary.files_analyzed))
    table.add_row("Issues found", str(summary.total_issues))
    table.add_row("Suggestions", str(summary.total_suggestions))
    table.add_row("Average complexity", f"{summary.average_complexity:.1f}/10")
    table.add_row("Average maintainability", f"{summary.average_maintainability:.1f}/100")
    out.print(table)


def render_analysis_report(report: AnalysisReport, out: Optional[Console] = None) -> None:
    out = out or default_console
    out.print("\n[bold]Code Analysis Results[/bold]\n")
    for result in report.results:
        render_analysis_result(result, out)

    failures = report.failures
    if failures:
        out.print(f"[red]{len(failures)} file(s) could not be analyzed:[/red]")
        for file_path, error in failures.items():
            out.print(f"  - {escape(file_path)}: {escape(error)}")

    render_summary(report.summary, out)


def render_auto_fix(outcome: AutoFixOutcome, out: Optional[Console] = None) -> None:
    out = out or default_console
    if not outcome.confirmed:
        return
    out.print("\n[bold]Applying automatic fixes...[/bold]")
    for file_path, issues in outcome.fixed.items():
        out.print(f"  Fixing {len(issues)} issues in {escape(Path(file_path).name)}")
        for issue in issues:
            out.print(f"    [green]Fixed:[/green] {escape(issue.message)}")
    out.print("\n[green]Auto-fixes applied successfully![/green]")


def results_to_json(report: AnalysisReport) -> str:
    """Serialize results and summary using the wire field names."""
    summary = report.summary
    payload: Dict[str, Any] = {
        "target": str(report.target),
        "results": [r.model_dump(mode="json", by_alias=True) for r in report.results],
        "failures": report.failures,
        "summary": {
            "filesAnalyzed": summary.files_analyzed,
            "totalIssues": summary.total_issues,
            "totalSuggestions": summary.total_suggestions,
            "averageComplexity": summary.average_complexity,
            "averageMaintainability": summary.average_maintainability,
        },
    }
    return json.dumps(payload, indent=2)
