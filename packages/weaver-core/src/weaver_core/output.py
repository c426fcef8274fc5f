"""Enhancement report output formatters.

Rich table and JSON output for enhancement reports.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from weaver_core.diagnostics import Diagnostic, Severity
from weaver_core.models import EnhancementReport, RunStatus


def _status_color(status: RunStatus) -> str:
    """Get color for run status."""
    colors = {
        RunStatus.COMPLETED: "green",
        RunStatus.SKIPPED: "dim",
        RunStatus.ABORTED: "red bold",
    }
    return colors.get(status, "white")


def _severity_color(severity: Severity) -> str:
    return "red" if severity == Severity.ERROR else "yellow"


def format_report_table(report: EnhancementReport, console: Console | None = None) -> None:
    """Format an enhancement report as a Rich panel and table.

    Args:
        report: EnhancementReport to display
        console: Optional Rich console (creates one if not provided)
    """
    if console is None:
        console = Console()

    color = _status_color(report.status)
    header_text = Text()
    header_text.append("WEAVER ENHANCEMENT REPORT\n\n", style="bold")
    header_text.append("Status: ", style=color)
    header_text.append(report.status.value.upper(), style=f"bold {color}")
    header_text.append(f"\nClasses directory: {report.classes_dir}")
    if report.skip_reason:
        header_text.append(f"\nSkipped: {report.skip_reason}", style="dim")
    else:
        header_text.append(
            f"\nClasses: {len(report.scanned)} scanned, "
            f"{report.enhanced_count} enhanced, {len(report.unchanged)} unchanged"
        )
    if report.total_duration_ms > 0:
        header_text.append(f"\nDuration: {report.total_duration_ms}ms")

    console.print(Panel(header_text, title="[bold]Enhancement Results[/bold]"))

    if report.diagnostics:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Severity", width=8)
        table.add_column("Kind", width=12)
        table.add_column("Path", min_width=20)
        table.add_column("Message", min_width=30)

        for diagnostic in report.diagnostics:
            table.add_row(
                Text(diagnostic.severity.value, style=_severity_color(diagnostic.severity)),
                diagnostic.kind.value,
                str(diagnostic.path) if diagnostic.path else "-",
                Text(diagnostic.message + _cause_suffix(diagnostic)),
            )

        console.print(table)

    if report.abort is not None:
        console.print()
        console.print("[bold red]Run aborted:[/bold red]")
        console.print(f"  [red]• {report.abort.path}[/red]: {report.abort.message}")
        if report.abort.cause is not None:
            console.print(f"    cause: {report.abort.cause_text}", style="dim")


def _cause_suffix(diagnostic: Diagnostic) -> str:
    return f" ({diagnostic.cause_text})" if diagnostic.cause is not None else ""


def format_report_json(report: EnhancementReport, pretty: bool = True) -> str:
    """Format an enhancement report as JSON.

    Args:
        report: EnhancementReport to format
        pretty: Whether to use indentation

    Returns:
        JSON string representation
    """
    data = _report_to_dict(report)
    if pretty:
        return json.dumps(data, indent=2, default=str)
    return json.dumps(data, default=str)


def _report_to_dict(report: EnhancementReport) -> dict[str, Any]:
    """Convert EnhancementReport to dictionary for JSON serialization."""
    return {
        "status": report.status.value,
        "passed": report.passed,
        "state": report.final_state.value,
        "skip_reason": report.skip_reason,
        "classes_dir": str(report.classes_dir),
        "summary": {
            "scanned": len(report.scanned),
            "enhanced": report.enhanced_count,
            "unchanged": len(report.unchanged),
            "warnings": report.warning_count,
            "errors": report.error_count,
        },
        "enhanced": [str(p) for p in report.enhanced],
        "duration_ms": report.total_duration_ms,
        "started_at": report.started_at.isoformat() if report.started_at else None,
        "finished_at": report.finished_at.isoformat() if report.finished_at else None,
        "diagnostics": [_diagnostic_to_dict(d) for d in report.diagnostics],
        "abort": _diagnostic_to_dict(report.abort) if report.abort else None,
    }


def _diagnostic_to_dict(diagnostic: Diagnostic) -> dict[str, Any]:
    """Convert Diagnostic to dictionary for JSON serialization."""
    return {
        "path": str(diagnostic.path) if diagnostic.path else None,
        "severity": diagnostic.severity.value,
        "kind": diagnostic.kind.value,
        "message": diagnostic.message,
        "cause": diagnostic.cause_text,
    }


def print_report(
    report: EnhancementReport,
    output_format: str = "table",
    console: Console | None = None,
) -> None:
    """Print an enhancement report in the specified format.

    Args:
        report: EnhancementReport to display
        output_format: Output format ("table" or "json")
        console: Optional Rich console
    """
    if console is None:
        console = Console()

    if output_format == "json":
        # Raw JSON keeps the output parseable
        console.file.write(format_report_json(report, pretty=True) + "\n")
    else:
        format_report_table(report, console)
