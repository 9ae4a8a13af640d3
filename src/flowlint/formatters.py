"""Report formatters: Rich table, JSON, SARIF 2.1.0 and CSV."""

from __future__ import annotations

import csv
import io
import json
from typing import TYPE_CHECKING

from flowlint import __version__
from flowlint.rules.base import Severity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from flowlint.report import LintReport
    from flowlint.rules.base import Rule

FORMATS: tuple[str, ...] = ("table", "json", "sarif", "csv")

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"

_SARIF_LEVELS: dict[Severity, str] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}


# ---------------------------------------------------------------------------
# Table (Rich)
# ---------------------------------------------------------------------------


def format_table(report: LintReport, *, color: bool = True, width: int = 120) -> str:
    """Render *report* as a Rich table per file followed by a severity summary."""
    from rich.console import Console
    from rich.table import Table
    from rich.text import Text

    buf = io.StringIO()
    console = Console(file=buf, force_terminal=color, no_color=not color, width=width)

    console.print()
    console.print(Text("flowlint report", style="bold"))
    console.print(
        Text(f"Scanned {report.summary.total_files} files in {report.duration_ms}ms", style="dim")
    )
    console.print()

    noisy = [result for result in report.files if result.issues]
    if not noisy:
        console.print(Text("✓ No issues found!", style="green"))
        return buf.getvalue()

    for result in noisy:
        console.print(Text(result.relative_path, style="bold underline"))
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Location", style="dim", no_wrap=True)
        table.add_column("Severity", no_wrap=True)
        table.add_column("Message")
        table.add_column("Rule", style="dim", no_wrap=True)
        for issue in result.issues:
            table.add_row(
                Text(f"{issue.line}:{issue.column or 0}"),
                Text(issue.severity.value, style=_SEVERITY_STYLES[issue.severity]),
                Text(issue.message),
                Text(f"({issue.rule_id})"),
            )
        console.print(table)
        console.print()

    console.print(Text("Summary:", style="bold"))
    for severity in Severity:
        label = f"{severity.value.capitalize()}s:"
        line = Text(f"  {label:<10} ")
        line.append(str(report.summary.by_severity.get(severity, 0)), style=_SEVERITY_STYLES[severity])
        console.print(line)
    console.print()
    return buf.getvalue()


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def format_json(report: LintReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


# ---------------------------------------------------------------------------
# SARIF
# ---------------------------------------------------------------------------


def _sarif_rule(rule: Rule) -> dict[str, object]:
    return {
        "id": rule.id,
        "name": rule.name,
        "shortDescription": {"text": rule.name},
        "fullDescription": {"text": rule.description},
        "defaultConfiguration": {"level": _SARIF_LEVELS[rule.severity]},
        "properties": {"category": rule.category.value, "issueType": rule.issue_type.value},
    }


def format_sarif(report: LintReport, rules: Sequence[Rule] = ()) -> str:
    """SARIF 2.1.0 log with one run; suggestions become fix descriptions."""
    results: list[dict[str, object]] = []
    for file_result, issue in report.all_issues():
        region: dict[str, object] = {"startLine": issue.line}
        if issue.column is not None:
            region["startColumn"] = issue.column
        entry: dict[str, object] = {
            "ruleId": issue.rule_id,
            "level": _SARIF_LEVELS[issue.severity],
            "message": {"text": issue.message},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": file_result.relative_path, "uriBaseId": "%SRCROOT%"},
                        "region": region,
                    }
                }
            ],
        }
        if issue.suggestion:
            entry["fixes"] = [{"description": {"text": issue.suggestion}}]
        results.append(entry)

    log = {
        "$schema": SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "flowlint",
                        "version": __version__,
                        "rules": [_sarif_rule(rule) for rule in rules],
                    }
                },
                "results": results,
                "invocations": [
                    {
                        "executionSuccessful": report.summary.parse_errors == 0,
                        "startTimeUtc": report.timestamp,
                    }
                ],
            }
        ],
    }
    return json.dumps(log, indent=2)


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

CSV_HEADER: tuple[str, ...] = ("Severity", "Rule", "File", "Line", "Column", "Message")


def format_csv(report: LintReport) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for file_result, issue in report.all_issues():
        writer.writerow(
            (
                issue.severity.value,
                issue.rule_id,
                file_result.relative_path,
                issue.line,
                issue.column or 0,
                issue.message,
            )
        )
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def format_report(
    report: LintReport,
    fmt: str,
    rules: Sequence[Rule] = (),
    *,
    color: bool = True,
) -> str:
    """Render *report* in *fmt*; *color* only affects the table format."""
    if fmt == "table":
        return format_table(report, color=color)
    if fmt == "json":
        return format_json(report)
    if fmt == "sarif":
        return format_sarif(report, rules)
    if fmt == "csv":
        return format_csv(report)
    msg = f"Unknown format '{fmt}', expected one of {list(FORMATS)}"
    raise ValueError(msg)


def report_exit_code(report: LintReport, fail_on_warning: bool = False) -> int:
    """1 when the report has errors (or warnings with *fail_on_warning*), else 0."""
    if report.summary.errors > 0:
        return 1
    if fail_on_warning and report.summary.warnings > 0:
        return 1
    return 0
