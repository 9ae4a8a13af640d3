"""flowlint CLI entry point."""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from pathlib import Path

import click

from flowlint import __version__
from flowlint.formatters import FORMATS

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="flowlint")
def main() -> None:
    """flowlint - lint integration-flow XML projects."""


def _config_dir(target: Path) -> Path:
    """Directory searched for a config file when ``--config`` is not given."""
    from flowlint.core.discovery import find_project_root

    if target.is_dir():
        return target
    return find_project_root(target.parent) or target.parent


@main.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path), default=".")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(list(FORMATS)),
    default=None,
    help="Output format (default: from config, else table).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the report to a file instead of stdout.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: .flowlint.yml in the project root).",
)
@click.option("--quiet", "-q", is_flag=True, help="Only report errors.")
@click.option("--fail-on-warning", is_flag=True, help="Exit 1 when warnings are found.")
@click.option(
    "--quality-gate",
    "gate_name",
    default=None,
    help="Evaluate a quality gate (Default, Strict or a gate from the config).",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr.")
def lint(
    *,
    path: Path,
    fmt: str | None,
    output: Path | None,
    config_path: Path | None,
    quiet: bool,
    fail_on_warning: bool,
    gate_name: str | None,
    verbose: bool,
) -> None:
    """Lint a project directory or a single flow file.

    Exit codes: 0 = clean or gate passed, 1 = errors or gate failed,
    2 = configuration or fatal error.
    """
    from flowlint.engine.config import ConfigError, LintConfig, find_config, load_config
    from flowlint.engine.linter import LintEngine, LintError
    from flowlint.formatters import format_report, report_exit_code
    from flowlint.quality.gate import (
        QualityGateError,
        evaluate_quality_gate,
        format_quality_gate_result,
        quality_gate_exit_code,
        resolve_quality_gate,
    )
    from flowlint.quality.metrics import aggregate_metrics
    from flowlint.report import filter_report
    from flowlint.rules import default_rules
    from flowlint.rules.base import Severity

    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=_LOG_FORMAT)

    # Configuration and gate problems are fatal before any scanning.
    try:
        if config_path is not None:
            config = load_config(config_path)
        else:
            found = find_config(_config_dir(path.resolve()))
            config = load_config(found) if found is not None else LintConfig()
        gate_selector = gate_name if gate_name is not None else config.quality_gate
        gate = (
            resolve_quality_gate(gate_selector, config.quality_gates)
            if gate_selector is not None
            else None
        )
    except (ConfigError, QualityGateError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    rules = default_rules()
    engine = LintEngine(rules, config)
    try:
        report = engine.scan(path)
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    report = dataclasses.replace(report, metrics=aggregate_metrics(report))
    shown = filter_report(report, [Severity.ERROR]) if quiet else report

    # Colour only for an interactive terminal, never for report files.
    color = output is None and sys.stdout.isatty()
    rendered = format_report(shown, fmt or config.default_format, rules, color=color)
    if output is not None:
        output.write_text(rendered, encoding="utf-8")
        click.echo(f"Report written to {output}", err=True)
    else:
        click.echo(rendered)

    fail_on_warning = fail_on_warning or config.fail_on_warning
    if gate is not None:
        result = evaluate_quality_gate(report, gate)
        click.echo(format_quality_gate_result(result), err=True)
        click.echo(result.message, err=True)
        code = quality_gate_exit_code(result.status, fail_on_warning)
    else:
        code = report_exit_code(report, fail_on_warning)

    if config.max_issues is not None and report.summary.total_issues > config.max_issues:
        click.echo(
            f"Issue count {report.summary.total_issues} exceeds max_issues={config.max_issues}",
            err=True,
        )
        code = 1
    sys.exit(code)


@main.command("rules")
@click.option("--category", default=None, help="Only rules in this category.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def list_rules(*, category: str | None, as_json: bool) -> None:
    """List the built-in rules."""
    from flowlint.rules import ALL_RULES, get_rules_by_category
    from flowlint.rules.base import RuleCategory

    if category is not None:
        try:
            selected = get_rules_by_category(category)
        except ValueError:
            known = ", ".join(c.value for c in RuleCategory)
            click.echo(f"Error: unknown category '{category}' (expected one of: {known})", err=True)
            sys.exit(2)
    else:
        selected = list(ALL_RULES)

    if as_json:
        data = [
            {
                "id": r.id,
                "name": r.name,
                "description": r.description,
                "severity": r.severity.value,
                "category": r.category.value,
                "issueType": r.issue_type.value,
                "scope": r.scope.value,
            }
            for r in selected
        ]
        click.echo(json.dumps(data, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title=f"flowlint rules ({len(selected)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Severity")
    table.add_column("Category", style="dim")
    for r in selected:
        table.add_row(r.id, r.name, r.severity.value, r.category.value)
    Console().print(table)


@main.command("gates")
def list_gates() -> None:
    """List the built-in quality gates and their conditions."""
    from flowlint.quality.gate import BUILTIN_GATES

    for gate in BUILTIN_GATES.values():
        click.echo(f"{gate.name}:")
        for cond in gate.conditions:
            click.echo(f"  {cond.describe()} -> {cond.status.value}")
