"""Technical-metric aggregation: classify issues and attach rating blocks."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowlint.quality.ratings import (
    complexity_rating,
    debt_minutes,
    debt_ratio,
    development_minutes,
    format_tech_debt,
    maintainability_rating,
    reliability_rating,
    security_rating,
)
from flowlint.report import (
    ComplexityMetrics,
    MaintainabilityMetrics,
    ReliabilityMetrics,
    SecurityMetrics,
)

if TYPE_CHECKING:
    from flowlint.report import LintReport, ProjectMetrics


class IssueClass(str, enum.Enum):
    BUG = "bug"
    VULNERABILITY = "vulnerability"
    SECURITY_HOTSPOT = "security-hotspot"
    CODE_SMELL = "code-smell"


# Rule-ID prefixes per class.  An entry matches IDs equal to it or starting
# with it; entries ending in "-" cover a whole rule family.
VULNERABILITY_PATTERNS: tuple[str, ...] = ("MULE-201", "MULE-202", "SEC-002", "SEC-006", "YAML-004")
HOTSPOT_PATTERNS: tuple[str, ...] = ("MULE-004", "SEC-")
BUG_PATTERNS: tuple[str, ...] = (
    "MULE-003",
    "MULE-009",
    "PROJ-001",
    "DW-004",
    "PARSE-ERROR",
)

# Checked in this order; first match wins.
_CLASSIFICATION_ORDER: tuple[tuple[IssueClass, tuple[str, ...]], ...] = (
    (IssueClass.VULNERABILITY, VULNERABILITY_PATTERNS),
    (IssueClass.SECURITY_HOTSPOT, HOTSPOT_PATTERNS),
    (IssueClass.BUG, BUG_PATTERNS),
)


def classify_issue(rule_id: str) -> IssueClass:
    """Bucket a rule ID: vulnerability, then hotspot, then bug, else code smell."""
    for issue_class, patterns in _CLASSIFICATION_ORDER:
        if any(rule_id.startswith(pattern) for pattern in patterns):
            return issue_class
    return IssueClass.CODE_SMELL


@dataclass(frozen=True)
class IssueCounts:
    bugs: int = 0
    vulnerabilities: int = 0
    hotspots: int = 0
    code_smells: int = 0


def count_issue_classes(report: LintReport) -> IssueCounts:
    tally = {issue_class: 0 for issue_class in IssueClass}
    for _result, issue in report.all_issues():
        tally[classify_issue(issue.rule_id)] += 1
    return IssueCounts(
        bugs=tally[IssueClass.BUG],
        vulnerabilities=tally[IssueClass.VULNERABILITY],
        hotspots=tally[IssueClass.SECURITY_HOTSPOT],
        code_smells=tally[IssueClass.CODE_SMELL],
    )


def _complexity_block(metrics: ProjectMetrics) -> ComplexityMetrics:
    samples = metrics.flow_complexity_data
    total = sum(s.complexity for s in samples)
    average = total / len(samples) if samples else 0.0
    highest = max(samples, key=lambda s: s.complexity) if samples else None
    return ComplexityMetrics(
        total=total,
        average=round(average, 1),
        rating=complexity_rating(average),
        highest_flow=highest.flow_name if highest else None,
        highest_value=highest.complexity if highest else None,
    )


def aggregate_metrics(report: LintReport) -> ProjectMetrics | None:
    """Return a copy of the report's metrics with all four rating blocks.

    ``None`` when the report carries no raw metrics.  The report is not
    modified.
    """
    if report.metrics is None:
        return None

    enriched = report.metrics.copy()
    counts = count_issue_classes(report)

    debt = debt_minutes(counts.code_smells, counts.bugs, counts.vulnerabilities)
    ratio = debt_ratio(debt, development_minutes(enriched.flow_count, enriched.sub_flow_count))

    enriched.complexity = _complexity_block(enriched)
    enriched.maintainability = MaintainabilityMetrics(
        technical_debt_minutes=debt,
        technical_debt=format_tech_debt(debt),
        debt_ratio=round(ratio, 1),
        rating=maintainability_rating(ratio),
    )
    enriched.reliability = ReliabilityMetrics(bugs=counts.bugs, rating=reliability_rating(counts.bugs))
    enriched.security = SecurityMetrics(
        vulnerabilities=counts.vulnerabilities,
        hotspots=counts.hotspots,
        rating=security_rating(counts.vulnerabilities),
    )
    return enriched
