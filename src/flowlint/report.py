"""Report model: per-file results, summary, project metrics and rating blocks.

``to_dict()`` on each type produces the camelCase JSON shape consumed by the
formatters and external tools.  Optional fields are omitted when absent.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from flowlint.rules.base import Severity

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flowlint.rules.base import Issue

PROJECT_STRUCTURE_PATH = "Project Structure"


# ---------------------------------------------------------------------------
# Metric samples
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FlowComplexitySample:
    flow_name: str
    file: str
    complexity: int
    rating: str
    breakdown: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "flowName": self.flow_name,
            "file": self.file,
            "complexity": self.complexity,
            "rating": self.rating,
            "breakdown": dict(self.breakdown),
        }


@dataclass(frozen=True)
class ApiEndpoint:
    path: str
    method: str

    def to_dict(self) -> dict[str, object]:
        return {"path": self.path, "method": self.method}


@dataclass(frozen=True)
class ExternalService:
    name: str
    host: str

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "host": self.host}


@dataclass(frozen=True)
class Scheduler:
    type: str  # "cron" | "fixed"
    value: str
    flow: str

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, "value": self.value, "flow": self.flow}


# ---------------------------------------------------------------------------
# Rating blocks (filled in by the aggregator)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComplexityMetrics:
    total: int
    average: float
    rating: str
    highest_flow: str | None = None
    highest_value: int | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"total": self.total, "average": self.average}
        if self.highest_flow is not None:
            data["highest"] = {"flow": self.highest_flow, "value": self.highest_value}
        data["rating"] = self.rating
        return data


@dataclass(frozen=True)
class MaintainabilityMetrics:
    technical_debt_minutes: int
    technical_debt: str
    debt_ratio: float
    rating: str

    def to_dict(self) -> dict[str, object]:
        return {
            "technicalDebtMinutes": self.technical_debt_minutes,
            "technicalDebt": self.technical_debt,
            "debtRatio": self.debt_ratio,
            "rating": self.rating,
        }


@dataclass(frozen=True)
class ReliabilityMetrics:
    bugs: int
    rating: str

    def to_dict(self) -> dict[str, object]:
        return {"bugs": self.bugs, "rating": self.rating}


@dataclass(frozen=True)
class SecurityMetrics:
    vulnerabilities: int
    hotspots: int
    rating: str

    def to_dict(self) -> dict[str, object]:
        return {
            "vulnerabilities": self.vulnerabilities,
            "hotspots": self.hotspots,
            "rating": self.rating,
        }


# ---------------------------------------------------------------------------
# Project metrics
# ---------------------------------------------------------------------------


def _append_unique(target: list, items: Iterable) -> None:  # type: ignore[type-arg]
    for item in items:
        if item not in target:
            target.append(item)


@dataclass
class ProjectMetrics:
    """Raw structural counts, accumulated additively while a scan runs.

    The four rating blocks stay ``None`` until :func:`flowlint.quality.aggregate_metrics`
    returns an enriched copy.
    """

    flow_count: int = 0
    sub_flow_count: int = 0
    dw_transform_count: int = 0
    connector_config_count: int = 0
    http_listener_count: int = 0
    error_handler_count: int = 0
    choice_router_count: int = 0
    connector_types: list[str] = field(default_factory=list)
    api_endpoints: list[ApiEndpoint] = field(default_factory=list)
    environments: list[str] = field(default_factory=list)
    security_patterns: list[str] = field(default_factory=list)
    external_services: list[ExternalService] = field(default_factory=list)
    schedulers: list[Scheduler] = field(default_factory=list)
    file_complexity: dict[str, str] = field(default_factory=dict)
    flow_complexity_data: list[FlowComplexitySample] = field(default_factory=list)
    complexity: ComplexityMetrics | None = None
    maintainability: MaintainabilityMetrics | None = None
    reliability: ReliabilityMetrics | None = None
    security: SecurityMetrics | None = None

    def merge(self, other: ProjectMetrics) -> None:
        """Fold *other*'s raw counts into this accumulator.

        Sums and per-file map entries commute, so per-file partial metrics can
        be reduced in any order.  Rating blocks are not merged.
        """
        self.flow_count += other.flow_count
        self.sub_flow_count += other.sub_flow_count
        self.dw_transform_count += other.dw_transform_count
        self.connector_config_count += other.connector_config_count
        self.http_listener_count += other.http_listener_count
        self.error_handler_count += other.error_handler_count
        self.choice_router_count += other.choice_router_count
        _append_unique(self.connector_types, other.connector_types)
        _append_unique(self.environments, other.environments)
        _append_unique(self.security_patterns, other.security_patterns)
        for endpoint in other.api_endpoints:
            self.add_endpoint(endpoint)
        for service in other.external_services:
            self.add_external_service(service)
        self.schedulers.extend(other.schedulers)
        self.file_complexity.update(other.file_complexity)
        self.flow_complexity_data.extend(other.flow_complexity_data)

    def add_endpoint(self, endpoint: ApiEndpoint) -> None:
        """Add *endpoint* unless one with the same path (and method) exists.

        Listener endpoints (method ``ALL``) are deduplicated on path alone.
        """
        for existing in self.api_endpoints:
            if existing.path != endpoint.path:
                continue
            if endpoint.method == "ALL" or existing.method == endpoint.method:
                return
        self.api_endpoints.append(endpoint)

    def add_external_service(self, service: ExternalService) -> None:
        if all(existing.name != service.name for existing in self.external_services):
            self.external_services.append(service)

    def copy(self) -> ProjectMetrics:
        """Deep-enough copy: containers are duplicated, items are immutable."""
        return dataclasses.replace(
            self,
            connector_types=list(self.connector_types),
            api_endpoints=list(self.api_endpoints),
            environments=list(self.environments),
            security_patterns=list(self.security_patterns),
            external_services=list(self.external_services),
            schedulers=list(self.schedulers),
            file_complexity=dict(self.file_complexity),
            flow_complexity_data=list(self.flow_complexity_data),
        )

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "flowCount": self.flow_count,
            "subFlowCount": self.sub_flow_count,
            "dwTransformCount": self.dw_transform_count,
            "connectorConfigCount": self.connector_config_count,
            "httpListenerCount": self.http_listener_count,
            "errorHandlerCount": self.error_handler_count,
            "choiceRouterCount": self.choice_router_count,
            "connectorTypes": list(self.connector_types),
            "apiEndpoints": [e.to_dict() for e in self.api_endpoints],
            "environments": list(self.environments),
            "securityPatterns": list(self.security_patterns),
            "externalServices": [s.to_dict() for s in self.external_services],
            "schedulers": [s.to_dict() for s in self.schedulers],
            "fileComplexity": dict(self.file_complexity),
            "flowComplexityData": [s.to_dict() for s in self.flow_complexity_data],
        }
        if self.complexity is not None:
            data["complexity"] = self.complexity.to_dict()
        if self.maintainability is not None:
            data["maintainability"] = self.maintainability.to_dict()
        if self.reliability is not None:
            data["reliability"] = self.reliability.to_dict()
        if self.security is not None:
            data["security"] = self.security.to_dict()
        return data


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileResult:
    """Lint outcome for one file (or the virtual project-structure entry)."""

    file_path: str
    relative_path: str
    issues: tuple[Issue, ...] = ()
    parsed: bool = True
    parse_error: str | None = None
    rule_errors: tuple[str, ...] = ()  # IDs of rules that raised on this file

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "filePath": self.file_path,
            "relativePath": self.relative_path,
            "issues": [issue.to_dict() for issue in self.issues],
            "parsed": self.parsed,
        }
        if self.parse_error is not None:
            data["parseError"] = self.parse_error
        if self.rule_errors:
            data["ruleErrors"] = list(self.rule_errors)
        return data


@dataclass(frozen=True)
class LintSummary:
    total_files: int
    files_with_issues: int
    parse_errors: int
    by_severity: dict[Severity, int]
    by_rule: dict[str, int]

    @property
    def errors(self) -> int:
        return self.by_severity.get(Severity.ERROR, 0)

    @property
    def warnings(self) -> int:
        return self.by_severity.get(Severity.WARNING, 0)

    @property
    def infos(self) -> int:
        return self.by_severity.get(Severity.INFO, 0)

    @property
    def total_issues(self) -> int:
        return sum(self.by_severity.values())

    def to_dict(self) -> dict[str, object]:
        return {
            "totalFiles": self.total_files,
            "filesWithIssues": self.files_with_issues,
            "parseErrors": self.parse_errors,
            "bySeverity": {sev.value: self.by_severity.get(sev, 0) for sev in Severity},
            "byRule": dict(self.by_rule),
        }


@dataclass(frozen=True)
class LintReport:
    """Outcome of one scan. Built once; never mutated afterwards."""

    project_root: str
    timestamp: str
    duration_ms: int
    files: tuple[FileResult, ...]
    summary: LintSummary
    metrics: ProjectMetrics | None = None

    def all_issues(self) -> list[tuple[FileResult, Issue]]:
        return [(result, issue) for result in self.files for issue in result.issues]

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "projectRoot": self.project_root,
            "timestamp": self.timestamp,
            "durationMs": self.duration_ms,
            "files": [result.to_dict() for result in self.files],
            "summary": self.summary.to_dict(),
        }
        if self.metrics is not None:
            data["metrics"] = self.metrics.to_dict()
        return data


def build_summary(files: Iterable[FileResult]) -> LintSummary:
    """Fold file results into severity / rule / parse-error counts."""
    by_severity: dict[Severity, int] = {sev: 0 for sev in Severity}
    by_rule: dict[str, int] = {}
    total = 0
    with_issues = 0
    parse_errors = 0

    for result in files:
        total += 1
        if not result.parsed:
            parse_errors += 1
        if result.issues:
            with_issues += 1
        for issue in result.issues:
            by_severity[issue.severity] += 1
            by_rule[issue.rule_id] = by_rule.get(issue.rule_id, 0) + 1

    return LintSummary(
        total_files=total,
        files_with_issues=with_issues,
        parse_errors=parse_errors,
        by_severity=by_severity,
        by_rule=by_rule,
    )


def filter_report(report: LintReport, severities: Iterable[Severity]) -> LintReport:
    """Copy of *report* keeping only issues of the given severities."""
    keep = set(severities)
    files = tuple(
        dataclasses.replace(result, issues=tuple(i for i in result.issues if i.severity in keep))
        for result in report.files
    )
    return dataclasses.replace(report, files=files, summary=build_summary(files))
