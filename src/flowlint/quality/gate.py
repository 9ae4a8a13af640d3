"""Quality gates: threshold conditions over report metrics and a pass/warn/fail verdict."""

from __future__ import annotations

import enum
import operator
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from flowlint.quality.metrics import aggregate_metrics

if TYPE_CHECKING:
    from flowlint.report import LintReport, ProjectMetrics


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class QualityGateError(Exception):
    """Raised for an unknown gate name or a malformed gate definition."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


class GateStatus(str, enum.Enum):
    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


class ConditionStatus(str, enum.Enum):
    FAIL = "fail"
    WARN = "warn"


OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
    "=": operator.eq,
}

METRICS: frozenset[str] = frozenset(
    {
        "errors",
        "warnings",
        "infos",
        "complexity_max",
        "complexity_avg",
        "security_hotspots",
        "technical_debt_ratio",
        "bugs",
        "vulnerabilities",
    }
)


@dataclass(frozen=True)
class QualityCondition:
    """``metric operator threshold`` is the *violation* predicate."""

    metric: str
    operator: str
    threshold: float
    status: ConditionStatus

    def describe(self) -> str:
        return f"{self.metric} {self.operator} {_fmt(self.threshold)}"

    def to_dict(self) -> dict[str, object]:
        return {
            "metric": self.metric,
            "operator": self.operator,
            "threshold": self.threshold,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class QualityGate:
    name: str
    conditions: tuple[QualityCondition, ...]

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "conditions": [c.to_dict() for c in self.conditions]}


@dataclass(frozen=True)
class ConditionResult:
    condition: QualityCondition
    actual_value: float
    passed: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "condition": self.condition.to_dict(),
            "actualValue": self.actual_value,
            "passed": self.passed,
        }


@dataclass(frozen=True)
class QualityGateResult:
    gate: QualityGate
    status: GateStatus
    conditions: tuple[ConditionResult, ...]
    message: str

    def to_dict(self) -> dict[str, object]:
        return {
            "gate": self.gate.to_dict(),
            "status": self.status.value,
            "conditions": [c.to_dict() for c in self.conditions],
            "message": self.message,
        }


# ---------------------------------------------------------------------------
# Built-in gates
# ---------------------------------------------------------------------------

DEFAULT_QUALITY_GATE = QualityGate(
    name="Default",
    conditions=(
        QualityCondition("errors", ">", 0, ConditionStatus.FAIL),
        QualityCondition("warnings", ">", 10, ConditionStatus.WARN),
        QualityCondition("complexity_max", ">", 20, ConditionStatus.FAIL),
        QualityCondition("security_hotspots", ">", 0, ConditionStatus.WARN),
    ),
)

STRICT_QUALITY_GATE = QualityGate(
    name="Strict",
    conditions=(
        QualityCondition("errors", ">", 0, ConditionStatus.FAIL),
        QualityCondition("warnings", ">", 0, ConditionStatus.FAIL),
        QualityCondition("complexity_max", ">", 10, ConditionStatus.FAIL),
        QualityCondition("security_hotspots", ">", 0, ConditionStatus.FAIL),
    ),
)

BUILTIN_GATES: dict[str, QualityGate] = {
    "default": DEFAULT_QUALITY_GATE,
    "strict": STRICT_QUALITY_GATE,
}


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _fmt(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _enriched_metrics(report: LintReport) -> ProjectMetrics | None:
    metrics = report.metrics
    if metrics is not None and metrics.complexity is None:
        return aggregate_metrics(report)
    return metrics


def metric_value(metric: str, report: LintReport, metrics: ProjectMetrics | None = None) -> float:
    """Current value of *metric*; missing metrics are 0."""
    summary = report.summary
    if metric == "errors":
        return summary.errors
    if metric == "warnings":
        return summary.warnings
    if metric == "infos":
        return summary.infos

    if metrics is None:
        return 0
    if metric == "complexity_max":
        if metrics.complexity is None or metrics.complexity.highest_value is None:
            return 0
        return metrics.complexity.highest_value
    if metric == "complexity_avg":
        return metrics.complexity.average if metrics.complexity else 0
    if metric == "security_hotspots":
        return metrics.security.hotspots if metrics.security else 0
    if metric == "vulnerabilities":
        return metrics.security.vulnerabilities if metrics.security else 0
    if metric == "bugs":
        return metrics.reliability.bugs if metrics.reliability else 0
    if metric == "technical_debt_ratio":
        return metrics.maintainability.debt_ratio if metrics.maintainability else 0
    return 0


def evaluate_quality_gate(
    report: LintReport,
    gate: QualityGate = DEFAULT_QUALITY_GATE,
) -> QualityGateResult:
    """Evaluate *gate* against *report*.

    Any violated ``fail`` condition makes the gate ``failed`` regardless of
    condition order; otherwise any violated ``warn`` condition makes it
    ``warning``.  Pure: neither the report nor the gate is modified.
    """
    metrics = _enriched_metrics(report)
    results: list[ConditionResult] = []
    violated: list[str] = []
    status = GateStatus.PASSED

    for condition in gate.conditions:
        actual = metric_value(condition.metric, report, metrics)
        compare = OPERATORS[condition.operator]
        is_violated = compare(actual, condition.threshold)
        results.append(ConditionResult(condition=condition, actual_value=actual, passed=not is_violated))
        if not is_violated:
            continue

        violated.append(f"{condition.describe()} (actual: {_fmt(actual)})")
        if condition.status is ConditionStatus.FAIL:
            status = GateStatus.FAILED
        elif status is not GateStatus.FAILED:
            status = GateStatus.WARNING

    if status is GateStatus.PASSED:
        message = f'Quality Gate "{gate.name}" passed - all {len(gate.conditions)} conditions met'
    elif status is GateStatus.FAILED:
        message = (
            f'Quality Gate "{gate.name}" FAILED - {len(violated)} condition(s) violated: '
            + ", ".join(violated)
        )
    else:
        message = (
            f'Quality Gate "{gate.name}" passed with warnings - {len(violated)} warning(s): '
            + ", ".join(violated)
        )

    return QualityGateResult(gate=gate, status=status, conditions=tuple(results), message=message)


def quality_gate_exit_code(status: GateStatus, fail_on_warning: bool = False) -> int:
    if status is GateStatus.FAILED:
        return 1
    if status is GateStatus.WARNING:
        return 1 if fail_on_warning else 0
    return 0


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def _condition_from_dict(data: object, gate_name: str, idx: int) -> QualityCondition:
    where = f"quality gate '{gate_name}': condition at index {idx}"
    if not isinstance(data, Mapping):
        msg = f"{where} must be a mapping"
        raise QualityGateError(msg)

    metric = data.get("metric")
    if metric not in METRICS:
        msg = f"{where} has unknown metric '{metric}', must be one of {sorted(METRICS)}"
        raise QualityGateError(msg)

    op = data.get("operator")
    if op not in OPERATORS:
        msg = f"{where} has invalid operator '{op}', must be one of {sorted(OPERATORS)}"
        raise QualityGateError(msg)

    threshold = data.get("threshold")
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        msg = f"{where} threshold must be a number"
        raise QualityGateError(msg)

    try:
        status = ConditionStatus(str(data.get("status", "fail")))
    except ValueError:
        msg = f"{where} has invalid status '{data.get('status')}', must be 'fail' or 'warn'"
        raise QualityGateError(msg) from None

    return QualityCondition(metric=str(metric), operator=str(op), threshold=threshold, status=status)


def gate_from_dict(data: Mapping[str, Any], default_name: str = "Custom") -> QualityGate:
    """Build a gate from ``{name, conditions: [{metric, operator, threshold, status}]}``."""
    name = str(data.get("name") or default_name)
    conditions = data.get("conditions")
    if not isinstance(conditions, list) or not conditions:
        msg = f"quality gate '{name}': 'conditions' must be a non-empty list"
        raise QualityGateError(msg)
    return QualityGate(
        name=name,
        conditions=tuple(_condition_from_dict(c, name, i) for i, c in enumerate(conditions)),
    )


def resolve_quality_gate(
    selector: str | Mapping[str, Any] | None,
    custom_gates: Mapping[str, Any] | None = None,
) -> QualityGate:
    """Resolve a gate by name (custom gates first, then built-ins) or inline mapping.

    ``None`` selects the Default gate.

    Raises
    ------
    QualityGateError
        When the name is unknown or the definition is malformed.
    """
    if selector is None:
        return DEFAULT_QUALITY_GATE
    if isinstance(selector, Mapping):
        return gate_from_dict(selector)

    custom = custom_gates or {}
    if selector in custom:
        definition = custom[selector]
        if not isinstance(definition, Mapping):
            msg = f"quality gate '{selector}' must be a mapping"
            raise QualityGateError(msg)
        return gate_from_dict(definition, default_name=selector)

    builtin = BUILTIN_GATES.get(selector.lower())
    if builtin is None:
        known = sorted({*BUILTIN_GATES, *custom})
        msg = f"Unknown quality gate '{selector}', expected one of {known}"
        raise QualityGateError(msg)
    return builtin


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_STATUS_ICONS: dict[GateStatus, str] = {
    GateStatus.PASSED: "\u2713",  # ✓
    GateStatus.WARNING: "\u26a0",  # ⚠
    GateStatus.FAILED: "\u2717",  # ✗
}


def format_quality_gate_result(result: QualityGateResult) -> str:
    """Plain-text rendering for the console, one line per condition."""
    icon = _STATUS_ICONS[result.status]
    lines = [
        "",
        f"Quality Gate: {result.gate.name}",
        f"Status: {icon} {result.status.value.upper()}",
        "",
        "Conditions:",
    ]
    for cr in result.conditions:
        mark = "\u2713" if cr.passed else "\u2717"
        cond = cr.condition
        lines.append(
            f"  {mark} {cond.metric}: {_fmt(cr.actual_value)} "
            f"(threshold: {cond.operator} {_fmt(cond.threshold)})"
        )
    return "\n".join(lines)
