"""Quality - A-E ratings, metric aggregation and quality gates."""

from flowlint.quality.gate import (
    BUILTIN_GATES,
    DEFAULT_QUALITY_GATE,
    STRICT_QUALITY_GATE,
    ConditionResult,
    ConditionStatus,
    GateStatus,
    QualityCondition,
    QualityGate,
    QualityGateError,
    QualityGateResult,
    evaluate_quality_gate,
    format_quality_gate_result,
    gate_from_dict,
    metric_value,
    quality_gate_exit_code,
    resolve_quality_gate,
)
from flowlint.quality.metrics import IssueClass, aggregate_metrics, classify_issue, count_issue_classes
from flowlint.quality.ratings import (
    complexity_rating,
    debt_minutes,
    debt_ratio,
    development_minutes,
    file_complexity_rating,
    format_tech_debt,
    maintainability_rating,
    reliability_rating,
    security_rating,
)

__all__ = [
    "BUILTIN_GATES",
    "DEFAULT_QUALITY_GATE",
    "STRICT_QUALITY_GATE",
    "ConditionResult",
    "ConditionStatus",
    "GateStatus",
    "IssueClass",
    "QualityCondition",
    "QualityGate",
    "QualityGateError",
    "QualityGateResult",
    "aggregate_metrics",
    "classify_issue",
    "complexity_rating",
    "count_issue_classes",
    "debt_minutes",
    "debt_ratio",
    "development_minutes",
    "evaluate_quality_gate",
    "file_complexity_rating",
    "format_quality_gate_result",
    "format_tech_debt",
    "gate_from_dict",
    "maintainability_rating",
    "metric_value",
    "quality_gate_exit_code",
    "reliability_rating",
    "resolve_quality_gate",
    "security_rating",
]
