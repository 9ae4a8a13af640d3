"""Cyclomatic complexity of a single flow: 1 + number of decision points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowlint.core.document import Document, Element

# (detail label, descendant path) in reporting order
DECISION_POINTS: tuple[tuple[str, str], ...] = (
    ("choice/when", ".//when"),
    ("until-successful", ".//until-successful"),
    ("foreach", ".//foreach"),
    ("scatter-gather", ".//scatter-gather"),
    ("try", ".//try"),
    ("error-handler", ".//on-error-continue | .//on-error-propagate"),
)


@dataclass(frozen=True)
class ComplexityDetail:
    """Contribution of one decision-point kind."""

    type: str
    count: int
    contribution: int


@dataclass(frozen=True)
class ComplexityResult:
    complexity: int
    details: tuple[ComplexityDetail, ...]
    rating: str  # "low" | "moderate" | "high"

    def breakdown(self) -> dict[str, int]:
        return {d.type: d.count for d in self.details}


def complexity_label(complexity: int) -> str:
    """Map a complexity score to ``low`` (<=10), ``moderate`` (<=20) or ``high``."""
    if complexity <= 10:
        return "low"
    if complexity <= 20:
        return "moderate"
    return "high"


def calculate_flow_complexity(doc: Document, flow: Element) -> ComplexityResult:
    """Count decision points below *flow*."""
    complexity = 1
    details: list[ComplexityDetail] = []
    for label, path in DECISION_POINTS:
        found = doc.count(path, flow)
        if found:
            complexity += found
            details.append(ComplexityDetail(type=label, count=found, contribution=found))
    return ComplexityResult(
        complexity=complexity,
        details=tuple(details),
        rating=complexity_label(complexity),
    )
