"""Flow complexity rule."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowlint.core.complexity import calculate_flow_complexity
from flowlint.rules.base import BaseRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.complexity import ComplexityResult
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext


def _breakdown(result: ComplexityResult) -> str:
    parts = ", ".join(f"{d.type}: {d.count}" for d in result.details)
    return f"Complexity breakdown: {parts}. Consider extracting to sub-flows."


class FlowComplexityRule(BaseRule):
    """MULE-801: warn above ``warnThreshold``, error above ``errorThreshold``."""

    id = "MULE-801"
    name = "Flow Complexity"
    description = "Flow cyclomatic complexity should not exceed threshold"
    severity = Severity.WARNING
    category = RuleCategory.COMPLEXITY

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        warn_threshold = self.get_option(context, "warnThreshold", 10)
        error_threshold = self.get_option(context, "errorThreshold", 20)
        issues: list[Issue] = []

        for flow in self.select(document, "//flow | //sub-flow"):
            result = calculate_flow_complexity(document, flow)
            name = self.name_of(flow) or "unnamed"
            if result.complexity > error_threshold:
                issues.append(
                    self.create_issue(
                        flow,
                        f'Flow "{name}" has high complexity ({result.complexity}) - refactor recommended',
                        suggestion=_breakdown(result),
                        severity=Severity.ERROR,
                    )
                )
            elif result.complexity > warn_threshold:
                issues.append(
                    self.create_issue(
                        flow,
                        f'Flow "{name}" has moderate complexity ({result.complexity})',
                        suggestion=_breakdown(result),
                    )
                )
        return issues
