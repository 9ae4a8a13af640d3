"""Performance rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext


class ScatterGatherRoutesRule(BaseRule):
    """MULE-501: scatter-gather fans out to a bounded number of routes."""

    id = "MULE-501"
    name = "Scatter-Gather Route Count"
    description = "Scatter-gather with many routes may cause memory issues"
    severity = Severity.INFO
    category = RuleCategory.PERFORMANCE

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        max_routes = self.get_option(context, "maxRoutes", 5)
        issues: list[Issue] = []
        for scatter in self.select(document, "//scatter-gather"):
            routes = self.count(document, "route", scatter)
            if routes <= max_routes:
                continue
            issues.append(
                self.create_issue(
                    scatter,
                    f"Scatter-gather has {routes} routes (max recommended: {max_routes})",
                    suggestion="Consider using batch processing for large parallel operations",
                )
            )
        return issues
