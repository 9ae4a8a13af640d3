"""Documentation rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext


class FlowDescriptionRule(BaseRule):
    """MULE-601: flows carry a ``doc:description``."""

    id = "MULE-601"
    name = "Flow Missing Description"
    description = "Flows should have doc:description for documentation"
    severity = Severity.INFO
    category = RuleCategory.DOCUMENTATION

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for flow in self.select(document, "//flow"):
            description = self.attribute(flow, "doc:description")
            if description and description.strip():
                continue
            issues.append(
                self.create_issue(
                    flow,
                    f'Flow "{self.name_of(flow) or "unnamed"}" is missing doc:description',
                    suggestion='Add doc:description="Description of what this flow does"',
                )
            )
        return issues
