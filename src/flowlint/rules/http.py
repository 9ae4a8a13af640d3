"""HTTP connector rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext


class HttpTimeoutRule(BaseRule):
    """MULE-403: HTTP request configs declare a response timeout."""

    id = "MULE-403"
    name = "HTTP Request Timeout"
    description = "HTTP requests should have explicit timeout configuration"
    severity = Severity.WARNING
    category = RuleCategory.HTTP

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for config in self.select(document, "//request-config[not(@responseTimeout)]"):
            label = self.name_of(config) or "HTTP Request Config"
            issues.append(
                self.create_issue(
                    config,
                    f'HTTP config "{label}" has no responseTimeout - defaults may cause issues',
                    suggestion='Add responseTimeout="30000" or appropriate value',
                )
            )
        return issues
