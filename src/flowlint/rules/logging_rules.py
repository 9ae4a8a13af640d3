"""Logger rules: categories and payload logging."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext

# ``#[payload]`` but not ``#[payload.orderId]``
_WHOLE_PAYLOAD = re.compile(r"#\[\s*payload\s*\]")


def suggest_category(relative_path: str, base: str = "com.myorg") -> str:
    """``src/main/mule/impl/orders-impl.xml`` -> ``com.myorg.impl.orders.impl``."""
    stem = relative_path.replace("\\", "/").removeprefix("src/main/mule/").removesuffix(".xml")
    return f"{base}.{stem.replace('/', '.').replace('-', '.')}"


class LoggerCategoryRule(BaseRule):
    """MULE-006: every logger has a category, optionally under a required prefix."""

    id = "MULE-006"
    name = "Logger Category Required"
    description = "All loggers should have a category attribute for proper log filtering"
    severity = Severity.WARNING
    category = RuleCategory.LOGGING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        required_prefix: str | None = self.get_option(context, "requiredPrefix", None)
        issues: list[Issue] = []

        for logger in self.select(document, "//logger[not(@category)]"):
            label = self.doc_name_of(logger) or "Logger"
            issues.append(
                self.create_issue(
                    logger,
                    f"Logger \"{label}\" is missing 'category' attribute",
                    suggestion=f'Add category="{suggest_category(context.relative_path)}"',
                )
            )

        if required_prefix:
            for logger in self.select(document, "//logger[@category]"):
                category = self.attribute(logger, "category")
                if category is None or category.startswith(required_prefix):
                    continue
                label = self.doc_name_of(logger) or "Logger"
                issues.append(
                    self.create_issue(
                        logger,
                        f'Logger "{label}" category "{category}" should start with "{required_prefix}"',
                        suggestion=f'Update category to "{required_prefix}.{category}"',
                        severity=Severity.INFO,
                    )
                )
        return issues


class LoggerPayloadRule(BaseRule):
    """MULE-301: loggers log selected fields, never the whole payload."""

    id = "MULE-301"
    name = "Logger Payload Reference"
    description = "Loggers should not directly log entire payload"
    severity = Severity.WARNING
    category = RuleCategory.LOGGING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for logger in self.select(document, "//logger[@message]"):
            message = self.attribute(logger, "message") or ""
            if not _WHOLE_PAYLOAD.search(message):
                continue
            label = self.doc_name_of(logger) or "Logger"
            issues.append(
                self.create_issue(
                    logger,
                    f'Logger "{label}" logs entire payload - security/performance risk',
                    suggestion="Log specific fields instead: #[payload.orderId]",
                )
            )
        return issues
