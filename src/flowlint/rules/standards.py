"""Coding-standard rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext

_GENERIC_ERROR_TYPES: frozenset[str] = frozenset({"ANY", "MULE:ANY"})


class ChoiceAntiPatternRule(BaseRule):
    """MULE-008: choice branches do not raise bare errors.

    A ``raise-error`` directly under ``otherwise`` is flagged unless it sits in
    an ``until-successful`` (the retry idiom).  Under ``when`` only the generic
    ``ANY`` type is flagged, at info level.
    """

    id = "MULE-008"
    name = "Choice Anti-Pattern"
    description = "Avoid raise-error directly in choice/otherwise - use descriptive error types"
    severity = Severity.WARNING
    category = RuleCategory.STANDARDS

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []

        for raise_error in self.select(document, "//choice/otherwise/raise-error"):
            if self.exists(document, "ancestor::until-successful", raise_error):
                continue
            error_type = self.attribute(raise_error, "type") or "unknown"
            issues.append(
                self.create_issue(
                    raise_error,
                    f'raise-error with type="{error_type}" directly in otherwise block is an anti-pattern',
                    suggestion=(
                        "Consider using a custom error type (e.g., APP:INVALID_REQUEST) with "
                        "descriptive message, or refactor the choice logic"
                    ),
                )
            )

        for raise_error in self.select(document, "//choice/when/raise-error"):
            error_type = self.attribute(raise_error, "type") or "unknown"
            if error_type not in _GENERIC_ERROR_TYPES:
                continue
            issues.append(
                self.create_issue(
                    raise_error,
                    f'raise-error with generic type="{error_type}" in choice/when block',
                    suggestion="Use a specific error type (e.g., APP:VALIDATION_ERROR) instead of ANY",
                    severity=Severity.INFO,
                )
            )
        return issues
