"""Naming-convention rules for flows and variables."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext

# Main flows and APIkit-generated "verb:\resource:config" flows keep their names.
_DEFAULT_EXCLUDES: tuple[str, ...] = (
    "*-api-main",
    "*-main",
    "*-api-console",
    "get:*",
    "post:*",
    "put:*",
    "patch:*",
    "delete:*",
    "options:*",
    "head:*",
)

_CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_SEPARATOR = re.compile(r"[-_\s]+(.)?")


def to_camel_case(name: str) -> str:
    """``order-id`` / ``Order_ID`` -> ``orderId`` / ``orderID``."""
    joined = _SEPARATOR.sub(lambda m: m.group(1).upper() if m.group(1) else "", name)
    return joined[:1].lower() + joined[1:]


class FlowNamingRule(BaseRule):
    """MULE-002: flows end with ``-flow``, sub-flows with ``-subflow``."""

    id = "MULE-002"
    name = "Flow Naming Convention"
    description = 'Flows should end with "-flow", sub-flows with "-subflow" for consistent naming'
    severity = Severity.WARNING
    category = RuleCategory.NAMING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        flow_suffix = self.get_option(context, "flowSuffix", "-flow")
        subflow_suffix = self.get_option(context, "subflowSuffix", "-subflow")
        exclude = self.get_option(context, "excludePatterns", list(_DEFAULT_EXCLUDES))

        issues: list[Issue] = []
        for path, label, suffix in (
            ("//flow", "Flow", flow_suffix),
            ("//sub-flow", "Sub-flow", subflow_suffix),
        ):
            for node in self.select(document, path):
                name = self.name_of(node)
                if not name or self.is_excluded(name, exclude) or name.endswith(suffix):
                    continue
                issues.append(
                    self.create_issue(
                        node,
                        f'{label} "{name}" should end with "{suffix}"',
                        suggestion=f'Rename to "{name}{suffix}"',
                    )
                )
        return issues


class VariableNamingRule(BaseRule):
    """MULE-102: ``set-variable`` names are camelCase."""

    id = "MULE-102"
    name = "Variable Naming Convention"
    description = "Variables should follow camelCase naming"
    severity = Severity.WARNING
    category = RuleCategory.NAMING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for node in self.select(document, "//set-variable"):
            variable = self.attribute(node, "variableName")
            if variable is None or _CAMEL_CASE.match(variable):
                continue
            issues.append(
                self.create_issue(
                    node,
                    f'Variable "{variable}" should be camelCase',
                    suggestion=f'Rename to "{to_camel_case(variable)}"',
                )
            )
        return issues
