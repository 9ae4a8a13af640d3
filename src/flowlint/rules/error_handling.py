"""Error-handling rules: global handler, per-flow handlers, handler contents."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, IssueType, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document, Element
    from flowlint.rules.base import Issue, ValidationContext

_API_MAIN_PATTERNS: tuple[str, ...] = ("*-api-main", "*api-main*", "*-console")

_GENERIC_ERROR_TYPES: frozenset[str] = frozenset({"ANY", "MULE:ANY"})

_CORRELATION_MARKERS: tuple[str, ...] = (
    "correlationid",
    "correlation-id",
    "correlation_id",
    "x-correlation-id",
    "traceid",
    "trace-id",
    "requestid",
    "request-id",
)


class GlobalErrorHandlerRule(BaseRule):
    """MULE-001: the project declares a reusable global error handler."""

    id = "MULE-001"
    name = "Global Error Handler Exists"
    description = "Project should have a global error handler configuration for consistent error handling"
    severity = Severity.ERROR
    category = RuleCategory.ERROR_HANDLING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        expected = self.get_option(context, "filePath", "src/main/mule/global-error-handler.xml")
        if (Path(context.project_root) / expected).exists():
            return []

        # Only global configuration files are expected to carry the handler.
        if "global" not in context.relative_path:
            return []
        if self.exists(document, '//error-handler[@name="global-error-handler"]'):
            return []
        if self.exists(document, '//flow/error-handler[@ref="global-error-handler"]'):
            return []
        if not context.scan_state.first_time(self.id):
            return []

        return [
            self.create_file_issue(
                f'Global error handler configuration not found at "{expected}"',
                suggestion="Create a global-error-handler.xml file with a named error-handler element",
            )
        ]


class MissingErrorHandlerRule(BaseRule):
    """MULE-003: every flow has an inline or referenced error handler."""

    id = "MULE-003"
    name = "Missing Error Handler"
    description = "Flows should have an error handler for proper error management"
    severity = Severity.ERROR
    category = RuleCategory.ERROR_HANDLING
    issue_type = IssueType.BUG

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        exclude = self.get_option(context, "excludePatterns", list(_API_MAIN_PATTERNS))
        issues: list[Issue] = []

        for flow in self.select(document, "//flow"):
            name = self.name_of(flow)
            if not name or self.is_excluded(name, exclude):
                continue
            if self.exists(document, "error-handler", flow):
                continue
            if self.has_attribute(flow, "error-handler-ref"):
                continue
            issues.append(
                self.create_issue(
                    flow,
                    f'Flow "{name}" is missing an error handler',
                    suggestion=(
                        "Add an <error-handler> element or use error-handler-ref "
                        "to reference a global handler"
                    ),
                )
            )
        return issues


class HttpStatusRule(BaseRule):
    """MULE-005: error handlers set the HTTP status variable."""

    id = "MULE-005"
    name = "HTTP Status in Error Handler"
    description = "Error handlers should set httpStatus variable for proper API response codes"
    severity = Severity.WARNING
    category = RuleCategory.ERROR_HANDLING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        variable = self.get_option(context, "variableName", "httpStatus")
        issues: list[Issue] = []

        for handler in self.select(document, "//error-handler"):
            if self.exists(document, f'.//set-variable[@variableName="{variable}"]', handler):
                continue
            where = self.name_of(handler) or self.enclosing_flow_name(document, handler) or "unnamed"
            issues.append(
                self.create_issue(
                    handler,
                    f'Error handler in "{where}" should set "{variable}" variable',
                    suggestion=(
                        f'Add <set-variable variableName="{variable}" value="500"/> '
                        "or use appropriate status based on error type"
                    ),
                )
            )
        return issues


class CorrelationIdRule(BaseRule):
    """MULE-007: error handlers carry a correlation ID for tracing."""

    id = "MULE-007"
    name = "Correlation ID in Error Handler"
    description = "Error handlers should reference correlationId for distributed tracing"
    severity = Severity.WARNING
    category = RuleCategory.ERROR_HANDLING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for handler in self.select(document, "//error-handler"):
            if self._mentions_correlation(document, handler):
                continue
            where = self.name_of(handler) or self.enclosing_flow_name(document, handler) or "unnamed"
            issues.append(
                self.create_issue(
                    handler,
                    f'Error handler in "{where}" should include correlationId for traceability',
                    suggestion="Include correlationId in error response or logging for distributed tracing",
                )
            )
        return issues

    @staticmethod
    def _mentions_correlation(document: Document, handler: Element) -> bool:
        for node in document.iter(handler):
            haystacks = [node.text, *node.attributes.values()]
            for text in haystacks:
                lowered = text.lower()
                if any(marker in lowered for marker in _CORRELATION_MARKERS):
                    return True
        return False


class GenericErrorRule(BaseRule):
    """MULE-009: on-error scopes name specific error types."""

    id = "MULE-009"
    name = "Generic Error Type"
    description = 'Avoid catching type="ANY" - be specific about error types'
    severity = Severity.WARNING
    category = RuleCategory.ERROR_HANDLING
    issue_type = IssueType.BUG

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for handler in self.select(document, "//on-error-continue[@type] | //on-error-propagate[@type]"):
            error_type = self.attribute(handler, "type")
            if error_type is None or error_type.upper() not in _GENERIC_ERROR_TYPES:
                continue
            doc_name = self.doc_name_of(handler)
            label = f'{handler.local_name} "{doc_name}"' if doc_name else handler.local_name
            issues.append(
                self.create_issue(
                    handler,
                    f'{label} uses generic type="{error_type}"',
                    suggestion=(
                        "Catch specific error types (e.g., HTTP:CONNECTIVITY, DB:CONNECTIVITY, "
                        "VALIDATION:INVALID_JSON) for better error handling"
                    ),
                )
            )
        return issues


class TryScopeRule(BaseRule):
    """ERR-001: flows with several external calls isolate them in a try scope."""

    id = "ERR-001"
    name = "Try Scope Best Practice"
    description = "Complex operations should use Try scope for error isolation"
    severity = Severity.INFO
    category = RuleCategory.ERROR_HANDLING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        min_calls = self.get_option(context, "minExternalCalls", 2)
        issues: list[Issue] = []

        for flow in self.select(document, "//flow"):
            calls = [
                node
                for node in document.iter(flow)
                if node.prefix == "db" or (node.prefix == "http" and node.local_name == "request")
            ]
            if len(calls) < min_calls or self.exists(document, ".//try", flow):
                continue
            name = self.name_of(flow) or "unnamed"
            issues.append(
                self.create_issue(
                    flow,
                    f'Flow "{name}" has {len(calls)} external calls without Try scope isolation',
                    suggestion="Wrap risky operations in Try scope for granular error handling and isolation",
                )
            )
        return issues
