"""Security rules: hardcoded URLs, hardcoded secrets, insecure TLS stores."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, IssueType, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext

_URL = re.compile(r"^https?://", re.IGNORECASE)

# Values built from placeholders or expressions are resolved per environment.
_DYNAMIC_VALUE: tuple[re.Pattern[str], ...] = (
    re.compile(r"\$\{[^}]+\}"),
    re.compile(r"#\[[^\]]+\]"),
    re.compile(r"p\(['\"]"),
)

_IGNORED_ATTRIBUTES: frozenset[str] = frozenset({"xmlns", "xsi:schemaLocation", "schemaLocation"})

SENSITIVE_ATTRIBUTES: tuple[str, ...] = (
    "password",
    "secret",
    "clientsecret",
    "client-secret",
    "apikey",
    "api-key",
    "token",
    "accesstoken",
    "privatekey",
)


def _truncate(value: str, max_len: int = 50) -> str:
    return value if len(value) <= max_len else value[:max_len] + "..."


def is_hardcoded_url(value: str) -> bool:
    if not _URL.match(value):
        return False
    return not any(pattern.search(value) for pattern in _DYNAMIC_VALUE)


def is_hardcoded_secret(value: str) -> bool:
    """True for literal values; placeholders, expressions and flags are fine."""
    if not value.strip():
        return False
    if value in ("true", "false"):
        return False
    try:
        float(value)
    except ValueError:
        pass
    else:
        return False
    return "${" not in value and not value.startswith("#[")


class HardcodedHttpRule(BaseRule):
    """MULE-004: URLs come from property placeholders."""

    id = "MULE-004"
    name = "Hardcoded HTTP URLs"
    description = "HTTP/HTTPS URLs should use property placeholders instead of hardcoded values"
    severity = Severity.ERROR
    category = RuleCategory.SECURITY

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for node in document.iter():
            for attr_name, value in node.attributes.items():
                if attr_name in _IGNORED_ATTRIBUTES or attr_name.startswith("xmlns:"):
                    continue
                if not is_hardcoded_url(value):
                    continue
                issues.append(
                    self.create_issue(
                        node,
                        f'Hardcoded URL "{_truncate(value)}" found in attribute "{attr_name}"',
                        suggestion="Use property placeholder: ${http.baseUrl} or ${env.api.host}",
                    )
                )
        return issues


class HardcodedCredentialsRule(BaseRule):
    """MULE-201: passwords and secrets use secure property placeholders."""

    id = "MULE-201"
    name = "Hardcoded Credentials"
    description = "Passwords and secrets should use secure property placeholders ${secure::}"
    severity = Severity.ERROR
    category = RuleCategory.SECURITY
    issue_type = IssueType.VULNERABILITY

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = []
        for node in document.iter():
            for attr_name, value in node.attributes.items():
                lowered = attr_name.lower()
                if lowered.startswith("xmlns"):
                    continue
                if not any(marker in lowered for marker in SENSITIVE_ATTRIBUTES):
                    continue
                if not is_hardcoded_secret(value):
                    continue
                issues.append(
                    self.create_issue(
                        node,
                        f"Hardcoded {attr_name} found - use secure property placeholder",
                        suggestion=f"Use ${{secure::{attr_name}}} instead of hardcoded value",
                    )
                )
        return issues


class InsecureTlsRule(BaseRule):
    """MULE-202: TLS trust and key stores keep certificate verification on."""

    id = "MULE-202"
    name = "Insecure TLS Configuration"
    description = "TLS configurations should not disable certificate verification"
    severity = Severity.ERROR
    category = RuleCategory.SECURITY
    issue_type = IssueType.VULNERABILITY

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        issues: list[Issue] = [
            self.create_issue(
                node,
                'TLS trust-store has insecure="true" - certificates not verified',
                suggestion='Remove insecure="true" and configure proper certificate validation',
            )
            for node in self.select(document, '//trust-store[@insecure="true"]')
        ]
        issues.extend(
            self.create_issue(
                node,
                'TLS key-store has insecure="true"',
                suggestion='Remove insecure="true" and use proper key management',
            )
            for node in self.select(document, '//key-store[@insecure="true"]')
        )
        return issues
