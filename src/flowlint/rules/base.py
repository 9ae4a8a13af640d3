"""Rule contract: issues, rule configuration, validation context, and the Rule protocol.

Concrete rules implement :class:`Rule` by mixing in :class:`BaseRule` (per-file
checks) or :class:`ProjectRule` (checks that run once per scan against the
project root).  The mixins only provide helpers; they hold no per-scan state.
"""

from __future__ import annotations

import dataclasses
import enum
import fnmatch
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar, runtime_checkable

from flowlint.core.query import attribute, column_of, has_attribute, line_of

if TYPE_CHECKING:
    from flowlint.core.document import Document, Element

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Severity(str, enum.Enum):
    """Severity of an issue."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueType(str, enum.Enum):
    """Quality-model type a rule's findings count towards."""

    BUG = "bug"
    VULNERABILITY = "vulnerability"
    CODE_SMELL = "code-smell"


class RuleCategory(str, enum.Enum):
    ERROR_HANDLING = "error-handling"
    NAMING = "naming"
    SECURITY = "security"
    LOGGING = "logging"
    HTTP = "http"
    PERFORMANCE = "performance"
    DOCUMENTATION = "documentation"
    STANDARDS = "standards"
    STRUCTURE = "structure"
    COMPLEXITY = "complexity"


class RuleScope(str, enum.Enum):
    """Where a rule runs: once per parsed file, or once per project scan."""

    FILE = "file"
    PROJECT = "project"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Issue:
    """A single rule finding. Line and column are 1-based."""

    line: int
    message: str
    rule_id: str
    severity: Severity
    column: int | None = None
    suggestion: str | None = None
    code_snippet: str | None = None

    def with_severity(self, severity: Severity) -> Issue:
        """Return a copy with *severity* (used for configured overrides)."""
        return dataclasses.replace(self, severity=severity)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"line": self.line}
        if self.column is not None:
            data["column"] = self.column
        data["message"] = self.message
        data["ruleId"] = self.rule_id
        data["severity"] = self.severity.value
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        if self.code_snippet is not None:
            data["codeSnippet"] = self.code_snippet
        return data


@dataclass(frozen=True)
class RuleConfig:
    """Resolved configuration for one rule."""

    enabled: bool = True
    severity: Severity | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: object) -> RuleConfig:
        """Build from a config-file value.

        ``None`` -> enabled with defaults; a boolean toggles enablement only;
        a mapping may carry ``enabled``, ``severity`` and ``options``.
        """
        if raw is None:
            return cls()
        if isinstance(raw, bool):
            return cls(enabled=raw)
        if not isinstance(raw, Mapping):
            msg = f"rule config must be a boolean or a mapping, got {type(raw).__name__}"
            raise ValueError(msg)

        severity_raw = raw.get("severity")
        severity: Severity | None = None
        if severity_raw is not None:
            try:
                severity = Severity(str(severity_raw))
            except ValueError:
                msg = (
                    f"invalid severity '{severity_raw}', "
                    f"must be one of {[s.value for s in Severity]}"
                )
                raise ValueError(msg) from None

        options = raw.get("options") or {}
        if not isinstance(options, Mapping):
            msg = "rule options must be a mapping"
            raise ValueError(msg)

        return cls(enabled=bool(raw.get("enabled", True)), severity=severity, options=dict(options))


class ScanState:
    """Scan-scoped scratch space for rules that report once per project.

    A fresh instance is created for every scan; :meth:`reset` clears it for
    callers that reuse one.
    """

    def __init__(self) -> None:
        self._seen: set[tuple[str, str]] = set()

    def first_time(self, rule_id: str, key: str = "") -> bool:
        """Return True the first time ``(rule_id, key)`` is seen in this scan."""
        marker = (rule_id, key)
        if marker in self._seen:
            return False
        self._seen.add(marker)
        return True

    def reset(self) -> None:
        self._seen.clear()


@dataclass(frozen=True)
class ValidationContext:
    """Read-only input handed to :meth:`Rule.validate`."""

    file_path: str
    relative_path: str
    project_root: str
    config: RuleConfig = field(default_factory=RuleConfig)
    scan_state: ScanState = field(default_factory=ScanState, compare=False)


# ---------------------------------------------------------------------------
# Rule protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Rule(Protocol):
    """Contract every lint rule satisfies.

    ``validate`` must return a list (possibly empty) and must not raise for
    recoverable conditions such as missing optional elements.
    """

    id: str
    name: str
    description: str
    severity: Severity
    category: RuleCategory
    issue_type: IssueType
    scope: RuleScope

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]: ...

    def reset(self) -> None: ...


# ---------------------------------------------------------------------------
# Default-method mixins
# ---------------------------------------------------------------------------


class BaseRule:
    """Helpers shared by per-file rules. Subclasses set the class attributes."""

    id: ClassVar[str]
    name: ClassVar[str]
    description: ClassVar[str]
    severity: ClassVar[Severity]
    category: ClassVar[RuleCategory]
    issue_type: ClassVar[IssueType] = IssueType.CODE_SMELL
    scope: ClassVar[RuleScope] = RuleScope.FILE

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        raise NotImplementedError

    def reset(self) -> None:
        """Clear per-scan state. Rules are stateless by default."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"

    # -- queries --

    @staticmethod
    def select(doc: Document, path: str, node: Element | None = None) -> list[Element]:
        return doc.select_all(path, node)

    @staticmethod
    def select_first(doc: Document, path: str, node: Element | None = None) -> Element | None:
        return doc.select_first(path, node)

    @staticmethod
    def exists(doc: Document, path: str, node: Element | None = None) -> bool:
        return doc.exists(path, node)

    @staticmethod
    def count(doc: Document, path: str, node: Element | None = None) -> int:
        return doc.count(path, node)

    # -- node accessors --

    @staticmethod
    def name_of(node: Element) -> str | None:
        return attribute(node, "name")

    @staticmethod
    def doc_name_of(node: Element) -> str | None:
        return attribute(node, "doc:name")

    @staticmethod
    def enclosing_flow_name(doc: Document, node: Element) -> str | None:
        """Name of the nearest ``flow`` / ``sub-flow`` ancestor, if any."""
        for ancestor in doc.ancestors(node):
            if ancestor.local_name in ("flow", "sub-flow"):
                return attribute(ancestor, "name")
        return None

    # -- issue construction --

    def create_issue(
        self,
        node: Element,
        message: str,
        *,
        suggestion: str | None = None,
        severity: Severity | None = None,
        code_snippet: str | None = None,
    ) -> Issue:
        """Issue located at *node*."""
        return Issue(
            line=line_of(node),
            column=column_of(node),
            message=message,
            rule_id=self.id,
            severity=severity or self.severity,
            suggestion=suggestion,
            code_snippet=code_snippet,
        )

    def create_file_issue(
        self,
        message: str,
        *,
        suggestion: str | None = None,
        severity: Severity | None = None,
        line: int = 1,
    ) -> Issue:
        """Issue not tied to a node; defaults to line 1."""
        return Issue(
            line=line,
            message=message,
            rule_id=self.id,
            severity=severity or self.severity,
            suggestion=suggestion,
        )

    # -- options --

    @staticmethod
    def get_option(context: ValidationContext, key: str, default: T) -> T:
        """Typed option lookup with a default for missing keys."""
        options = context.config.options
        if key in options:
            return options[key]  # type: ignore[no-any-return]
        return default

    @staticmethod
    def is_excluded(value: str, patterns: list[str] | tuple[str, ...]) -> bool:
        """Match *value* against exact names or ``*`` wildcard patterns."""
        for pattern in patterns:
            if "*" in pattern:
                if fnmatch.fnmatchcase(value, pattern):
                    return True
            elif value == pattern:
                return True
        return False

    @staticmethod
    def has_attribute(node: Element, name: str) -> bool:
        return has_attribute(node, name)

    @staticmethod
    def attribute(node: Element, name: str) -> str | None:
        return attribute(node, name)


class ProjectRule(BaseRule):
    """Rules that check project-wide concerns once per scan.

    The orchestrator calls :meth:`reset` before the project pass and then
    :meth:`validate` once, with a context rooted at the project directory.
    The document argument is not used.
    """

    scope: ClassVar[RuleScope] = RuleScope.PROJECT

    def validate(self, document: Document | None, context: ValidationContext) -> list[Issue]:  # type: ignore[override]
        return self.validate_project(context)

    def validate_project(self, context: ValidationContext) -> list[Issue]:
        raise NotImplementedError

    def create_project_issue(
        self,
        message: str,
        *,
        suggestion: str | None = None,
        severity: Severity | None = None,
    ) -> Issue:
        return self.create_file_issue(message, suggestion=suggestion, severity=severity)
