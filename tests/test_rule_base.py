"""Tests for flowlint.rules.base - issues, rule config, scan state, mixins."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from typing import TYPE_CHECKING

import pytest

from flowlint.rules.base import (
    BaseRule,
    Issue,
    ProjectRule,
    Rule,
    RuleCategory,
    RuleConfig,
    RuleScope,
    ScanState,
    Severity,
    ValidationContext,
)
from flow_helpers import mule, parse

if TYPE_CHECKING:
    from flowlint.core.document import Document


class _DemoRule(BaseRule):
    id = "DEMO-001"
    name = "Demo"
    description = "Flags every logger"
    severity = Severity.WARNING
    category = RuleCategory.LOGGING

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        return [self.create_issue(node, "logger") for node in self.select(document, "//logger")]


class _DemoProjectRule(ProjectRule):
    id = "DEMO-002"
    name = "Demo project"
    description = "Always one issue"
    severity = Severity.INFO
    category = RuleCategory.STRUCTURE

    def validate_project(self, context: ValidationContext) -> list[Issue]:
        return [self.create_project_issue(f"root={context.project_root}")]


def _ctx(**options: object) -> ValidationContext:
    return ValidationContext(
        file_path="/p/src/main/mule/a.xml",
        relative_path="src/main/mule/a.xml",
        project_root="/p",
        config=RuleConfig(options=options),
    )


# ---------------------------------------------------------------------------
# Issue
# ---------------------------------------------------------------------------


class TestIssue:
    def test_frozen(self) -> None:
        issue = Issue(line=1, message="m", rule_id="R", severity=Severity.INFO)
        with pytest.raises(FrozenInstanceError):
            issue.line = 2  # type: ignore[misc]

    def test_with_severity_returns_copy(self) -> None:
        issue = Issue(line=3, message="m", rule_id="R", severity=Severity.WARNING, column=4)
        changed = issue.with_severity(Severity.ERROR)
        assert changed.severity is Severity.ERROR
        assert issue.severity is Severity.WARNING
        assert (changed.line, changed.column, changed.message) == (3, 4, "m")

    def test_to_dict_omits_absent_fields(self) -> None:
        issue = Issue(line=1, message="m", rule_id="R", severity=Severity.INFO)
        assert issue.to_dict() == {"line": 1, "message": "m", "ruleId": "R", "severity": "info"}

    def test_to_dict_full(self) -> None:
        issue = Issue(
            line=2,
            message="m",
            rule_id="R",
            severity=Severity.ERROR,
            column=5,
            suggestion="fix",
            code_snippet="<x/>",
        )
        data = issue.to_dict()
        assert data["column"] == 5
        assert data["suggestion"] == "fix"
        assert data["codeSnippet"] == "<x/>"


# ---------------------------------------------------------------------------
# RuleConfig
# ---------------------------------------------------------------------------


class TestRuleConfig:
    def test_none_is_enabled_default(self) -> None:
        assert RuleConfig.from_raw(None) == RuleConfig()

    @pytest.mark.parametrize("flag", [True, False])
    def test_boolean_toggles_only_enablement(self, flag: bool) -> None:
        config = RuleConfig.from_raw(flag)
        assert config.enabled is flag
        assert config.severity is None
        assert dict(config.options) == {}

    def test_mapping(self) -> None:
        config = RuleConfig.from_raw(
            {"enabled": True, "severity": "error", "options": {"maxFlows": 3}}
        )
        assert config.severity is Severity.ERROR
        assert config.options["maxFlows"] == 3

    def test_mapping_defaults_to_enabled(self) -> None:
        assert RuleConfig.from_raw({"severity": "info"}).enabled is True

    @pytest.mark.parametrize(
        "raw",
        ["yes", 3, {"severity": "fatal"}, {"options": ["a"]}],
    )
    def test_invalid_raises_value_error(self, raw: object) -> None:
        with pytest.raises(ValueError):
            RuleConfig.from_raw(raw)


# ---------------------------------------------------------------------------
# ScanState
# ---------------------------------------------------------------------------


class TestScanState:
    def test_first_time_once_per_key(self) -> None:
        state = ScanState()
        assert state.first_time("MULE-001")
        assert not state.first_time("MULE-001")
        assert state.first_time("MULE-001", "other")
        assert state.first_time("MULE-002")

    def test_reset_clears(self) -> None:
        state = ScanState()
        state.first_time("MULE-001")
        state.reset()
        assert state.first_time("MULE-001")

    def test_fresh_state_per_context(self) -> None:
        assert _ctx().scan_state is not _ctx().scan_state


# ---------------------------------------------------------------------------
# Mixins
# ---------------------------------------------------------------------------


class TestBaseRule:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(_DemoRule(), Rule)
        assert isinstance(_DemoProjectRule(), Rule)

    def test_scopes(self) -> None:
        assert _DemoRule.scope is RuleScope.FILE
        assert _DemoProjectRule.scope is RuleScope.PROJECT

    def test_create_issue_takes_node_position(self) -> None:
        doc = parse(mule('  <flow name="a">\n    <logger/>\n  </flow>\n'))
        [issue] = _DemoRule().validate(doc, _ctx())
        assert issue.line == 6
        assert issue.column == 5
        assert issue.rule_id == "DEMO-001"
        assert issue.severity is Severity.WARNING

    def test_create_file_issue_defaults_to_line_one(self) -> None:
        issue = _DemoRule().create_file_issue("m", severity=Severity.INFO)
        assert issue.line == 1
        assert issue.column is None
        assert issue.severity is Severity.INFO

    def test_get_option(self) -> None:
        ctx = _ctx(maxFlows=3)
        assert BaseRule.get_option(ctx, "maxFlows", 10) == 3
        assert BaseRule.get_option(ctx, "missing", 10) == 10

    @pytest.mark.parametrize(
        ("value", "patterns", "expected"),
        [
            ("orders-api-main", ["*-api-main"], True),
            ("orders-flow", ["*-api-main"], False),
            ("get:\\orders:cfg", ["get:*"], True),
            ("exact", ["exact"], True),
            ("exactly", ["exact"], False),
        ],
    )
    def test_is_excluded(self, value: str, patterns: list[str], expected: bool) -> None:
        assert BaseRule.is_excluded(value, patterns) is expected

    def test_enclosing_flow_name(self) -> None:
        doc = parse(mule('<sub-flow name="s-subflow"><choice><when><logger/></when></choice></sub-flow>'))
        logger = doc.select_first("//logger")
        assert logger is not None
        assert BaseRule.enclosing_flow_name(doc, logger) == "s-subflow"
        assert BaseRule.enclosing_flow_name(doc, doc.root) is None

    def test_name_helpers(self) -> None:
        doc = parse(mule('<flow name="a-flow" doc:name="A"/>'))
        flow = doc.select_first("//flow")
        assert flow is not None
        assert BaseRule.name_of(flow) == "a-flow"
        assert BaseRule.doc_name_of(flow) == "A"


class TestProjectRule:
    def test_ignores_document(self) -> None:
        [issue] = _DemoProjectRule().validate(None, _ctx())
        assert issue.message == "root=/p"
        assert issue.line == 1
        assert issue.severity is Severity.INFO
