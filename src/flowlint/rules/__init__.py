"""Rules - the rule contract and the built-in catalogue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowlint.rules.base import (
    BaseRule,
    Issue,
    IssueType,
    ProjectRule,
    Rule,
    RuleCategory,
    RuleConfig,
    RuleScope,
    ScanState,
    Severity,
    ValidationContext,
)
from flowlint.rules.complexity import FlowComplexityRule
from flowlint.rules.documentation import FlowDescriptionRule
from flowlint.rules.error_handling import (
    CorrelationIdRule,
    GenericErrorRule,
    GlobalErrorHandlerRule,
    HttpStatusRule,
    MissingErrorHandlerRule,
    TryScopeRule,
)
from flowlint.rules.http import HttpTimeoutRule
from flowlint.rules.logging_rules import LoggerCategoryRule, LoggerPayloadRule
from flowlint.rules.naming import FlowNamingRule, VariableNamingRule
from flowlint.rules.performance import ScatterGatherRoutesRule
from flowlint.rules.security import HardcodedCredentialsRule, HardcodedHttpRule, InsecureTlsRule
from flowlint.rules.standards import ChoiceAntiPatternRule
from flowlint.rules.structure import (
    GitHygieneRule,
    GlobalConfigRule,
    MonolithicXmlRule,
    PomValidationRule,
    ProjectStructureRule,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

_RULE_CLASSES: tuple[type[BaseRule], ...] = (
    # error handling
    GlobalErrorHandlerRule,
    MissingErrorHandlerRule,
    HttpStatusRule,
    CorrelationIdRule,
    GenericErrorRule,
    TryScopeRule,
    # naming
    FlowNamingRule,
    VariableNamingRule,
    # security
    HardcodedHttpRule,
    HardcodedCredentialsRule,
    InsecureTlsRule,
    # logging
    LoggerCategoryRule,
    LoggerPayloadRule,
    # http / performance
    HttpTimeoutRule,
    ScatterGatherRoutesRule,
    # documentation / standards
    FlowDescriptionRule,
    ChoiceAntiPatternRule,
    # complexity
    FlowComplexityRule,
    # structure
    ProjectStructureRule,
    GlobalConfigRule,
    MonolithicXmlRule,
    PomValidationRule,
    GitHygieneRule,
)


def default_rules() -> list[Rule]:
    """Fresh instances of every built-in rule, in catalogue order."""
    return [cls() for cls in _RULE_CLASSES]


ALL_RULES: list[Rule] = default_rules()


def get_rule_by_id(rule_id: str, rules: Sequence[Rule] = ALL_RULES) -> Rule | None:
    for rule in rules:
        if rule.id == rule_id:
            return rule
    return None


def get_rules_by_category(
    category: RuleCategory | str, rules: Sequence[Rule] = ALL_RULES
) -> list[Rule]:
    wanted = RuleCategory(category)
    return [rule for rule in rules if rule.category is wanted]


def get_all_rule_ids(rules: Sequence[Rule] = ALL_RULES) -> list[str]:
    return [rule.id for rule in rules]


__all__ = [
    "ALL_RULES",
    "BaseRule",
    "Issue",
    "IssueType",
    "ProjectRule",
    "Rule",
    "RuleCategory",
    "RuleConfig",
    "RuleScope",
    "ScanState",
    "Severity",
    "ValidationContext",
    "default_rules",
    "get_all_rule_ids",
    "get_rule_by_id",
    "get_rules_by_category",
]
