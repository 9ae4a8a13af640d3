"""Tests for flowlint.rules.structure - project layout and project-scope rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flowlint.rules.base import RuleConfig, ScanState, Severity, ValidationContext
from flowlint.rules.structure import (
    GitHygieneRule,
    GlobalConfigRule,
    MonolithicXmlRule,
    PomValidationRule,
    ProjectStructureRule,
)
from flow_helpers import mule, parse

if TYPE_CHECKING:
    from pathlib import Path


def _ctx(root: Path, state: ScanState | None = None, **options: object) -> ValidationContext:
    return ValidationContext(
        file_path=str(root / "src" / "main" / "mule" / "a.xml"),
        relative_path="src/main/mule/a.xml",
        project_root=str(root),
        config=RuleConfig(options=options),
        scan_state=state or ScanState(),
    )


EMPTY = parse(mule(""))


# ---------------------------------------------------------------------------
# MULE-802
# ---------------------------------------------------------------------------


class TestProjectStructure:
    def test_missing_directories(self, tmp_path: Path) -> None:
        issues = ProjectStructureRule().validate(EMPTY, _ctx(tmp_path))
        errors = [i.message for i in issues if i.severity is Severity.ERROR]
        infos = [i.message for i in issues if i.severity is Severity.INFO]
        assert errors == [
            "Missing required directory: src/main/mule",
            "Missing required directory: src/main/resources",
        ]
        assert len(infos) == 3

    def test_complete_layout(self, tmp_path: Path) -> None:
        for rel in (
            "src/main/mule",
            "src/main/resources/dwl",
            "src/main/resources/api",
            "src/test/munit",
        ):
            (tmp_path / rel).mkdir(parents=True)
        assert ProjectStructureRule().validate(EMPTY, _ctx(tmp_path)) == []

    def test_once_per_scan(self, tmp_path: Path) -> None:
        state = ScanState()
        rule = ProjectStructureRule()
        assert rule.validate(EMPTY, _ctx(tmp_path, state))
        assert rule.validate(EMPTY, _ctx(tmp_path, state)) == []


# ---------------------------------------------------------------------------
# MULE-803
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_missing_global_file(self, tmp_project: Path) -> None:
        (tmp_project / "src" / "main" / "mule" / "orders.xml").write_text("<mule/>")
        [issue] = GlobalConfigRule().validate(EMPTY, _ctx(tmp_project))
        assert issue.message == "Missing global.xml configuration file"

    def test_global_file_present(self, tmp_project: Path) -> None:
        (tmp_project / "src" / "main" / "mule" / "Global-Config.xml").write_text("<mule/>")
        assert GlobalConfigRule().validate(EMPTY, _ctx(tmp_project)) == []

    def test_no_mule_directory(self, tmp_path: Path) -> None:
        assert GlobalConfigRule().validate(EMPTY, _ctx(tmp_path)) == []


# ---------------------------------------------------------------------------
# MULE-804
# ---------------------------------------------------------------------------


class TestMonolithicXml:
    def test_too_many_flows(self, tmp_path: Path) -> None:
        doc = parse(mule('<flow name="f-flow"/>' * 8 + '<sub-flow name="s-subflow"/>' * 3))
        [issue] = MonolithicXmlRule().validate(doc, _ctx(tmp_path))
        assert issue.message == "File has 11 flows/sub-flows - consider splitting"
        assert issue.line == 1

    def test_max_flows_option(self, tmp_path: Path) -> None:
        doc = parse(mule('<flow name="f-flow"/>' * 3))
        assert MonolithicXmlRule().validate(doc, _ctx(tmp_path, maxFlows=3)) == []
        assert MonolithicXmlRule().validate(doc, _ctx(tmp_path, maxFlows=2))


# ---------------------------------------------------------------------------
# PROJ-001
# ---------------------------------------------------------------------------


class TestPomValidation:
    def test_missing_pom(self, tmp_path: Path) -> None:
        [issue] = PomValidationRule().validate(None, _ctx(tmp_path))
        assert issue.message == "Missing pom.xml file in project root"
        assert issue.severity is Severity.ERROR

    def test_missing_mule_plugin(self, tmp_path: Path) -> None:
        (tmp_path / "pom.xml").write_text("<project/>")
        [issue] = PomValidationRule().validate(None, _ctx(tmp_path))
        assert issue.message == "Missing mule-maven-plugin in pom.xml"

    def test_valid_pom(self, tmp_project: Path) -> None:
        assert PomValidationRule().validate(None, _ctx(tmp_project)) == []

    def test_munit_plugin_required_with_tests(self, tmp_project: Path) -> None:
        munit = tmp_project / "src" / "test" / "munit"
        munit.mkdir(parents=True)
        (munit / "orders-test-suite.xml").write_text("<mule/>")
        [issue] = PomValidationRule().validate(None, _ctx(tmp_project))
        assert issue.severity is Severity.WARNING
        assert "munit-maven-plugin" in issue.message


# ---------------------------------------------------------------------------
# PROJ-002
# ---------------------------------------------------------------------------


class TestGitHygiene:
    def test_not_a_git_checkout(self, tmp_path: Path) -> None:
        assert GitHygieneRule().validate(None, _ctx(tmp_path)) == []

    def test_git_without_gitignore(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        [issue] = GitHygieneRule().validate(None, _ctx(tmp_path))
        assert issue.message == "Missing .gitignore file in git repository"

    def test_missing_entries(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_text("target/\n.project\n")
        [issue] = GitHygieneRule().validate(None, _ctx(tmp_path))
        assert issue.severity is Severity.INFO
        assert issue.message == "Missing standard .gitignore entries: .classpath, .tooling-project"

    def test_complete_gitignore(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_text("target/\n.project\n.classpath\n.tooling-project\n")
        assert GitHygieneRule().validate(None, _ctx(tmp_path)) == []
