"""Project-structure rules.

MULE-802 and MULE-803 inspect the project tree from inside the per-file pass
and report once per scan.  PROJ-001 and PROJ-002 are project-scope rules run
once by the orchestrator after all files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from flowlint.rules.base import BaseRule, IssueType, ProjectRule, RuleCategory, Severity

if TYPE_CHECKING:
    from flowlint.core.document import Document
    from flowlint.rules.base import Issue, ValidationContext

logger = logging.getLogger(__name__)

REQUIRED_DIRS: tuple[str, ...] = ("src/main/mule", "src/main/resources")
RECOMMENDED_DIRS: tuple[str, ...] = (
    "src/main/resources/dwl",
    "src/main/resources/api",
    "src/test/munit",
)
GITIGNORE_ENTRIES: tuple[str, ...] = ("target/", ".project", ".classpath", ".tooling-project")


# ---------------------------------------------------------------------------
# Per-file structure rules
# ---------------------------------------------------------------------------


class ProjectStructureRule(BaseRule):
    """MULE-802: standard source and resource directories exist."""

    id = "MULE-802"
    name = "Project Structure"
    description = "Validate standard MuleSoft project folder structure"
    severity = Severity.WARNING
    category = RuleCategory.STRUCTURE

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        if not context.scan_state.first_time(self.id):
            return []

        root = Path(context.project_root)
        issues: list[Issue] = [
            self.create_file_issue(
                f"Missing required directory: {rel}",
                suggestion=f"Create directory: mkdir -p {rel}",
                severity=Severity.ERROR,
            )
            for rel in REQUIRED_DIRS
            if not (root / rel).exists()
        ]
        issues.extend(
            self.create_file_issue(
                f"Missing recommended directory: {rel}",
                suggestion=f"Consider creating: {rel}",
                severity=Severity.INFO,
            )
            for rel in RECOMMENDED_DIRS
            if not (root / rel).exists()
        )
        return issues


class GlobalConfigRule(BaseRule):
    """MULE-803: ``src/main/mule`` holds a global configuration file."""

    id = "MULE-803"
    name = "Global Config File"
    description = "Project should have global.xml with shared configurations"
    severity = Severity.WARNING
    category = RuleCategory.STRUCTURE

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        mule_dir = Path(context.project_root) / "src" / "main" / "mule"
        if not mule_dir.is_dir() or not context.scan_state.first_time(self.id):
            return []

        has_global = any(
            "global" in child.name.lower() and child.suffix == ".xml" for child in mule_dir.iterdir()
        )
        if has_global:
            return []
        return [
            self.create_file_issue(
                "Missing global.xml configuration file",
                suggestion="Create src/main/mule/global.xml for shared configurations",
            )
        ]


class MonolithicXmlRule(BaseRule):
    """MULE-804: a single file holds a bounded number of flows."""

    id = "MULE-804"
    name = "Monolithic XML File"
    description = "XML files should not exceed recommended flow count"
    severity = Severity.WARNING
    category = RuleCategory.STRUCTURE

    def validate(self, document: Document, context: ValidationContext) -> list[Issue]:
        max_flows = self.get_option(context, "maxFlows", 10)
        total = self.count(document, "//flow | //sub-flow")
        if total <= max_flows:
            return []
        return [
            self.create_file_issue(
                f"File has {total} flows/sub-flows - consider splitting",
                suggestion="Split into multiple XML files by domain or function",
            )
        ]


# ---------------------------------------------------------------------------
# Project-scope rules
# ---------------------------------------------------------------------------


class PomValidationRule(ProjectRule):
    """PROJ-001: ``pom.xml`` exists and declares the build plugins."""

    id = "PROJ-001"
    name = "POM Validation"
    description = "Validates pom.xml existence and content"
    severity = Severity.ERROR
    category = RuleCategory.STRUCTURE
    issue_type = IssueType.BUG

    def validate_project(self, context: ValidationContext) -> list[Issue]:
        root = Path(context.project_root)
        pom = root / "pom.xml"
        if not pom.exists():
            return [self.create_project_issue("Missing pom.xml file in project root")]

        try:
            content = pom.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read %s: %s", pom, exc)
            return [
                self.create_project_issue(f"Error reading pom.xml: {exc}", severity=Severity.WARNING)
            ]

        issues: list[Issue] = []
        if "mule-maven-plugin" not in content:
            issues.append(
                self.create_project_issue(
                    "Missing mule-maven-plugin in pom.xml",
                    suggestion="Add mule-maven-plugin to build configuration",
                )
            )

        munit_dir = root / "src" / "test" / "munit"
        has_tests = munit_dir.is_dir() and any(munit_dir.iterdir())
        if has_tests and "munit-maven-plugin" not in content:
            issues.append(
                self.create_project_issue(
                    "Missing munit-maven-plugin but test files exist",
                    suggestion="Add munit-maven-plugin to run tests",
                    severity=Severity.WARNING,
                )
            )
        return issues


class GitHygieneRule(ProjectRule):
    """PROJ-002: git repositories ignore build output and IDE files."""

    id = "PROJ-002"
    name = "Git Hygiene"
    description = "Validates .gitignore existence and content"
    severity = Severity.WARNING
    category = RuleCategory.STRUCTURE

    def validate_project(self, context: ValidationContext) -> list[Issue]:
        root = Path(context.project_root)
        gitignore = root / ".gitignore"
        if not gitignore.exists():
            # Not a git checkout: nothing to say.
            if (root / ".git").exists():
                return [self.create_project_issue("Missing .gitignore file in git repository")]
            return []

        try:
            lines = [line.strip() for line in gitignore.read_text(encoding="utf-8").splitlines()]
        except (OSError, UnicodeDecodeError) as exc:
            return [self.create_project_issue(f"Error reading .gitignore: {exc}")]

        missing = [entry for entry in GITIGNORE_ENTRIES if not any(line.startswith(entry) for line in lines)]
        if not missing:
            return []
        return [
            self.create_project_issue(
                f"Missing standard .gitignore entries: {', '.join(missing)}",
                suggestion="Add standard Mule/Java ignore patterns",
                severity=Severity.INFO,
            )
        ]
