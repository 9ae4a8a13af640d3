"""Lint orchestrator: resolve the project root, parse files, run rules, assemble the report."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from flowlint.core.discovery import find_project_root, scan_directory
from flowlint.core.document import parse_xml
from flowlint.engine.collector import collect_file_metrics, detect_environments
from flowlint.engine.config import LintConfig, resolve_rule_config
from flowlint.report import (
    PROJECT_STRUCTURE_PATH,
    FileResult,
    LintReport,
    ProjectMetrics,
    build_summary,
)
from flowlint.rules.base import (
    Issue,
    RuleCategory,
    RuleScope,
    ScanState,
    Severity,
    ValidationContext,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from flowlint.core.discovery import ScannedFile
    from flowlint.core.document import Document, ParseResult
    from flowlint.rules.base import Rule

logger = logging.getLogger(__name__)

PARSE_ERROR_RULE_ID = "PARSE-ERROR"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when a scan cannot start (e.g. the target path does not exist)."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_error_issue(parsed: ParseResult) -> Issue:
    # Always line 1; the parser position is kept in the message.
    return Issue(
        line=1,
        message=parsed.error or "Failed to parse XML",
        rule_id=PARSE_ERROR_RULE_ID,
        severity=Severity.ERROR,
    )


def _relative_to(path: Path, root: Path) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class LintEngine:
    """Runs a rule set over a file or project directory.

    Rules are shared across scans; anything a rule needs to remember within
    one scan lives in the :class:`ScanState` created per :meth:`scan`.
    """

    def __init__(self, rules: Sequence[Rule], config: LintConfig | None = None) -> None:
        self.rules = list(rules)
        self.config = config or LintConfig()

    def enabled_rules(self) -> list[Rule]:
        """Rules whose resolved configuration is enabled, in registration order."""
        return [r for r in self.rules if resolve_rule_config(self.config, r.id).enabled]

    # -- public entry points --

    def scan(self, target: Path | str) -> LintReport:
        """Lint *target* (a file or a directory) and return the report.

        Raises
        ------
        LintError
            When *target* does not exist.
        """
        start = time.monotonic()
        timestamp = datetime.now(timezone.utc).isoformat()
        target_path = Path(target).resolve()
        if not target_path.exists():
            msg = f"Path does not exist: {target_path}"
            raise LintError(msg)

        # Step 1: root resolution.
        standalone = False
        if target_path.is_file():
            detected = find_project_root(target_path.parent)
            if detected is not None:
                project_root = detected
            else:
                project_root = target_path.parent
                standalone = True
        else:
            project_root = target_path

        logger.info("Scanning %s%s", project_root, " (standalone)" if standalone else "")
        logger.debug("Rules enabled: %d", len(self.enabled_rules()))

        # Step 2: discovery.
        try:
            files = scan_directory(target_path, self.config.include, self.config.exclude)
        except FileNotFoundError as exc:
            msg = f"Cannot scan {target_path}: {exc}"
            raise LintError(msg) from exc
        logger.debug("Found %d files to scan", len(files))

        # Step 3: per-file processing.
        state = ScanState()
        metrics = ProjectMetrics()
        results = [self._process_file(f, project_root, standalone, state, metrics) for f in files]

        # Step 4: project-scope pass.
        if not standalone:
            project_issues = self._run_project_rules(project_root, state)
            if project_issues:
                results.append(
                    FileResult(
                        file_path=str(project_root / "mule-artifact.json"),
                        relative_path=PROJECT_STRUCTURE_PATH,
                        issues=tuple(project_issues),
                    )
                )

        for env in detect_environments(project_root):
            if env not in metrics.environments:
                metrics.environments.append(env)

        # Step 5: report assembly.
        summary = build_summary(results)
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Scan complete in %dms: %d errors, %d warnings",
            duration_ms,
            summary.errors,
            summary.warnings,
        )
        return LintReport(
            project_root=str(project_root),
            timestamp=timestamp,
            duration_ms=duration_ms,
            files=tuple(results),
            summary=summary,
            metrics=metrics,
        )

    def scan_content(self, content: str, file_path: str) -> list[Issue]:
        """Lint an in-memory document as a standalone file."""
        parsed = parse_xml(content, file_path)
        if parsed.document is None:
            return [_parse_error_issue(parsed)]
        project_root = Path(file_path).parent
        issues, _failed = self._run_rules(
            parsed.document,
            file_path=file_path,
            relative_path=Path(file_path).name,
            project_root=project_root,
            standalone=True,
            state=ScanState(),
        )
        return issues

    # -- per-file pass --

    def _process_file(
        self,
        file: ScannedFile,
        project_root: Path,
        standalone: bool,
        state: ScanState,
        metrics: ProjectMetrics,
    ) -> FileResult:
        relative_path = _relative_to(file.absolute_path, project_root)
        file_path = str(file.absolute_path)
        logger.debug("Processing %s", relative_path)

        try:
            content = file.absolute_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            message = f"Error reading file: {exc}"
            logger.warning("Cannot read %s: %s", relative_path, exc)
            issue = Issue(line=1, message=message, rule_id=PARSE_ERROR_RULE_ID, severity=Severity.ERROR)
            return FileResult(
                file_path=file_path,
                relative_path=relative_path,
                issues=(issue,),
                parsed=False,
                parse_error=message,
            )

        parsed = parse_xml(content, relative_path)
        if parsed.document is None:
            logger.debug("Parse failed for %s: %s", relative_path, parsed.error)
            return FileResult(
                file_path=file_path,
                relative_path=relative_path,
                issues=(_parse_error_issue(parsed),),
                parsed=False,
                parse_error=parsed.error,
            )

        issues, failed = self._run_rules(
            parsed.document,
            file_path=file_path,
            relative_path=relative_path,
            project_root=project_root,
            standalone=standalone,
            state=state,
        )
        metrics.merge(collect_file_metrics(parsed.document, relative_path))

        return FileResult(
            file_path=file_path,
            relative_path=relative_path,
            issues=tuple(issues),
            rule_errors=tuple(failed),
        )

    def _run_rules(
        self,
        document: Document,
        *,
        file_path: str,
        relative_path: str,
        project_root: Path,
        standalone: bool,
        state: ScanState,
    ) -> tuple[list[Issue], list[str]]:
        """Run enabled per-file rules; return (issues, IDs of rules that raised)."""
        issues: list[Issue] = []
        failed: list[str] = []

        for rule in self.enabled_rules():
            if rule.scope is RuleScope.PROJECT:
                continue
            if standalone and rule.category is RuleCategory.STRUCTURE:
                continue

            rule_config = resolve_rule_config(self.config, rule.id)
            context = ValidationContext(
                file_path=file_path,
                relative_path=relative_path,
                project_root=str(project_root),
                config=rule_config,
                scan_state=state,
            )
            try:
                found = rule.validate(document, context)
            except Exception as exc:  # one failing rule must not abort the scan
                logger.warning("Rule %s failed on %s: %s", rule.id, relative_path, exc)
                logger.debug("Rule %s traceback", rule.id, exc_info=True)
                failed.append(rule.id)
                continue

            if rule_config.severity is not None:
                found = [issue.with_severity(rule_config.severity) for issue in found]
            issues.extend(found)

        return issues, failed

    # -- project pass --

    def _run_project_rules(self, project_root: Path, state: ScanState) -> list[Issue]:
        issues: list[Issue] = []
        for rule in self.enabled_rules():
            if rule.scope is not RuleScope.PROJECT:
                continue
            rule.reset()
            rule_config = resolve_rule_config(self.config, rule.id)
            context = ValidationContext(
                file_path=str(project_root / "pom.xml"),
                relative_path="Project Root",
                project_root=str(project_root),
                config=rule_config,
                scan_state=state,
            )
            try:
                found = rule.validate(None, context)  # type: ignore[arg-type]
            except Exception as exc:  # isolated like per-file rules
                logger.warning("Project rule %s failed: %s", rule.id, exc)
                logger.debug("Project rule %s traceback", rule.id, exc_info=True)
                continue
            if rule_config.severity is not None:
                found = [issue.with_severity(rule_config.severity) for issue in found]
            issues.extend(found)
        return issues
