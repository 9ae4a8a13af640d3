"""Tests for flowlint.formatters - table, JSON, SARIF and CSV output."""

from __future__ import annotations

import csv
import io
import json

import pytest

from flowlint.formatters import (
    CSV_HEADER,
    FORMATS,
    format_csv,
    format_json,
    format_report,
    format_sarif,
    format_table,
    report_exit_code,
)
from flowlint.report import FileResult, LintReport, build_summary
from flowlint.rules import ALL_RULES, get_rule_by_id
from flowlint.rules.base import Issue, Severity
from flow_helpers import make_report


def _report_with_details() -> LintReport:
    issues = (
        Issue(
            line=7,
            column=5,
            message="Logger without category",
            rule_id="MULE-006",
            severity=Severity.WARNING,
            suggestion="Add a category attribute",
        ),
        Issue(line=3, message='Flow "x" lacks a description', rule_id="MULE-601", severity=Severity.INFO),
    )
    files = (FileResult(file_path="/p/src/main/mule/a.xml", relative_path="src/main/mule/a.xml", issues=issues),)
    return LintReport(
        project_root="/p",
        timestamp="2024-01-01T00:00:00+00:00",
        duration_ms=3,
        files=files,
        summary=build_summary(files),
    )


class TestTable:
    def test_clean(self) -> None:
        text = format_table(make_report(), color=False)
        assert "No issues found!" in text
        assert "Summary:" not in text
        assert "\x1b[" not in text

    def test_issues_and_summary(self) -> None:
        text = format_table(_report_with_details(), color=False)
        assert "src/main/mule/a.xml" in text
        assert "7:5" in text
        assert "(MULE-006)" in text
        assert "Summary:" in text
        assert "Warnings:" in text


class TestJson:
    def test_round_trips_through_json(self) -> None:
        data = json.loads(format_json(_report_with_details()))
        assert data["summary"]["bySeverity"] == {"error": 0, "warning": 1, "info": 1}
        [file_entry] = data["files"]
        assert file_entry["issues"][0]["suggestion"] == "Add a category attribute"
        assert "column" not in file_entry["issues"][1]


class TestSarif:
    def test_log_shape(self) -> None:
        rule = get_rule_by_id("MULE-006")
        assert rule is not None
        log = json.loads(format_sarif(_report_with_details(), [rule]))
        assert log["version"] == "2.1.0"
        [run] = log["runs"]
        assert run["tool"]["driver"]["name"] == "flowlint"
        assert [r["id"] for r in run["tool"]["driver"]["rules"]] == ["MULE-006"]
        assert run["invocations"][0]["executionSuccessful"] is True

    def test_results(self) -> None:
        log = json.loads(format_sarif(_report_with_details()))
        first, second = log["runs"][0]["results"]
        assert first["ruleId"] == "MULE-006"
        assert first["level"] == "warning"
        assert first["fixes"] == [{"description": {"text": "Add a category attribute"}}]
        region = first["locations"][0]["physicalLocation"]["region"]
        assert region == {"startLine": 7, "startColumn": 5}
        assert second["level"] == "note"
        assert "fixes" not in second

    def test_parse_errors_mark_run_unsuccessful(self) -> None:
        files = (
            FileResult(
                file_path="/p/bad.xml",
                relative_path="bad.xml",
                issues=(Issue(line=1, message="XML parse error", rule_id="PARSE-ERROR", severity=Severity.ERROR),),
                parsed=False,
                parse_error="boom",
            ),
        )
        report = LintReport("/p", "2024-01-01T00:00:00+00:00", 1, files, build_summary(files))
        log = json.loads(format_sarif(report, ALL_RULES))
        assert log["runs"][0]["invocations"][0]["executionSuccessful"] is False


class TestCsv:
    def test_rows(self) -> None:
        rows = list(csv.reader(io.StringIO(format_csv(_report_with_details()))))
        assert tuple(rows[0]) == CSV_HEADER
        assert rows[1] == ["warning", "MULE-006", "src/main/mule/a.xml", "7", "5", "Logger without category"]
        assert rows[2][4] == "0"
        # the embedded quotes survive CSV quoting
        assert rows[2][5] == 'Flow "x" lacks a description'


class TestDispatch:
    @pytest.mark.parametrize("fmt", [f for f in FORMATS if f != "table"])
    def test_known_formats(self, fmt: str) -> None:
        assert format_report(make_report(warnings=1), fmt)

    def test_plain_table(self) -> None:
        text = format_report(make_report(warnings=1), "table", color=False)
        assert "(MULE-102)" in text
        assert "\x1b[" not in text

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown format 'xml'"):
            format_report(make_report(), "xml")


class TestReportExitCode:
    def test_errors(self) -> None:
        assert report_exit_code(make_report(errors=1)) == 1

    def test_warnings(self) -> None:
        report = make_report(warnings=1)
        assert report_exit_code(report) == 0
        assert report_exit_code(report, fail_on_warning=True) == 1

    def test_clean(self) -> None:
        assert report_exit_code(make_report(infos=4), fail_on_warning=True) == 0
