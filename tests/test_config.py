"""Tests for flowlint.engine.config - YAML/JSON configuration loading."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from flowlint.engine.config import (
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    ConfigError,
    LintConfig,
    config_from_dict,
    find_config,
    load_config,
    resolve_rule_config,
)
from flowlint.rules.base import Severity

if TYPE_CHECKING:
    from pathlib import Path


class TestLoadConfig:
    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / ".flowlint.yml"
        path.write_text(
            "rules:\n"
            "  MULE-601: false\n"
            "  MULE-804:\n"
            "    severity: error\n"
            "    options:\n"
            "      maxFlows: 3\n"
            "include:\n"
            "  - 'flows/**/*.xml'\n"
            "fail_on_warning: true\n"
            "default_format: json\n"
            "quality_gate: Strict\n"
            "max_issues: 50\n"
        )
        config = load_config(path)
        assert config.rules["MULE-601"] is False
        assert config.include == ("flows/**/*.xml",)
        assert config.exclude == DEFAULT_EXCLUDE
        assert config.fail_on_warning is True
        assert config.default_format == "json"
        assert config.quality_gate == "Strict"
        assert config.max_issues == 50

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / ".flowlint.json"
        path.write_text('{"rules": {"MULE-002": {"enabled": false}}, "exclude": []}')
        config = load_config(path)
        assert resolve_rule_config(config, "MULE-002").enabled is False
        assert config.exclude == ()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / ".flowlint.yml"
        path.write_text("")
        assert load_config(path) == LintConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / ".flowlint.yml"
        path.write_text("rules: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / ".flowlint.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(path)


class TestConfigFromDict:
    def test_defaults(self) -> None:
        config = config_from_dict({})
        assert config.include == DEFAULT_INCLUDE
        assert config.default_format == "table"
        assert config.quality_gate is None

    @pytest.mark.parametrize(
        ("data", "key"),
        [
            ({"rules": ["MULE-001"]}, "rules"),
            ({"rules": {"MULE-001": {"severity": "fatal"}}}, "MULE-001"),
            ({"include": [1, 2]}, "include"),
            ({"default_format": "html"}, "default_format"),
            ({"quality_gate": 5}, "quality_gate"),
            ({"quality_gates": ["a"]}, "quality_gates"),
            ({"max_issues": "ten"}, "max_issues"),
        ],
    )
    def test_invalid_values_name_the_key(self, data: dict[str, object], key: str) -> None:
        with pytest.raises(ConfigError, match=key):
            config_from_dict(data)

    def test_string_include_becomes_tuple(self) -> None:
        assert config_from_dict({"include": "*.xml"}).include == ("*.xml",)

    def test_unknown_keys_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="flowlint.engine.config"):
            config_from_dict({"colour": "red"})
        assert "colour" in caplog.text


class TestFindConfig:
    def test_prefers_yml(self, tmp_path: Path) -> None:
        (tmp_path / ".flowlint.json").write_text("{}")
        (tmp_path / ".flowlint.yml").write_text("")
        assert find_config(tmp_path) == tmp_path / ".flowlint.yml"

    def test_none(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) is None


class TestResolveRuleConfig:
    def test_unlisted_rule_enabled(self) -> None:
        config = resolve_rule_config(LintConfig(), "MULE-001")
        assert config.enabled
        assert config.severity is None

    def test_no_config(self) -> None:
        assert resolve_rule_config(None, "MULE-001").enabled

    def test_severity_override(self) -> None:
        config = resolve_rule_config(LintConfig(rules={"MULE-001": {"severity": "info"}}), "MULE-001")
        assert config.severity is Severity.INFO
