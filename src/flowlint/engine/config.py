"""Lint configuration: load ``.flowlint.yml`` and resolve per-rule settings."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from flowlint.rules.base import RuleConfig

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAMES: tuple[str, ...] = (".flowlint.yml", ".flowlint.yaml", ".flowlint.json")

DEFAULT_INCLUDE: tuple[str, ...] = ("src/main/mule/**/*.xml",)
DEFAULT_EXCLUDE: tuple[str, ...] = ("**/test/**", "**/*.munit.xml", "**/target/**")

VALID_FORMATS: frozenset[str] = frozenset({"table", "json", "sarif", "csv"})

_KNOWN_KEYS: frozenset[str] = frozenset(
    {
        "rules",
        "include",
        "exclude",
        "fail_on_warning",
        "default_format",
        "quality_gate",
        "quality_gates",
        "max_issues",
    }
)


class ConfigError(Exception):
    """Raised when a configuration file is missing or malformed."""


@dataclass(frozen=True)
class LintConfig:
    """Process-wide lint configuration.

    ``rules`` maps rule IDs to the raw config-file value (a boolean or a
    mapping with ``enabled`` / ``severity`` / ``options``).
    """

    rules: Mapping[str, Any] = field(default_factory=dict)
    include: tuple[str, ...] = DEFAULT_INCLUDE
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    fail_on_warning: bool = False
    default_format: str = "table"
    quality_gate: str | Mapping[str, Any] | None = None
    quality_gates: Mapping[str, Any] = field(default_factory=dict)
    max_issues: int | None = None


def _string_list(data: Mapping[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        msg = f"config: '{key}' must be a list of glob strings"
        raise ConfigError(msg)
    return tuple(value)


def config_from_dict(data: Mapping[str, Any]) -> LintConfig:
    """Validate a parsed config mapping and build a :class:`LintConfig`."""
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    rules = data.get("rules") or {}
    if not isinstance(rules, Mapping):
        msg = "config: 'rules' must be a mapping of rule IDs"
        raise ConfigError(msg)
    for rule_id, raw in rules.items():
        try:
            RuleConfig.from_raw(raw)
        except ValueError as exc:
            msg = f"config: rule '{rule_id}': {exc}"
            raise ConfigError(msg) from exc

    default_format = str(data.get("default_format", "table"))
    if default_format not in VALID_FORMATS:
        msg = f"config: 'default_format' must be one of {sorted(VALID_FORMATS)}, got '{default_format}'"
        raise ConfigError(msg)

    quality_gate = data.get("quality_gate")
    if quality_gate is not None and not isinstance(quality_gate, (str, Mapping)):
        msg = "config: 'quality_gate' must be a gate name or a gate mapping"
        raise ConfigError(msg)

    quality_gates = data.get("quality_gates") or {}
    if not isinstance(quality_gates, Mapping):
        msg = "config: 'quality_gates' must be a mapping of gate names"
        raise ConfigError(msg)

    max_issues = data.get("max_issues")
    if max_issues is not None and (not isinstance(max_issues, int) or isinstance(max_issues, bool)):
        msg = "config: 'max_issues' must be an integer"
        raise ConfigError(msg)

    return LintConfig(
        rules=dict(rules),
        include=_string_list(data, "include", DEFAULT_INCLUDE),
        exclude=_string_list(data, "exclude", DEFAULT_EXCLUDE),
        fail_on_warning=bool(data.get("fail_on_warning", False)),
        default_format=default_format,
        quality_gate=quality_gate,
        quality_gates=dict(quality_gates),
        max_issues=max_issues,
    )


def load_config(path: Path) -> LintConfig:
    """Read a YAML or JSON config file.

    JSON is parsed by the YAML loader as well.  An empty file yields defaults.

    Raises
    ------
    ConfigError
        When the file cannot be read or its contents are invalid.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        msg = f"Cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Invalid config file {path}: {exc}"
        raise ConfigError(msg) from exc

    if data is None:
        return LintConfig()
    if not isinstance(data, Mapping):
        msg = f"{path.name} must be a mapping"
        raise ConfigError(msg)

    logger.debug("Loaded config from %s", path)
    return config_from_dict(data)


def find_config(start_dir: Path) -> Path | None:
    """Return the first known config file in *start_dir*, if any."""
    for name in CONFIG_FILENAMES:
        candidate = start_dir / name
        if candidate.is_file():
            return candidate
    return None


def resolve_rule_config(config: LintConfig | None, rule_id: str) -> RuleConfig:
    """Effective :class:`RuleConfig` for *rule_id*; unlisted rules are enabled."""
    if config is None or rule_id not in config.rules:
        return RuleConfig()
    return RuleConfig.from_raw(config.rules[rule_id])
