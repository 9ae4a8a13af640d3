"""Engine - configuration, metric collection and the lint orchestrator."""

from flowlint.engine.collector import collect_file_metrics, detect_environments, file_complexity_bucket
from flowlint.engine.config import (
    CONFIG_FILENAMES,
    ConfigError,
    LintConfig,
    config_from_dict,
    find_config,
    load_config,
    resolve_rule_config,
)
from flowlint.engine.linter import PARSE_ERROR_RULE_ID, LintEngine, LintError

__all__ = [
    "CONFIG_FILENAMES",
    "PARSE_ERROR_RULE_ID",
    "ConfigError",
    "LintConfig",
    "LintEngine",
    "LintError",
    "collect_file_metrics",
    "config_from_dict",
    "detect_environments",
    "file_complexity_bucket",
    "find_config",
    "load_config",
    "resolve_rule_config",
]
