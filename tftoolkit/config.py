"""
tftoolkit Configuration

Optional JSON configuration file loaded with `--config`. Every key is
optional; missing keys keep their defaults.

Example:
    {
        "plan_file": ".tfplan.out",
        "diff_patterns": ["*.tf", "*.tfvars", "*.yaml", "*.yml"],
        "cost_thresholds": {"resource_alert": 1000},
        "color": false
    }
"""

import json
import os
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from .errors import ConfigurationError

DEFAULT_PLAN_FILE = ".tfplan.out"
DEFAULT_DIFF_PATTERNS = ["*.tf", "*.yaml", "*.yml"]


@dataclass
class CostThresholds:
    """Monthly cost levels at which cost figures turn yellow or red"""
    resource_warn: float = 100
    resource_alert: float = 500
    total_warn: float = 1000
    total_alert: float = 10000


@dataclass
class ToolkitConfig:
    """Settings shared by all tftk commands"""
    plan_file: str = DEFAULT_PLAN_FILE
    diff_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_DIFF_PATTERNS))
    cost_thresholds: CostThresholds = field(default_factory=CostThresholds)
    color: bool = True


def load_config(path: Optional[str] = None) -> ToolkitConfig:
    """Load configuration from a JSON file, or return the defaults when no path is given"""
    if not path:
        return ToolkitConfig()

    if not os.path.exists(path):
        raise ConfigurationError(f"Config file '{path}' not found.")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load config file: {e}") from e

    return config_from_dict(data)


def config_from_dict(data: Any) -> ToolkitConfig:
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    config = ToolkitConfig()

    if "plan_file" in data:
        if not isinstance(data["plan_file"], str) or not data["plan_file"]:
            raise ConfigurationError("'plan_file' must be a non-empty string")
        config.plan_file = data["plan_file"]

    if "diff_patterns" in data:
        patterns = data["diff_patterns"]
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ConfigurationError("'diff_patterns' must be a list of strings")
        config.diff_patterns = list(patterns)

    if "cost_thresholds" in data:
        config.cost_thresholds = _parse_thresholds(data["cost_thresholds"])

    if "color" in data:
        if not isinstance(data["color"], bool):
            raise ConfigurationError("'color' must be true or false")
        config.color = data["color"]

    return config


def _parse_thresholds(data: Any) -> CostThresholds:
    if not isinstance(data, dict):
        raise ConfigurationError("'cost_thresholds' must be a JSON object")

    thresholds = CostThresholds()
    values: Dict[str, float] = {}
    for key, value in data.items():
        if not hasattr(thresholds, key):
            raise ConfigurationError(f"Unknown cost threshold: {key}")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"Cost threshold '{key}' must be a number")
        values[key] = value

    for key, value in values.items():
        setattr(thresholds, key, value)
    return thresholds
