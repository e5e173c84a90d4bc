"""
Settings loader for settings.yaml.

The file next to this module is used unless LEAD_DESK_SETTINGS points at
another one. Keys missing from the file fall back to DEFAULTS.

Usage:
    from lead_desk.settings import settings

    delay = settings.dialogue.typing_delay_seconds
    level = settings.get_nested("logging.level", "INFO")
"""

import os
import sys
from pathlib import Path
from typing import Any, List, Mapping, Optional

import yaml


SETTINGS_FILE = Path(__file__).parent / "settings.yaml"
SETTINGS_ENV_VAR = "LEAD_DESK_SETTINGS"

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULTS = {
    "logging": {
        "level": "INFO",
        # Raw user text is logged only when enabled
        "log_turn_text": False,
    },
    "dialogue": {
        "typing_delay_seconds": 0.25,
        "max_suggestions": 3,
        "timestamp_format": "%H:%M",
    },
    "sessions": {
        "ttl_seconds": 3600,
    },
    "api": {
        "title": "GrowthPulse Lead Desk API",
        "version": "1.0.0",
    },
}


class DotDict(dict):
    """dict with attribute access: settings.dialogue.max_suggestions"""

    def __getattr__(self, key: str) -> Any:
        if key not in self:
            raise AttributeError(f"Setting '{key}' not found")
        value = self[key]
        return DotDict(value) if isinstance(value, dict) else value

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value

    def get_nested(self, path: str, default: Any = None) -> Any:
        """Value at a dotted path ('sessions.ttl_seconds'), or default."""
        node: Any = self
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node


def _deep_merge(base: Mapping, override: Mapping) -> dict:
    """New dict: override on top of base, nested sections merged key by key."""
    merged = {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in base.items()
    }
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _settings_path(filepath: Optional[Path]) -> Path:
    if filepath is not None:
        return Path(filepath)
    env_path = os.environ.get(SETTINGS_ENV_VAR)
    return Path(env_path) if env_path else SETTINGS_FILE


def load_settings(filepath: Optional[Path] = None) -> DotDict:
    """
    Load settings.

    Args:
        filepath: YAML file; defaults to $LEAD_DESK_SETTINGS or settings.yaml
                  next to this module

    Returns:
        DotDict of DEFAULTS overlaid with the file's values
    """
    path = _settings_path(filepath)

    if not path.exists():
        print(f"[settings] Settings file not found: {path}, using defaults", file=sys.stderr)
        return DotDict(_deep_merge(DEFAULTS, {}))

    with open(path, "r", encoding="utf-8") as f:
        from_file = yaml.safe_load(f) or {}

    return DotDict(_deep_merge(DEFAULTS, from_file))


def validate_settings(config: DotDict) -> List[str]:
    """
    Check value ranges.

    Returns:
        Problems found, one message per setting (empty when valid)
    """
    problems = []

    level = str(config.get_nested("logging.level", "INFO")).upper()
    if level not in LOG_LEVELS:
        problems.append(f"logging.level has unknown value '{level}'")

    delay = config.get_nested("dialogue.typing_delay_seconds", 0)
    if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
        problems.append("dialogue.typing_delay_seconds must be a number >= 0")

    max_suggestions = config.get_nested("dialogue.max_suggestions", 3)
    if isinstance(max_suggestions, bool) or not isinstance(max_suggestions, int) or max_suggestions < 1:
        problems.append("dialogue.max_suggestions must be an integer >= 1")

    ttl = config.get_nested("sessions.ttl_seconds", 3600)
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
        problems.append("sessions.ttl_seconds must be a number > 0")

    return problems


_settings: Optional[DotDict] = None


def get_settings() -> DotDict:
    """Process-wide settings, loaded and validated on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
        for problem in validate_settings(_settings):
            print(f"[settings] Invalid setting: {problem}", file=sys.stderr)
    return _settings


def reload_settings() -> DotDict:
    """Drop the cached settings and read the file again."""
    global _settings
    _settings = None
    return get_settings()


# For `from lead_desk.settings import settings`
settings = get_settings()
