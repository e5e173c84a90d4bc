"""
Centralized constants module.

Loads constants.yaml once and exposes its raw sections. Compiled lexicons
(regular expressions, category tables) are built on top of this module by
lead_desk.extraction_ssot.

Usage:
    from lead_desk.yaml_config.constants import (
        LEAD_FIELDS, QUESTIONS, REPLY_TEMPLATES, SNAPSHOT_LABELS,
        SESSION_INTRO, QUICK_REPLIES,
    )
"""

from typing import Dict, List, Any, Tuple
from pathlib import Path
import yaml
import logging

logger = logging.getLogger(__name__)


def _load_yaml(file_path: Path) -> Dict[str, Any]:
    """Load YAML file safely."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load {file_path}: {e}")
        return {}


_config_dir = Path(__file__).parent
_constants = _load_yaml(_config_dir / "constants.yaml")


# Lead fields in priority order. Drives extraction, questions and the snapshot.
LEAD_FIELDS: Tuple[str, ...] = ("business", "goal", "budget", "timeline", "name", "phone")


# =============================================================================
# EXTRACTION / INTEREST / RECOMMENDATIONS (raw, compiled in extraction_ssot)
# =============================================================================

EXTRACTION_CONFIG: Dict[str, Any] = _constants.get("extraction", {})
INTEREST_CONFIG: Dict[str, Any] = _constants.get("interest", {})
RECOMMENDATIONS_CONFIG: Dict[str, Any] = _constants.get("recommendations", {})


# =============================================================================
# DIALOGUE TEXT
# =============================================================================

# field -> prompt, in the order listed in YAML
QUESTIONS: Dict[str, str] = {
    entry["field"]: entry["prompt"]
    for entry in _constants.get("questions", [])
    if isinstance(entry, dict) and "field" in entry and "prompt" in entry
}

_replies = _constants.get("replies", {})

REPLY_TEMPLATES: Dict[str, Any] = {
    "handover": _replies.get("handover", ""),
    "acknowledgements": _replies.get("acknowledgements", {}),
    "ideas_lead_in": _replies.get("ideas_lead_in", ""),
    "bullet": _replies.get("bullet", "• "),
    "roadmap_offer": _replies.get("roadmap_offer", ""),
    "encouragement": _replies.get("encouragement", ""),
    "paragraph_separator": _replies.get("paragraph_separator", "\n\n"),
}

_snapshot = _constants.get("snapshot", {})

SNAPSHOT_LABELS: Dict[str, str] = {
    field_name: _snapshot.get("labels", {}).get(field_name, field_name.capitalize())
    for field_name in LEAD_FIELDS
}
SNAPSHOT_PENDING: str = _snapshot.get("pending", "Pending")

_session = _constants.get("session", {})

SESSION_INTRO: str = _session.get("intro", "")
QUICK_REPLIES: List[str] = list(_session.get("quick_replies", []))


def get_reply_templates() -> Dict[str, Any]:
    """Copy of the reply templates (safe to mutate in tests)."""
    return dict(REPLY_TEMPLATES)
