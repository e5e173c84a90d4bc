"""YAML-backed constants for Lead Desk."""

from .constants import (
    LEAD_FIELDS,
    QUESTIONS,
    REPLY_TEMPLATES,
    SNAPSHOT_LABELS,
    SNAPSHOT_PENDING,
    SESSION_INTRO,
    QUICK_REPLIES,
)

__all__ = [
    "LEAD_FIELDS",
    "QUESTIONS",
    "REPLY_TEMPLATES",
    "SNAPSHOT_LABELS",
    "SNAPSHOT_PENDING",
    "SESSION_INTRO",
    "QUICK_REPLIES",
]
