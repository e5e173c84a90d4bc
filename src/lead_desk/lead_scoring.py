"""
Interest scoring for Lead Desk.

Classifies how ready a lead is to talk to a human. The level only ever moves
up: cold -> warm -> hot. A hot lead is handed over to the sales team.

Usage:
    from lead_desk.lead_scoring import InterestLevel, detect_interest_level

    level = detect_interest_level("ready, let's start", InterestLevel.COLD)
    assert level is InterestLevel.HOT
"""

from enum import Enum
from typing import Dict, Union

from lead_desk.extraction_ssot import INTEREST_RULES


class InterestLevel(str, Enum):
    """
    How close the lead is to converting.

    COLD: exploring, no buying signal yet
    WARM: asking about budget, pricing or a proposal
    HOT: explicit go-ahead, conversation is handed over to a human
    """
    COLD = "cold"
    WARM = "warm"
    HOT = "hot"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @classmethod
    def coerce(cls, value: Union["InterestLevel", str, None]) -> "InterestLevel":
        """Accept an InterestLevel or its string value; anything else is COLD."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.COLD


_RANK: Dict[InterestLevel, int] = {
    InterestLevel.COLD: 0,
    InterestLevel.WARM: 1,
    InterestLevel.HOT: 2,
}


def _normalize(text: str) -> str:
    # Phones autocorrect "let's" to "let’s"
    return text.replace("’", "'").lower()


def is_hot_utterance(text: str) -> bool:
    """True when the utterance contains one of the hot hand-over phrases."""
    if not isinstance(text, str):
        return False
    return INTEREST_RULES.hot_pattern.search(_normalize(text)) is not None


def detect_interest_level(
    text: str,
    current: Union[InterestLevel, str] = InterestLevel.COLD,
) -> InterestLevel:
    """
    New interest level for an utterance.

    Order of checks:
    1. hot phrase present -> HOT
    2. already HOT -> HOT
    3. budget / pricing / proposal question -> WARM (never below current)
    4. otherwise the current level

    Args:
        text: Raw user utterance
        current: Interest level before this utterance

    Returns:
        InterestLevel, never lower than current
    """
    current = InterestLevel.coerce(current)

    if is_hot_utterance(text):
        return InterestLevel.HOT

    if current is InterestLevel.HOT:
        return current

    if isinstance(text, str) and INTEREST_RULES.warm_pattern.search(_normalize(text)):
        return InterestLevel.WARM

    return current


def interest_badge(level: Union[InterestLevel, str]) -> str:
    """Human label shown next to the lead snapshot."""
    level = InterestLevel.coerce(level)
    return INTEREST_RULES.badges.get(level.value, level.value.capitalize())
