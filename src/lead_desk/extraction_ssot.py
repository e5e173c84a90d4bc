"""
Centralized extraction rules.

Single source of truth for every keyword lexicon used by the field
extractors, the interest classifier and the recommendation engine.

Architecture:
    constants.yaml
         |
         v
    yaml_config/constants.py (loads YAML)
         |
         v
    extraction_ssot.py (THIS MODULE - compiles & validates)
         |
         v
    +--------------------+------------------+---------------------+
    |                    |                  |                     |
    v                    v                  v                     v
extractors/          lead_scoring.py   recommendations.py   reply_composer.py
field_extractors.py

Usage:
    from lead_desk.extraction_ssot import (
        GOAL_CATEGORIES,
        classify,
        RECOMMENDATION_RULES,
    )

    goal = classify("Mujhe brand awareness badhani hai", GOAL_CATEGORIES)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Pattern, Sequence, Tuple
import logging
import re

from lead_desk.yaml_config.constants import (
    EXTRACTION_CONFIG,
    INTEREST_CONFIG,
    RECOMMENDATIONS_CONFIG,
)

logger = logging.getLogger(__name__)

FLAGS = re.IGNORECASE


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class KeywordCategory:
    """One entry of an ordered keyword classifier."""
    label: str
    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class NameRules:
    """Rules for pulling a person name out of a self-introduction."""
    lead_in: Pattern[str]
    max_tokens: int
    terminators: FrozenSet[str]
    non_names: FrozenSet[str]


@dataclass(frozen=True)
class RecommendationRule:
    """
    Suggestion rule: fires when the lead's classified goal/business equals the
    rule's label OR the raw utterance matches its keyword pattern.
    """
    name: str
    pattern: Pattern[str]
    suggestions: Tuple[str, ...]
    goal: Optional[str] = None
    business: Optional[str] = None

    def fires(self, goal: Optional[str], business: Optional[str], text: str) -> bool:
        if self.goal is not None and goal == self.goal:
            return True
        if self.business is not None and business == self.business:
            return True
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class InterestRules:
    hot_phrases: Tuple[str, ...]
    hot_pattern: Pattern[str]
    warm_pattern: Pattern[str]
    badges: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# BUILDERS
# =============================================================================

def _compile(pattern: Any, where: str) -> Pattern[str]:
    if not isinstance(pattern, str) or not pattern:
        raise ValueError(f"{where}: pattern must be a non-empty string")
    try:
        return re.compile(pattern, FLAGS)
    except re.error as e:
        raise ValueError(f"{where}: invalid regular expression {pattern!r}: {e}") from e


def build_categories(entries: Sequence[Dict[str, Any]], where: str) -> Tuple[KeywordCategory, ...]:
    """
    Build an ordered classifier from YAML entries of the form
    {label: ..., pattern: ...}.

    Raises:
        ValueError: If an entry has no label or an invalid pattern
    """
    categories = []
    for index, entry in enumerate(entries or []):
        entry_where = f"{where}[{index}]"
        if not isinstance(entry, dict) or not entry.get("label"):
            raise ValueError(f"{entry_where}: entry must define a label")
        categories.append(
            KeywordCategory(label=str(entry["label"]), pattern=_compile(entry.get("pattern"), entry_where))
        )
    return tuple(categories)


def build_name_rules(config: Dict[str, Any]) -> NameRules:
    max_tokens = config.get("max_tokens", 3)
    if not isinstance(max_tokens, int) or max_tokens < 1:
        raise ValueError("extraction.name.max_tokens must be an integer >= 1")
    return NameRules(
        lead_in=_compile(config.get("lead_in_pattern"), "extraction.name.lead_in_pattern"),
        max_tokens=max_tokens,
        terminators=frozenset(str(w).lower() for w in config.get("terminators", [])),
        non_names=frozenset(str(w).lower() for w in config.get("non_names", [])),
    )


def build_interest_rules(config: Dict[str, Any]) -> InterestRules:
    phrases = tuple(str(p).lower() for p in config.get("hot_phrases", []) if p)
    if not phrases:
        raise ValueError("interest.hot_phrases must not be empty")
    # Anchored at a word start: "ready" must not fire inside "already"
    hot_pattern = re.compile(
        r"(?<!\w)(?:" + "|".join(re.escape(p) for p in phrases) + ")",
        FLAGS,
    )
    return InterestRules(
        hot_phrases=phrases,
        hot_pattern=hot_pattern,
        warm_pattern=_compile(config.get("warm_pattern"), "interest.warm_pattern"),
        badges=dict(config.get("badges", {})),
    )


def build_recommendation_rules(entries: Sequence[Dict[str, Any]]) -> Tuple[RecommendationRule, ...]:
    rules = []
    for index, entry in enumerate(entries or []):
        where = f"recommendations.rules[{index}]"
        if not isinstance(entry, dict):
            raise ValueError(f"{where}: rule must be a mapping")
        suggestions = tuple(str(s) for s in entry.get("suggestions", []) if s)
        if not suggestions:
            raise ValueError(f"{where}: rule must list at least one suggestion")
        rules.append(
            RecommendationRule(
                name=str(entry.get("name", f"rule_{index}")),
                pattern=_compile(entry.get("pattern"), where),
                suggestions=suggestions,
                goal=entry.get("goal"),
                business=entry.get("business"),
            )
        )
    return tuple(rules)


# =============================================================================
# LOAD AT IMPORT TIME
# =============================================================================

_business = EXTRACTION_CONFIG.get("business", {})

BUSINESS_EXPLICIT_PATTERN: Pattern[str] = _compile(
    _business.get("explicit_pattern"), "extraction.business.explicit_pattern"
)
BUSINESS_CATEGORIES = build_categories(
    _business.get("categories", []), "extraction.business.categories"
)
GOAL_CATEGORIES = build_categories(
    EXTRACTION_CONFIG.get("goal", {}).get("categories", []), "extraction.goal.categories"
)
TIMELINE_CATEGORIES = build_categories(
    EXTRACTION_CONFIG.get("timeline", {}).get("categories", []), "extraction.timeline.categories"
)
NAME_RULES: NameRules = build_name_rules(EXTRACTION_CONFIG.get("name", {}))

INTEREST_RULES: InterestRules = build_interest_rules(INTEREST_CONFIG)

RECOMMENDATION_RULES = build_recommendation_rules(RECOMMENDATIONS_CONFIG.get("rules", []))
FALLBACK_SUGGESTIONS: Tuple[str, ...] = tuple(RECOMMENDATIONS_CONFIG.get("fallback", []))

# Label sets, handy for validation and tests
GOAL_LABELS: List[str] = [c.label for c in GOAL_CATEGORIES]
TIMELINE_LABELS: List[str] = [c.label for c in TIMELINE_CATEGORIES]
BUSINESS_LABELS: List[str] = [c.label for c in BUSINESS_CATEGORIES]

logger.debug(
    "Extraction rules loaded: %d business, %d goal, %d timeline, %d recommendation rules",
    len(BUSINESS_CATEGORIES), len(GOAL_CATEGORIES), len(TIMELINE_CATEGORIES), len(RECOMMENDATION_RULES),
)


# =============================================================================
# HELPERS
# =============================================================================

def classify(text: str, categories: Sequence[KeywordCategory]) -> Optional[str]:
    """Label of the first category matching text, or None."""
    for category in categories:
        if category.matches(text):
            return category.label
    return None
