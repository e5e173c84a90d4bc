"""
Service recommendations.

Maps the lead's goal/business plus the latest utterance to a short list of
marketing services. Rules come from constants.yaml (recommendations section)
and are evaluated in order; a rule fires on its classified label OR on a
keyword in the raw text.
"""

from typing import List, Optional, Sequence

from lead_desk.extraction_ssot import (
    FALLBACK_SUGGESTIONS,
    RECOMMENDATION_RULES,
    RecommendationRule,
)
from lead_desk.lead_context import LeadContext
from lead_desk.logger import logger
from lead_desk.settings import settings


class ServiceRecommender:
    """
    Ordered, deduplicated, capped suggestion list.

    Attributes:
        rules: Rules in evaluation order
        fallback: Suggestions used when no rule fires
        max_suggestions: Cap on the returned list
    """

    def __init__(
        self,
        rules: Sequence[RecommendationRule] = RECOMMENDATION_RULES,
        fallback: Sequence[str] = FALLBACK_SUGGESTIONS,
        max_suggestions: Optional[int] = None,
    ):
        self.rules = tuple(rules)
        self.fallback = tuple(fallback)
        if max_suggestions is None:
            max_suggestions = settings.get_nested("dialogue.max_suggestions", 3)
        self.max_suggestions = max(1, int(max_suggestions))

    def fired_rules(self, context: LeadContext, text: str) -> List[str]:
        """Names of the rules that fire for this turn (for tracing)."""
        text = text if isinstance(text, str) else ""
        return [
            rule.name for rule in self.rules
            if rule.fires(context.goal, context.business, text)
        ]

    def recommend(self, context: LeadContext, text: str) -> List[str]:
        """
        Suggestions for the updated context and the latest utterance.

        Insertion order is first-trigger order; duplicates are dropped before
        the list is cut to `max_suggestions`.
        """
        text = text if isinstance(text, str) else ""
        ideas: List[str] = []

        for rule in self.rules:
            if not rule.fires(context.goal, context.business, text):
                continue
            for suggestion in rule.suggestions:
                if suggestion not in ideas:
                    ideas.append(suggestion)

        if not ideas:
            ideas = list(dict.fromkeys(self.fallback))

        result = ideas[:self.max_suggestions]
        logger.debug("Service ideas crafted", count=len(result), total=len(ideas))
        return result


_default_recommender: Optional[ServiceRecommender] = None


def get_recommender() -> ServiceRecommender:
    """Shared recommender built from constants.yaml and settings."""
    global _default_recommender
    if _default_recommender is None:
        _default_recommender = ServiceRecommender()
    return _default_recommender


def craft_service_ideas(context: LeadContext, text: str) -> List[str]:
    """At most `dialogue.max_suggestions` distinct service suggestions."""
    return get_recommender().recommend(context, text)
