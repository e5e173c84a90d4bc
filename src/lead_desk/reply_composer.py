"""
Assistant reply composition.

Builds one multi-paragraph Hinglish message from the updated lead context,
the fields captured this turn and the raw utterance:

    1. hot lead           -> handover message only
    2. acknowledgements   -> one sentence per newly captured field
    3. service ideas      -> bulleted list after a lead-in sentence
    4. closing            -> next question / roadmap offer / encouragement

Templates live in constants.yaml (replies section).
"""

from typing import Any, Dict, List, Mapping, Optional

from lead_desk.lead_context import LeadContext
from lead_desk.lead_scoring import InterestLevel
from lead_desk.question_selector import get_next_question
from lead_desk.recommendations import ServiceRecommender, get_recommender
from lead_desk.yaml_config.constants import LEAD_FIELDS, REPLY_TEMPLATES


class ReplyComposer:
    """Turns a finished turn into the assistant's message."""

    def __init__(
        self,
        templates: Optional[Dict[str, Any]] = None,
        recommender: Optional[ServiceRecommender] = None,
    ):
        self.templates = templates or REPLY_TEMPLATES
        self._recommender = recommender

    @property
    def recommender(self) -> ServiceRecommender:
        return self._recommender or get_recommender()

    @property
    def handover_message(self) -> str:
        return self.templates["handover"]

    def acknowledge(self, field_name: str, value: str) -> Optional[str]:
        template = self.templates["acknowledgements"].get(field_name)
        if not template:
            return None
        return template.format(value=value, value_lower=value.lower())

    def format_ideas(self, ideas: List[str]) -> str:
        bullet = self.templates["bullet"]
        lines = [self.templates["ideas_lead_in"]]
        lines.extend(f"{bullet}{idea}" for idea in ideas)
        return "\n".join(lines)

    def compose(
        self,
        context: LeadContext,
        updates: Mapping[str, Any],
        text: str,
    ) -> str:
        """
        Args:
            context: Lead context after this turn
            updates: Fields newly set this turn (extra keys are ignored)
            text: Raw user utterance

        Returns:
            Message text, paragraphs separated by a blank line
        """
        if context.interest_level is InterestLevel.HOT:
            return self.handover_message

        parts: List[str] = []

        for field_name in LEAD_FIELDS:
            value = updates.get(field_name)
            if value:
                sentence = self.acknowledge(field_name, value)
                if sentence:
                    parts.append(sentence)

        ideas = self.recommender.recommend(context, text)
        if ideas:
            parts.append(self.format_ideas(ideas))

        next_question = get_next_question(context)
        if next_question:
            parts.append(next_question)
        elif context.interest_level is InterestLevel.WARM:
            parts.append(self.templates["roadmap_offer"])
        else:
            parts.append(self.templates["encouragement"])

        return self.templates["paragraph_separator"].join(parts)


_default_composer = ReplyComposer()


def build_assistant_reply(context: LeadContext, updates: Mapping[str, Any], text: str) -> str:
    """Compose the assistant message with the default templates."""
    return _default_composer.compose(context, updates, text)
