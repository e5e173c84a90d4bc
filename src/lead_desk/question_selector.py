"""Next qualification question: the prompt for the first missing lead field."""

from typing import List, Optional

from lead_desk.lead_context import LeadContext
from lead_desk.yaml_config.constants import LEAD_FIELDS, QUESTIONS


def missing_fields(context: LeadContext) -> List[str]:
    """Empty fields in priority order: business, goal, budget, timeline, name, phone."""
    return [name for name in LEAD_FIELDS if not context.is_filled(name)]


def is_complete(context: LeadContext) -> bool:
    return not missing_fields(context)


def get_next_question(context: LeadContext) -> Optional[str]:
    """Prompt for the first missing field, or None once all six are captured."""
    for name in missing_fields(context):
        prompt = QUESTIONS.get(name)
        if prompt:
            return prompt
    return None
