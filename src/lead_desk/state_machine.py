"""
Dialogue state transition.

The lead's state is the LeadContext itself; there is no separate state enum.
`advance()` is a pure reducer: (context, utterance) -> TurnResult. It never
mutates its input, so a caller either sees the whole turn or nothing.

Terminal condition: all six fields filled and interest HOT. From there every
reply is the handover message, whatever the user writes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from lead_desk.extractors import extract_fields
from lead_desk.lead_context import LeadContext
from lead_desk.lead_scoring import InterestLevel, detect_interest_level
from lead_desk.reply_composer import ReplyComposer, build_assistant_reply


@dataclass(frozen=True)
class TurnResult:
    """
    Outcome of one user turn.

    Attributes:
        context: Lead context after the turn
        reply: Assistant message text
        updates: Fields newly set this turn, in field order; includes
                 "interest_level" when the level changed
        previous: Lead context before the turn
    """
    context: LeadContext
    reply: str
    updates: Dict[str, Any] = field(default_factory=dict)
    previous: Optional[LeadContext] = None

    @property
    def captured_fields(self):
        return [name for name in self.updates if name != "interest_level"]

    @property
    def interest_changed(self) -> bool:
        return "interest_level" in self.updates

    @property
    def is_handover(self) -> bool:
        return self.context.interest_level is InterestLevel.HOT


def is_terminal(context: LeadContext) -> bool:
    """All fields captured and the lead handed over."""
    return context.is_complete and context.interest_level is InterestLevel.HOT


def advance(
    context: LeadContext,
    utterance: str,
    composer: Optional[ReplyComposer] = None,
) -> TurnResult:
    """
    Apply one user utterance.

    1. extract values for fields still empty
    2. merge them into a fresh context
    3. classify interest against the previous level
    4. compose the reply from (new context, diff, utterance)
    """
    found = extract_fields(utterance, context)
    merged = context.merge(found)

    interest_level = detect_interest_level(utterance, context.interest_level)
    updates: Dict[str, Any] = dict(found)
    if interest_level is not context.interest_level:
        updates["interest_level"] = interest_level
        merged = merged.merge({}, interest_level=interest_level)

    if composer is not None:
        reply = composer.compose(merged, updates, utterance)
    else:
        reply = build_assistant_reply(merged, updates, utterance)

    return TurnResult(context=merged, reply=reply, updates=updates, previous=context)
