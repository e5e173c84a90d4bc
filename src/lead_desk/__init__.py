"""
Lead Desk: rule-based Hinglish lead qualification.

Extracts business, goal, budget, timeline, name and phone from chat
utterances, suggests marketing services and hands hot leads over to a human.
"""

from lead_desk.bot import LeadDeskBot
from lead_desk.lead_context import LeadContext, Message, Sender
from lead_desk.lead_scoring import InterestLevel
from lead_desk.state_machine import TurnResult, advance

__version__ = "1.0.0"

__all__ = [
    "LeadDeskBot",
    "LeadContext",
    "Message",
    "Sender",
    "InterestLevel",
    "TurnResult",
    "advance",
]
