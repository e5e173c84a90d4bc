"""
Lead state and chat message types.

LeadContext is an immutable value: every accepted turn produces a new one
through `merge()`, so callers never observe a half-applied turn.
"""

import random
import string
import time
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from lead_desk.lead_scoring import InterestLevel
from lead_desk.settings import settings
from lead_desk.yaml_config.constants import LEAD_FIELDS, SNAPSHOT_LABELS


@dataclass(frozen=True)
class LeadContext:
    """
    Structured data captured so far about a lead.

    Attributes:
        business: Industry or brand label ("Ecommerce", "Acme Foods")
        goal: Marketing objective ("Lead Generation", ...)
        budget: Normalized budget string ("50k", "Rs 20000")
        timeline: Launch window ("1-2 Weeks", ...)
        name: Proper-cased person name
        phone: Bare 10-digit phone number
        interest_level: cold / warm / hot
    """
    business: Optional[str] = None
    goal: Optional[str] = None
    budget: Optional[str] = None
    timeline: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    interest_level: InterestLevel = InterestLevel.COLD

    def get(self, field_name: str) -> Optional[str]:
        if field_name not in LEAD_FIELDS:
            raise KeyError(field_name)
        return getattr(self, field_name)

    def is_filled(self, field_name: str) -> bool:
        return bool(self.get(field_name))

    @property
    def filled_fields(self) -> List[str]:
        return [name for name in LEAD_FIELDS if self.is_filled(name)]

    @property
    def is_complete(self) -> bool:
        return all(self.is_filled(name) for name in LEAD_FIELDS)

    def merge(
        self,
        values: Mapping[str, Optional[str]],
        interest_level: Optional[InterestLevel] = None,
    ) -> "LeadContext":
        """
        New context with `values` applied to still-empty fields only.

        Filled fields are sticky: a later value for them is ignored.
        """
        changes: Dict[str, Any] = {}
        for name in LEAD_FIELDS:
            value = values.get(name)
            if value and not self.is_filled(name):
                changes[name] = value
        if interest_level is not None:
            changes["interest_level"] = InterestLevel.coerce(interest_level)
        return replace(self, **changes) if changes else self

    def to_dict(self) -> Dict[str, Optional[str]]:
        data: Dict[str, Optional[str]] = {f.name: getattr(self, f.name) for f in fields(self)}
        data["interest_level"] = self.interest_level.value
        return data


def summarize_lead_status(context: LeadContext) -> List[Tuple[str, Optional[str]]]:
    """(label, value) pairs for display: Business, Goal, Budget, Timeline, Name, Phone."""
    return [(SNAPSHOT_LABELS[name], context.get(name)) for name in LEAD_FIELDS]


# =============================================================================
# Messages
# =============================================================================

class Sender(str, Enum):
    ASSISTANT = "assistant"
    USER = "user"


_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class Message:
    """One chat bubble. Immutable once created."""
    id: str
    sender: Sender
    text: str
    timestamp: str
    created_at: float = field(default_factory=time.time, compare=False)

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "sender": self.sender.value,
            "text": self.text,
            "timestamp": self.timestamp,
        }


def format_now(now: Optional[datetime] = None) -> str:
    """Wall-clock time in the configured chat format (HH:MM by default)."""
    fmt = settings.get_nested("dialogue.timestamp_format", "%H:%M")
    return (now or datetime.now()).strftime(fmt)


def create_message(sender: Sender, text: str) -> Message:
    """New message with a unique id: '<sender>-<epoch ms>-<5 random chars>'."""
    sender = Sender(sender)
    suffix = "".join(random.choices(_ID_ALPHABET, k=5))
    return Message(
        id=f"{sender.value}-{int(time.time() * 1000)}-{suffix}",
        sender=sender,
        text=text,
        timestamp=format_now(),
    )
