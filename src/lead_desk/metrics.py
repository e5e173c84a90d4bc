"""
Conversation metrics for Lead Desk.

Per-session tracking of turns, captured fields and interest changes.

Usage:
    from lead_desk.metrics import ConversationMetrics

    metrics = ConversationMetrics("sess_1")
    metrics.start_turn_timer()
    metrics.record_turn(captured=["business"], interest_level="cold")
    summary = metrics.get_summary()
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ConversationOutcome(Enum):
    """How a conversation ended up"""
    HANDOVER = "handover"             # Lead went hot, passed to a human
    QUALIFIED = "qualified"           # All fields captured, not hot yet
    IN_PROGRESS = "in_progress"


@dataclass
class TurnRecord:
    """One accepted user turn"""
    turn_number: int
    interest_level: str
    captured: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    response_time_ms: Optional[float] = None


class ConversationMetrics:
    """
    Metrics for one conversation.

    Collects:
    - number of accepted and ignored turns
    - turn at which each field was captured
    - interest level history
    - turn processing time
    """

    def __init__(self, conversation_id: Optional[str] = None):
        self.conversation_id = conversation_id
        self.created_at = datetime.now(timezone.utc)
        self.reset()

    def reset(self) -> None:
        self.turns = 0
        self.ignored_turns = 0
        self.turn_records: List[TurnRecord] = []
        self.field_capture_turn: Dict[str, int] = {}
        self.interest_history: List[Dict[str, Any]] = []
        self.handover_turn: Optional[int] = None
        self._turn_started: Optional[float] = None

    def start_turn_timer(self) -> None:
        self._turn_started = time.perf_counter()

    def record_ignored(self) -> None:
        """Empty or whitespace-only submission"""
        self.ignored_turns += 1

    def record_turn(
        self,
        captured: List[str],
        interest_level: str,
        interest_changed: bool = False,
    ) -> TurnRecord:
        """
        Record an accepted turn.

        Args:
            captured: Fields newly captured this turn
            interest_level: Interest level after the turn
            interest_changed: Whether the level moved this turn
        """
        self.turns += 1

        response_time_ms = None
        if self._turn_started is not None:
            response_time_ms = (time.perf_counter() - self._turn_started) * 1000
            self._turn_started = None

        record = TurnRecord(
            turn_number=self.turns,
            interest_level=interest_level,
            captured=list(captured),
            response_time_ms=response_time_ms,
        )
        self.turn_records.append(record)

        for name in captured:
            self.field_capture_turn.setdefault(name, self.turns)

        if interest_changed:
            self.interest_history.append({"turn": self.turns, "level": interest_level})
            if interest_level == "hot" and self.handover_turn is None:
                self.handover_turn = self.turns

        return record

    def get_outcome(self, total_fields: int = 6) -> ConversationOutcome:
        if self.handover_turn is not None:
            return ConversationOutcome.HANDOVER
        if len(self.field_capture_turn) >= total_fields:
            return ConversationOutcome.QUALIFIED
        return ConversationOutcome.IN_PROGRESS

    def get_average_response_time_ms(self) -> Optional[float]:
        times = [r.response_time_ms for r in self.turn_records if r.response_time_ms is not None]
        if times:
            return sum(times) / len(times)
        return None

    def get_summary(self) -> Dict[str, Any]:
        return {
            "conversation_id": self.conversation_id,
            "created_at": self.created_at.isoformat().replace("+00:00", "Z"),
            "turns": self.turns,
            "ignored_turns": self.ignored_turns,
            "fields_captured": dict(self.field_capture_turn),
            "interest_history": list(self.interest_history),
            "handover_turn": self.handover_turn,
            "outcome": self.get_outcome().value,
            "avg_response_time_ms": self.get_average_response_time_ms(),
        }
