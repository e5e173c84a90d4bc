"""
Lead Desk bot: the dialogue session controller.

Owns one conversation: the current LeadContext, the chat transcript and the
per-session metrics. Every user turn goes through the pure reducer
`state_machine.advance()`; the controller only serializes turns, records
messages and logs.

Principles:
1. ATOMIC: the new context is published only after the whole turn is computed
2. ORDERED: overlapping turns are applied in the order they were submitted
3. OBSERVABLE: every turn logs events and metrics under the session id

Usage:
    from lead_desk.bot import LeadDeskBot

    bot = LeadDeskBot(typing_delay=0)
    context, reply = bot.submit_utterance("Main ecommerce brand run karta hoon")
    bot.get_lead_snapshot()   # [("Business", "Ecommerce"), ("Goal", None), ...]
"""

import argparse
import asyncio
import threading
import uuid
from typing import Any, Dict, List, Optional, Tuple

from lead_desk.lead_context import (
    LeadContext,
    Message,
    Sender,
    create_message,
    summarize_lead_status,
)
from lead_desk.lead_scoring import InterestLevel, interest_badge
from lead_desk.logger import logger
from lead_desk.metrics import ConversationMetrics
from lead_desk.question_selector import get_next_question
from lead_desk.reply_composer import ReplyComposer
from lead_desk.settings import settings
from lead_desk.state_machine import TurnResult, advance, is_terminal
from lead_desk.yaml_config.constants import QUICK_REPLIES, SESSION_INTRO, SNAPSHOT_PENDING


class LeadDeskBot:
    """
    Session controller for one lead conversation.

    Attributes:
        session_id: Conversation id, attached to every log record
        typing_delay: Seconds `submit()` waits before replying
        context: Current LeadContext
        messages: Transcript, starting with the intro message
        history: TurnResult of every accepted turn
        metrics: ConversationMetrics for this session
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        typing_delay: Optional[float] = None,
        composer: Optional[ReplyComposer] = None,
    ):
        self.session_id = session_id or f"sess_{uuid.uuid4().hex[:12]}"
        if typing_delay is None:
            typing_delay = settings.get_nested("dialogue.typing_delay_seconds", 0.25)
        self.typing_delay = max(0.0, float(typing_delay))
        self._composer = composer

        self._turn_lock = threading.RLock()
        self._async_lock: Optional[asyncio.Lock] = None
        self._async_lock_loop: Optional[asyncio.AbstractEventLoop] = None

        self.reset()

    def reset(self) -> None:
        """Start a fresh conversation in the same session."""
        with self._turn_lock:
            self.context = LeadContext()
            self.messages: List[Message] = [create_message(Sender.ASSISTANT, SESSION_INTRO)]
            self.history: List[TurnResult] = []
            self.metrics = ConversationMetrics(self.session_id)

    # =========================================================================
    # Turn processing
    # =========================================================================

    @staticmethod
    def _clean(user_message: Any) -> Optional[str]:
        if not isinstance(user_message, str):
            return None
        text = user_message.strip()
        return text or None

    def _ignore(self) -> None:
        self.metrics.record_ignored()
        with logger.session(self.session_id):
            logger.event("turn_ignored", reason="empty_text")

    def _record_message(self, sender: Sender, text: str) -> Message:
        message = create_message(sender, text)
        self.messages.append(message)
        return message

    def _apply_turn(self, text: str) -> TurnResult:
        with self._turn_lock, logger.session(self.session_id):
            self.metrics.start_turn_timer()

            result = advance(self.context, text, composer=self._composer)
            self.context = result.context
            self.history.append(result)
            self._record_message(Sender.ASSISTANT, result.reply)

            record = self.metrics.record_turn(
                captured=result.captured_fields,
                interest_level=result.context.interest_level.value,
                interest_changed=result.interest_changed,
            )
            self._log_turn(result, text)
            if record.response_time_ms is not None:
                logger.metric("turn_latency_ms", round(record.response_time_ms, 3), turn=record.turn_number)

            return result

    def _log_turn(self, result: TurnResult, text: str) -> None:
        if settings.get_nested("logging.log_turn_text", False):
            logger.debug("User message received", text=text)

        for name in result.captured_fields:
            logger.event("field_captured", field=name, turn=self.turn)

        if result.interest_changed:
            previous = result.previous.interest_level if result.previous else InterestLevel.COLD
            logger.event(
                "interest_changed",
                from_level=previous.value,
                to_level=result.context.interest_level.value,
            )
            if result.is_handover:
                logger.event(
                    "handover",
                    turn=self.turn,
                    missing=[label for label, value in self.get_lead_snapshot() if not value],
                )

    def process(self, user_message: str) -> Optional[TurnResult]:
        """
        Synchronous turn, no typing delay.

        Returns:
            TurnResult, or None when the text is empty/whitespace (no-op)
        """
        text = self._clean(user_message)
        if text is None:
            self._ignore()
            return None

        with self._turn_lock:
            self._record_message(Sender.USER, text)
            return self._apply_turn(text)

    def _get_async_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._async_lock is None or self._async_lock_loop is not loop:
            self._async_lock = asyncio.Lock()
            self._async_lock_loop = loop
        return self._async_lock

    async def submit(self, user_message: str) -> Optional[TurnResult]:
        """
        Turn with the simulated typing delay.

        The user message is recorded immediately; the reply follows after
        `typing_delay`. Concurrent submissions queue on a FIFO lock, so turns
        are applied in submission order.
        """
        text = self._clean(user_message)
        if text is None:
            self._ignore()
            return None

        self._record_message(Sender.USER, text)
        async with self._get_async_lock():
            if self.typing_delay > 0:
                await asyncio.sleep(self.typing_delay)
            return self._apply_turn(text)

    def submit_utterance(self, user_message: str) -> Optional[Tuple[LeadContext, str]]:
        """(updated context, assistant reply), or None for empty text."""
        result = self.process(user_message)
        if result is None:
            return None
        return result.context, result.reply

    # =========================================================================
    # Read-only views
    # =========================================================================

    def get_lead_snapshot(self) -> List[Tuple[str, Optional[str]]]:
        """(label, value) pairs: Business, Goal, Budget, Timeline, Name, Phone."""
        return summarize_lead_status(self.context)

    @property
    def interest_level(self) -> InterestLevel:
        return self.context.interest_level

    @property
    def interest_badge(self) -> str:
        return interest_badge(self.context.interest_level)

    @property
    def next_question(self) -> Optional[str]:
        return get_next_question(self.context)

    @property
    def is_complete(self) -> bool:
        return self.context.is_complete

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.context)

    @property
    def quick_replies(self) -> List[str]:
        return list(QUICK_REPLIES)

    @property
    def turn(self) -> int:
        """Number of accepted turns."""
        return len(self.history)

    def get_metrics_summary(self) -> Dict[str, Any]:
        return self.metrics.get_summary()

    def get_state(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "lead": self.context.to_dict(),
            "snapshot": [
                {"label": label, "value": value} for label, value in self.get_lead_snapshot()
            ],
            "badge": self.interest_badge,
            "complete": self.is_complete,
        }


# =============================================================================
# Interactive mode
# =============================================================================

def _status_line(bot: LeadDeskBot) -> str:
    filled = [label for label, value in bot.get_lead_snapshot() if value]
    return f"[{bot.interest_badge}] captured: {', '.join(filled) or '-'}"


def run_interactive(bot: LeadDeskBot) -> None:
    """Terminal chat for manual testing."""
    print("\n" + "=" * 60)
    print("GrowthPulse Lead Desk")
    print("Commands: /lead /metrics /reset /quit")
    print("=" * 60 + "\n")
    print(f"Bot: {bot.messages[0].text}\n")
    print("Try: " + " | ".join(bot.quick_replies) + "\n")

    while True:
        try:
            user_input = input("You: ").strip()

            if not user_input:
                continue

            if user_input == "/quit":
                break

            if user_input == "/reset":
                bot.reset()
                print("[Conversation reset]\n")
                continue

            if user_input == "/lead":
                for label, value in bot.get_lead_snapshot():
                    print(f"  {label}: {value or SNAPSHOT_PENDING}")
                print(f"  Interest: {bot.interest_badge}\n")
                continue

            if user_input == "/metrics":
                print(f"\nMetrics: {bot.get_metrics_summary()}\n")
                continue

            result = asyncio.run(bot.submit(user_input))
            if result is None:
                continue

            print(f"Bot: {result.reply}")
            print(f"  {_status_line(bot)}\n")

        except (KeyboardInterrupt, EOFError):
            print("\n\nBye!")
            break


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lead Desk interactive mode")
    parser.add_argument("--delay", type=float, default=None,
                        help="Typing delay in seconds (default from settings.yaml)")
    parser.add_argument("--session", type=str, default=None,
                        help="Session id used in logs")
    args = parser.parse_args(argv)

    run_interactive(LeadDeskBot(session_id=args.session, typing_delay=args.delay))


if __name__ == "__main__":
    main()
