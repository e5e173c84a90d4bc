"""
Session Manager - keeps active conversations in memory.

One LeadDeskBot per session id. Sessions idle for longer than the TTL are
dropped lazily on the next access. Nothing is persisted.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from lead_desk.bot import LeadDeskBot
from lead_desk.logger import logger
from lead_desk.settings import settings


class SessionNotFoundError(KeyError):
    """Unknown or expired session id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(session_id)

    def __str__(self) -> str:
        return f"Session '{self.session_id}' not found"


@dataclass
class SessionEntry:
    bot: LeadDeskBot
    last_activity: float
    created_at: float


class SessionManager:
    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        typing_delay: Optional[float] = None,
        time_provider: Optional[Callable[[], float]] = None,
    ):
        if ttl_seconds is None:
            ttl_seconds = settings.get_nested("sessions.ttl_seconds", 3600)
        self._ttl = float(ttl_seconds)
        self._typing_delay = typing_delay
        self._time = time_provider or time.monotonic
        self._sessions: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def _evict_expired(self, now: float) -> List[str]:
        expired = [
            sid for sid, entry in self._sessions.items()
            if now - entry.last_activity > self._ttl
        ]
        for sid in expired:
            entry = self._sessions.pop(sid)
            logger.event(
                "session_expired",
                session=sid,
                turns=entry.bot.turn,
                outcome=entry.bot.metrics.get_outcome().value,
            )
        return expired

    def create(self, session_id: Optional[str] = None) -> LeadDeskBot:
        """New conversation; a fresh id is generated when none is given."""
        now = self._time()
        bot = LeadDeskBot(session_id=session_id, typing_delay=self._typing_delay)
        with self._lock:
            self._evict_expired(now)
            self._sessions[bot.session_id] = SessionEntry(bot=bot, last_activity=now, created_at=now)
        logger.event("session_created", session=bot.session_id)
        return bot

    def get(self, session_id: str) -> LeadDeskBot:
        """
        Active bot for the session, refreshing its idle timer.

        Raises:
            SessionNotFoundError: If the id is unknown or has expired
        """
        now = self._time()
        with self._lock:
            self._evict_expired(now)
            entry = self._sessions.get(session_id)
            if entry is None:
                raise SessionNotFoundError(session_id)
            entry.last_activity = now
            return entry.bot

    def close(self, session_id: str) -> bool:
        """Drop a session. Returns False if it did not exist."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def cleanup_expired(self) -> List[str]:
        """Evict idle sessions now; returns their ids."""
        with self._lock:
            return self._evict_expired(self._time())
