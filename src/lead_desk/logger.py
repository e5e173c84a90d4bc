"""
Structured logging for Lead Desk.

Two output modes, picked per record from the LOG_FORMAT environment variable:
- readable (default): "[sess_1] field_captured [field=budget, turn=2]"
- json: one JSON object per line

The id of the session being served lives in a ContextVar, so sessions
interleaved on one event loop never mix their records.

Usage:
    from lead_desk.logger import logger

    with logger.session("sess_123"):
        logger.event("field_captured", field="budget", turn=2)
        logger.metric("turn_latency_ms", 1.7)
"""

import json
import logging
import os
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from lead_desk.settings import settings


READABLE_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"
READABLE_DATEFMT = "%H:%M:%S"

_session_id: ContextVar[Optional[str]] = ContextVar("lead_desk_session_id", default=None)
# Always replaced, never mutated in place
_bound_fields: ContextVar[Dict[str, Any]] = ContextVar("lead_desk_bound_fields", default={})


def json_mode() -> bool:
    return os.environ.get("LOG_FORMAT", "readable").lower() == "json"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _configured_level() -> int:
    level = logging.getLevelName(str(settings.get_nested("logging.level", "INFO")).upper())
    return level if isinstance(level, int) else logging.INFO


class StructuredLogger:
    """
    Wrapper over a stdlib logger that turns keyword arguments into record fields.

    event() and metric() are INFO records tagged EVENT / METRIC, used for
    conversation analytics (field captures, interest changes, latency).
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

        if not self.logger.handlers:
            self._attach_handler()

    def _attach_handler(self) -> None:
        handler = logging.StreamHandler()
        if json_mode():
            handler.setFormatter(logging.Formatter("%(message)s"))
        else:
            handler.setFormatter(logging.Formatter(READABLE_FORMAT, datefmt=READABLE_DATEFMT))

        self.logger.setLevel(_configured_level())
        self.logger.addHandler(handler)
        self.logger.propagate = False

    # =========================================================================
    # Session and bound fields
    # =========================================================================

    @property
    def conversation_id(self) -> Optional[str]:
        return _session_id.get()

    def set_conversation(self, session_id: Optional[str]) -> None:
        _session_id.set(session_id)

    def clear_conversation(self) -> None:
        _session_id.set(None)

    @contextmanager
    def session(self, session_id: str) -> Iterator["StructuredLogger"]:
        """Tag every record inside the block with session_id."""
        token = _session_id.set(session_id)
        try:
            yield self
        finally:
            _session_id.reset(token)

    @property
    def _extra_context(self) -> Dict[str, Any]:
        return dict(_bound_fields.get())

    def set_context(self, **fields: Any) -> None:
        """Fields added to every following record in this context."""
        _bound_fields.set({**_bound_fields.get(), **fields})

    def clear_context(self) -> None:
        _bound_fields.set({})

    # =========================================================================
    # Rendering
    # =========================================================================

    def _format_structured(self, tag: str, message: str, **fields: Any) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "timestamp": _utc_now(),
            "level": tag,
            "logger": self.name,
            "message": message,
        }
        session_id = self.conversation_id
        if session_id:
            record["conversation_id"] = session_id
        record.update(_bound_fields.get())
        record.update(fields)
        return record

    def _readable(self, message: str, **fields: Any) -> str:
        line = message
        if fields:
            line += " [" + ", ".join(f"{key}={value}" for key, value in fields.items()) + "]"
        session_id = self.conversation_id
        if session_id:
            line = f"[{session_id}] {line}"
        return line

    def _emit(
        self,
        level: int,
        tag: str,
        message: str,
        fields: Dict[str, Any],
        with_traceback: bool = False,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        if not json_mode():
            self.logger.log(level, self._readable(message, **fields), exc_info=with_traceback)
            return

        if with_traceback:
            fields["traceback"] = traceback.format_exc()
        payload = self._format_structured(tag, message, **fields)
        self.logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))

    # =========================================================================
    # Public API
    # =========================================================================

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, "DEBUG", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, "INFO", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(logging.WARNING, "WARNING", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(logging.ERROR, "ERROR", message, fields)

    def exception(self, message: str, **fields: Any) -> None:
        """ERROR record with the traceback of the exception being handled."""
        self._emit(logging.ERROR, "ERROR", message, fields, with_traceback=True)

    def metric(self, name: str, value: Any, **fields: Any) -> None:
        """Numeric measurement, e.g. metric("turn_latency_ms", 0.8, turn=3)."""
        self._emit(logging.INFO, "METRIC", name, {"value": value, **fields})

    def event(self, event_type: str, **fields: Any) -> None:
        """Conversation event, e.g. event("interest_changed", from_level="cold", to_level="warm")."""
        self._emit(logging.INFO, "EVENT", event_type, fields)


logger = StructuredLogger("lead_desk")


def create_test_logger(name: str = "test") -> StructuredLogger:
    """Child logger with its own handler, for tests."""
    return StructuredLogger(f"lead_desk.{name}")
