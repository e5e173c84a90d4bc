"""
REST API wrapper for Lead Desk.

Run: API_KEY=<secret> uvicorn lead_desk.api:app --host 127.0.0.1 --port 8000

Sessions live in memory only (see SessionManager); restarting the process
drops every conversation. Every error response has the shape
{"error": {"code": ..., "message": ...}}.
"""

import hmac
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from lead_desk.bot import LeadDeskBot
from lead_desk.session_manager import SessionManager, SessionNotFoundError
from lead_desk.settings import settings

logger = logging.getLogger(__name__)

INSECURE_DEFAULT_KEY = "change-me-in-production"
API_KEY = os.environ.get("API_KEY", INSECURE_DEFAULT_KEY)

session_manager = SessionManager()


# ── Errors ─────────────────────────────────────────────

class APIError(Exception):
    """Error returned to the client as a structured payload."""

    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=_error_payload(self.code, self.message))


def _error_payload(code: str, message: str) -> Dict[str, Dict[str, str]]:
    return {"error": {"code": code, "message": message}}


def _session_not_found(session_id: str) -> APIError:
    return APIError(404, "SESSION_NOT_FOUND", f"Session '{session_id}' not found")


# ── Dependencies ───────────────────────────────────────

def verify_api_key(authorization: str = Header(...)) -> None:
    """Accept only 'Authorization: Bearer <API_KEY>'."""
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        raise APIError(401, "UNAUTHORIZED", "Expected 'Authorization: Bearer <key>'")
    if not hmac.compare_digest(token.encode(), API_KEY.encode()):
        raise APIError(401, "UNAUTHORIZED", "Invalid API key")


def get_session_manager() -> SessionManager:
    return session_manager


def _get_bot(sessions: SessionManager, session_id: str) -> LeadDeskBot:
    try:
        return sessions.get(session_id)
    except SessionNotFoundError as err:
        raise _session_not_found(session_id) from err


# ── App ────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    if API_KEY == INSECURE_DEFAULT_KEY:
        logger.warning("API_KEY not set, running with the insecure default key")
    yield
    dropped = session_manager.cleanup_expired()
    logger.info("Shutting down with %d live sessions (%d expired)", len(session_manager), len(dropped))


app = FastAPI(
    title=settings.get_nested("api.title", "GrowthPulse Lead Desk API"),
    version=settings.get_nested("api.version", "1.0.0"),
    lifespan=lifespan,
)


@app.exception_handler(APIError)
async def api_error_handler(_: Request, exc: APIError):
    return exc.to_response()


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(_: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return APIError(400, "BAD_REQUEST", "Invalid request").to_response()
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return APIError(400, "BAD_REQUEST", message).to_response()


# ── Models ─────────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    session_id: Optional[str] = Field(default=None, min_length=1, max_length=128)


class MessageRequest(BaseModel):
    text: str = Field(..., max_length=4000)


def _transcript(bot: LeadDeskBot) -> list:
    return [message.to_dict() for message in bot.messages]


# ── Endpoints ──────────────────────────────────────────

@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "sessions": len(session_manager)}


@app.post("/api/v1/sessions", dependencies=[Depends(verify_api_key)])
def create_session(
    req: Optional[CreateSessionRequest] = None,
    sessions: SessionManager = Depends(get_session_manager),
):
    """Open a conversation: intro message, quick replies, empty lead."""
    session_id = req.session_id if req else None
    if session_id and session_id in sessions:
        raise APIError(409, "SESSION_EXISTS", f"Session '{session_id}' already exists")

    bot = sessions.create(session_id)
    return {
        **bot.get_state(),
        "messages": _transcript(bot),
        "quick_replies": bot.quick_replies,
    }


@app.post("/api/v1/sessions/{session_id}/messages", dependencies=[Depends(verify_api_key)])
async def post_message(
    session_id: str,
    req: MessageRequest,
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    One user turn.

    Whitespace-only text is accepted and ignored: `reply` is null and the lead
    is unchanged.
    """
    bot = _get_bot(sessions, session_id)
    try:
        result = await bot.submit(req.text)
    except Exception as err:
        logger.exception("Turn failed for session %s", session_id)
        raise APIError(500, "INTERNAL", "Internal server error") from err

    return {
        **bot.get_state(),
        "reply": result.reply if result else None,
        "interest_level": bot.interest_level.value,
        "captured": result.captured_fields if result else [],
    }


@app.get("/api/v1/sessions/{session_id}/lead", dependencies=[Depends(verify_api_key)])
def get_lead(session_id: str, sessions: SessionManager = Depends(get_session_manager)):
    return _get_bot(sessions, session_id).get_state()


@app.get("/api/v1/sessions/{session_id}/messages", dependencies=[Depends(verify_api_key)])
def get_messages(session_id: str, sessions: SessionManager = Depends(get_session_manager)):
    return {"session_id": session_id, "messages": _transcript(_get_bot(sessions, session_id))}


@app.delete("/api/v1/sessions/{session_id}", dependencies=[Depends(verify_api_key)])
def close_session(session_id: str, sessions: SessionManager = Depends(get_session_manager)):
    if not sessions.close(session_id):
        raise _session_not_found(session_id)
    return {"session_id": session_id, "closed": True}
