"""
Shared pytest fixtures for Lead Desk tests.

Provides fixtures for:
- Bots without typing delay
- Lead contexts in typical stages of a conversation
- A FastAPI test client with an isolated session manager
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lead_desk.bot import LeadDeskBot
from lead_desk.lead_context import LeadContext
from lead_desk.lead_scoring import InterestLevel


API_TEST_KEY = "test-key"


# =============================================================================
# Bots
# =============================================================================

@pytest.fixture
def bot():
    """Bot with no typing delay."""
    return LeadDeskBot(session_id="test_session", typing_delay=0)


@pytest.fixture
def make_bot():
    """Factory for bots with custom delay/session id."""
    def _create(typing_delay: float = 0, session_id: str = None) -> LeadDeskBot:
        return LeadDeskBot(session_id=session_id, typing_delay=typing_delay)
    return _create


# =============================================================================
# Contexts
# =============================================================================

@pytest.fixture
def fresh_context():
    return LeadContext()


@pytest.fixture
def full_context():
    """All six fields captured, still cold."""
    return LeadContext(
        business="Ecommerce",
        goal="Lead Generation",
        budget="50k",
        timeline="This Month",
        name="Rohan Sharma",
        phone="9876543210",
    )


@pytest.fixture
def warm_full_context(full_context):
    return full_context.merge({}, interest_level=InterestLevel.WARM)


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def api_client(monkeypatch):
    """TestClient with a fresh, delay-free session manager."""
    from fastapi.testclient import TestClient
    import lead_desk.api as api_mod
    from lead_desk.session_manager import SessionManager

    monkeypatch.setattr(api_mod, "API_KEY", API_TEST_KEY)
    monkeypatch.setattr(api_mod, "session_manager", SessionManager(typing_delay=0))

    with TestClient(api_mod.app) as client:
        yield client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_TEST_KEY}"}
