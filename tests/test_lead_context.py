"""
Tests for LeadContext and chat messages (lead_context.py).
"""

import dataclasses
from datetime import datetime

import pytest

from lead_desk.lead_context import (
    LeadContext,
    Message,
    Sender,
    create_message,
    format_now,
    summarize_lead_status,
)
from lead_desk.lead_scoring import InterestLevel


class TestLeadContext:

    def test_defaults(self, fresh_context):
        assert fresh_context.filled_fields == []
        assert fresh_context.interest_level is InterestLevel.COLD
        assert not fresh_context.is_complete

    def test_immutable(self, fresh_context):
        with pytest.raises(dataclasses.FrozenInstanceError):
            fresh_context.business = "Ecommerce"

    def test_merge_fills_empty_fields_only(self):
        context = LeadContext(business="Ecommerce")
        merged = context.merge({"business": "Healthcare", "budget": "50k"})

        assert merged.business == "Ecommerce"
        assert merged.budget == "50k"
        assert context.budget is None

    def test_merge_ignores_empty_values_and_unknown_keys(self, fresh_context):
        merged = fresh_context.merge({"name": "", "phone": None, "colour": "red"})
        assert merged is fresh_context

    def test_merge_interest(self, fresh_context):
        merged = fresh_context.merge({}, interest_level="warm")
        assert merged.interest_level is InterestLevel.WARM

    def test_get_unknown_field(self, fresh_context):
        with pytest.raises(KeyError):
            fresh_context.get("interest_level")

    def test_complete(self, full_context):
        assert full_context.is_complete
        assert len(full_context.filled_fields) == 6

    def test_summarize(self, full_context):
        rows = summarize_lead_status(full_context)
        assert rows[0] == ("Business", "Ecommerce")
        assert rows[-1] == ("Phone", "9876543210")


class TestMessages:

    def test_create_message(self):
        message = create_message(Sender.USER, "hello")
        assert message.sender is Sender.USER
        assert message.id.startswith("user-")
        assert message.to_dict()["sender"] == "user"

    def test_sender_from_string(self):
        assert create_message("assistant", "hi").sender is Sender.ASSISTANT

    def test_ids_are_unique(self):
        ids = {create_message(Sender.USER, "x").id for _ in range(100)}
        assert len(ids) == 100

    def test_message_is_frozen(self):
        message = create_message(Sender.USER, "hi")
        with pytest.raises(dataclasses.FrozenInstanceError):
            message.text = "changed"
        assert isinstance(message, Message)

    def test_format_now(self):
        assert format_now(datetime(2024, 5, 1, 9, 5)) == "09:05"
