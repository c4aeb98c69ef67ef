"""
tests/conftest.py

Shared fixtures for PokeNews plugin tests.
"""

import json
import pytest
from unittest.mock import AsyncMock, MagicMock

from plugins.pokenews.settings import ConfigHolder, CountdownConfig


@pytest.fixture
def mock_nats():
    """Create a mock NATS client for testing."""
    nats = AsyncMock()
    nats.publish = AsyncMock()

    # Track subscriptions
    nats._subscriptions = []

    async def mock_subscribe(subject, cb=None):
        sub = MagicMock()
        sub.subject = subject
        sub.callback = cb
        sub.unsubscribe = AsyncMock()
        nats._subscriptions.append(sub)
        return sub

    nats.subscribe = mock_subscribe

    return nats


@pytest.fixture
def mock_message():
    """Factory for creating mock NATS messages."""
    def _make_message(data: dict = None, reply_to: str = None):
        msg = MagicMock()
        msg.data = json.dumps(data).encode() if data is not None else b""
        msg.reply = reply_to
        return msg
    return _make_message


@pytest.fixture
def published():
    """Decode every publish call on a mock NATS client into (subject, payload)."""
    def _published(nats, subject: str = None):
        calls = []
        for call in nats.publish.call_args_list:
            call_subject = call[0][0]
            if subject is None or call_subject == subject:
                calls.append((call_subject, json.loads(call[0][1].decode())))
        return calls
    return _published


@pytest.fixture
def short_config():
    """A short cycle with the final warnings well apart from the early one."""
    return CountdownConfig(
        cycle_length=200,
        pre_event_offset=120,
        final_countdown_offset=20,
        pending_threshold=100,
        terminal_action="pokekill",
        message_prefix="[PN] ",
        message_pre_event="soon",
        message_final_3="three",
        message_final_2="two",
        message_final_1="one",
        message_stolen="stolen",
        message_grace_period="grace {time}",
        message_pending="pending {time}",
    )


@pytest.fixture
def holder(short_config):
    """Config holder seeded with the short config."""
    return ConfigHolder(short_config)


@pytest.fixture
def config_path(tmp_path):
    """Path for a countdown config file that does not exist yet."""
    return tmp_path / "config" / "pokenews_config.json"
