"""
Pytest configuration and shared fixtures for autoresponder tests.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from telegram_autoresponder.core.engine import AutoResponder
from telegram_autoresponder.core.models import (
    ContactsSnapshot,
    DaemonConfig,
    DirectMessage,
    InboundMessage,
)
from telegram_autoresponder.registry.contacts import ContactRegistry
from telegram_autoresponder.temporal.response_ledger import ResponseLedger

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)
RESPONSE = "I'm not on Telegram anymore"


def direct(sender_id: int, text: str = "hello", outgoing: bool = False, name: str = "") -> DirectMessage:
    """Build a direct message update from `sender_id`."""
    return DirectMessage(message=InboundMessage(
        message_id=1,
        chat_id=sender_id,
        sender_id=sender_id,
        sender_name=name,
        text=text,
        outgoing=outgoing,
    ))


@pytest.fixture
def config():
    return DaemonConfig(
        app_id=12345,
        app_hash="abcdef0123456789",
        phone="+10000000000",
        response_message=RESPONSE,
        response_timeout_hours=1,
    )


@pytest.fixture
def gateway():
    """Gateway double: contacts {42}, sends always succeed."""
    gw = AsyncMock()
    gw.list_contacts.return_value = ContactsSnapshot(user_ids=frozenset({42}), changed=True)
    return gw


@pytest.fixture
async def contacts(gateway):
    registry = ContactRegistry(gateway)
    await registry.refresh()
    return registry


@pytest.fixture
def ledger():
    return ResponseLedger()


@pytest.fixture
def engine(gateway, contacts, ledger):
    return AutoResponder(
        gateway=gateway,
        contacts=contacts,
        ledger=ledger,
        response_message=RESPONSE,
        cooldown=HOUR,
        clock=lambda: T0,
    )
