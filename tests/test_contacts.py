"""
Tests for ContactRegistry refresh and lookup.
"""
from unittest.mock import AsyncMock

import pytest

from telegram_autoresponder.core.errors import GatewayError
from telegram_autoresponder.core.models import ContactsSnapshot
from telegram_autoresponder.registry.contacts import ContactRegistry


def make_source(*snapshots):
    source = AsyncMock()
    source.list_contacts.side_effect = list(snapshots)
    return source


def test_uninitialized_registry_denies_everyone():
    registry = ContactRegistry(make_source())
    assert registry.initialized is False
    assert registry.is_contact(42) is False
    assert len(registry) == 0


async def test_refresh_loads_contacts():
    registry = ContactRegistry(make_source(
        ContactsSnapshot(user_ids=frozenset({42, 7}), changed=True)
    ))
    await registry.refresh()

    assert registry.initialized is True
    assert registry.is_contact(42) is True
    assert registry.is_contact(99) is False
    assert registry.contact_ids() == [7, 42]


async def test_changed_refresh_replaces_whole_set():
    registry = ContactRegistry(make_source(
        ContactsSnapshot(user_ids=frozenset({1, 2}), changed=True),
        ContactsSnapshot(user_ids=frozenset({3}), changed=True),
    ))
    await registry.refresh()
    await registry.refresh()

    assert registry.contact_ids() == [3]


async def test_not_modified_keeps_existing_set():
    registry = ContactRegistry(make_source(
        ContactsSnapshot(user_ids=frozenset({42}), changed=True),
        ContactsSnapshot(changed=False),
    ))
    await registry.refresh()
    await registry.refresh()

    assert registry.is_contact(42) is True
    assert len(registry) == 1


async def test_not_modified_on_first_load_stays_fail_closed():
    registry = ContactRegistry(make_source(ContactsSnapshot(changed=False)))
    await registry.refresh()

    assert registry.initialized is False
    assert registry.is_contact(42) is False


async def test_gateway_failure_propagates_and_keeps_previous_set():
    source = AsyncMock()
    source.list_contacts.side_effect = [
        ContactsSnapshot(user_ids=frozenset({42}), changed=True),
        GatewayError("connection lost"),
    ]
    registry = ContactRegistry(source)
    await registry.refresh()

    with pytest.raises(GatewayError):
        await registry.refresh()
    assert registry.is_contact(42) is True
