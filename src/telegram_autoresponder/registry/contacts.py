"""
In-memory registry of the account's Telegram contacts.

The registry is loaded once at startup and only read afterwards. It fails
closed: until the first successful refresh nobody counts as a contact.
"""
import logging
from typing import Optional, Protocol

from telegram_autoresponder.core.models import ContactsSnapshot

logger = logging.getLogger(__name__)


class ContactSource(Protocol):
    async def list_contacts(self) -> ContactsSnapshot: ...


class ContactRegistry:
    """
    Set of contact user IDs, rebuilt wholesale on every changed refresh.

    Attributes:
        source: Anything with an async list_contacts() (normally TelegramGateway)
    """

    def __init__(self, source: ContactSource):
        self.source = source
        self._contacts: Optional[frozenset[int]] = None

    @property
    def initialized(self) -> bool:
        return self._contacts is not None

    async def refresh(self) -> None:
        """
        Reload contacts from the gateway.

        A "not modified" answer keeps the current set. Gateway errors are
        propagated unchanged; the previous set (if any) stays in place.
        """
        snapshot = await self.source.list_contacts()

        if not snapshot.changed:
            logger.info("Contacts not modified, keeping %d cached contact(s)", len(self))
            return

        # Single assignment so readers never see a partially built set
        self._contacts = frozenset(snapshot.user_ids)
        logger.info("Loaded %d contacts", len(self._contacts))
        logger.debug("Contact user IDs: %s", self.contact_ids())

    def is_contact(self, user_id: int) -> bool:
        if self._contacts is None:
            return False
        return user_id in self._contacts

    def contact_ids(self) -> list[int]:
        return sorted(self._contacts or ())

    def __len__(self) -> int:
        return len(self._contacts or ())
