"""
Auto-responder engine.

Decides, for every inbound update, whether the sender gets the canned reply:

1. decode the Telethon event into an update variant
2. drop our own outgoing messages
3. drop group and channel messages
4. drop senders that are not contacts
5. drop senders still inside the cooldown window
6. send the reply, then record it in the ledger

A failed or cancelled send is re-raised and leaves the ledger untouched, so
the next message from that sender is still eligible.
"""
import asyncio
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Protocol

from telegram_autoresponder.core.gateway import decode_update
from telegram_autoresponder.core.models import (
    ChannelMessage,
    DirectMessage,
    GroupMessage,
    InboundUpdate,
    OtherUpdate,
    Outcome,
)
from telegram_autoresponder.registry.contacts import ContactRegistry
from telegram_autoresponder.temporal.response_ledger import ResponseLedger

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TextSender(Protocol):
    async def send_text(self, target_id: int, text: str) -> Any: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AutoResponder:
    """
    Contact-aware, rate-limited auto-responder.

    Handlers may run concurrently. Each sender has its own asyncio.Lock held
    across cooldown check, send and record, which gives at most one reply per
    sender per cooldown window. Different senders never wait on each other.

    Attributes:
        gateway: Object with an async send_text(target_id, text)
        contacts: Registry consulted for the contact check
        ledger: Last-reply timestamps
        response_message: Text sent to eligible senders
        cooldown: Minimum time between two replies to the same sender
        stats: Count of handled updates per Outcome
    """

    def __init__(
        self,
        gateway: TextSender,
        contacts: ContactRegistry,
        ledger: ResponseLedger,
        response_message: str,
        cooldown: timedelta,
        clock: Clock = utc_now
    ):
        if cooldown <= timedelta(0):
            raise ValueError("cooldown must be positive")

        self.gateway = gateway
        self.contacts = contacts
        self.ledger = ledger
        self.response_message = response_message
        self.cooldown = cooldown
        self.clock = clock
        self.stats: Counter[Outcome] = Counter()
        self.send_failures = 0
        self._sender_locks: dict[int, asyncio.Lock] = {}

    async def on_event(self, event: Any) -> Outcome:
        """Telethon NewMessage callback."""
        return await self.handle(decode_update(event))

    async def handle(self, update: InboundUpdate, now: Optional[datetime] = None) -> Outcome:
        """
        Process one update and reply if the sender qualifies.

        Args:
            update: Decoded update
            now: Decision time, taken from the clock when None

        Returns:
            The Outcome for this update

        Raises:
            GatewayError: If sending the reply failed
            asyncio.CancelledError: If the send was cancelled
        """
        outcome = await self._decide_and_reply(update, now)
        self.stats[outcome] += 1
        return outcome

    async def _decide_and_reply(self, update: InboundUpdate, now: Optional[datetime]) -> Outcome:
        if isinstance(update, OtherUpdate):
            logger.debug("Received non-message update: %s", update.description)
            return Outcome.IGNORED_UNRECOGNIZED

        message = update.message
        if message.outgoing:
            logger.debug("Skipping outgoing message %s", message.message_id)
            return Outcome.IGNORED_OUTGOING

        if isinstance(update, GroupMessage):
            logger.debug("Ignoring group chat message from chat ID: %s", message.chat_id)
            return Outcome.IGNORED_GROUP

        if isinstance(update, ChannelMessage):
            logger.debug("Ignoring channel message from channel ID: %s", message.chat_id)
            return Outcome.IGNORED_CHANNEL

        if not isinstance(update, DirectMessage):
            logger.debug("Unknown update variant: %s", type(update).__name__)
            return Outcome.IGNORED_UNRECOGNIZED

        sender_id = message.sender_id
        label = f"{message.sender_name} (ID: {sender_id})" if message.sender_name else f"ID: {sender_id}"
        logger.info("Message from %s: %s", label, message.text[:100])

        if not self.contacts.is_contact(sender_id):
            logger.info("Message from non-contact %s - ignoring", label)
            return Outcome.IGNORED_NON_CONTACT

        async with self._lock_for(sender_id):
            current = now or self.clock()
            if not self.ledger.should_respond(sender_id, current, self.cooldown):
                logger.info("Already responded to %s recently, skipping", label)
                return Outcome.IGNORED_COOLDOWN

            logger.info("Sending response to %s", label)
            try:
                await self.gateway.send_text(sender_id, self.response_message)
            except asyncio.CancelledError:
                logger.warning("Response to %s cancelled, not recorded", label)
                raise
            except Exception as e:
                self.send_failures += 1
                logger.error("Error sending response to %s: %s", label, e)
                raise

            self.ledger.record_response(sender_id, current)

        logger.info("Sent response to %s", label)
        return Outcome.SENT

    def _lock_for(self, sender_id: int) -> asyncio.Lock:
        lock = self._sender_locks.get(sender_id)
        if lock is None:
            lock = self._sender_locks[sender_id] = asyncio.Lock()
        return lock
