"""
Telegram gateway - thin wrapper around the Telethon user client.

Everything protocol-related (auth handshake, session storage, update
delivery, gap recovery) is Telethon's job. This module only adapts the few
calls the autoresponder needs and turns Telethon failures into GatewayError.
"""
import logging
from typing import Any, Awaitable, Callable, Optional

from telethon import TelegramClient, errors, events, functions, types, utils

from telegram_autoresponder.core.errors import GatewayError
from telegram_autoresponder.core.models import (
    ChannelMessage,
    ContactsSnapshot,
    DaemonConfig,
    DirectMessage,
    GroupMessage,
    InboundMessage,
    InboundUpdate,
    OtherUpdate,
    PeerKind,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[Any]]

# Failures that mean "Telegram did not do what we asked"
TRANSPORT_ERRORS = (errors.RPCError, ConnectionError, OSError)


class TelegramGateway:
    """Wrapper for the Telethon operations used by the daemon."""

    def __init__(self, config: DaemonConfig, client: Optional[TelegramClient] = None):
        self.config = config
        self.client = client or TelegramClient(
            str(config.session_file),
            config.app_id,
            config.app_hash
        )

    async def start(self) -> dict:
        """
        Connect and log in, prompting for the login code on first run.

        Returns:
            Info about the authenticated user

        Raises:
            GatewayError: If connecting or authenticating fails
        """
        kwargs: dict[str, Any] = {"phone": self.config.phone}
        if self.config.password:
            kwargs["password"] = self.config.password

        try:
            await self.client.start(**kwargs)
            me = await self.client.get_me()
        except (*TRANSPORT_ERRORS, ValueError, EOFError, RuntimeError) as e:
            # EOFError: no TTY for the login code prompt; RuntimeError: too many bad codes
            raise GatewayError(f"Authentication failed: {e}") from e

        if me is None:
            raise GatewayError("Authentication failed: not logged in")

        return {
            "id": me.id,
            "username": me.username,
            "first_name": me.first_name,
            "last_name": me.last_name,
            "phone": me.phone
        }

    async def list_contacts(self) -> ContactsSnapshot:
        """Fetch the full contact list (hash=0 forces a full answer)."""
        try:
            result = await self.client(functions.contacts.GetContactsRequest(hash=0))
        except TRANSPORT_ERRORS as e:
            raise GatewayError(f"Failed to get contacts: {e}") from e

        if isinstance(result, types.contacts.ContactsNotModified):
            return ContactsSnapshot(changed=False)
        if isinstance(result, types.contacts.Contacts):
            return ContactsSnapshot(
                user_ids=frozenset(contact.user_id for contact in result.contacts),
                changed=True
            )
        raise GatewayError(f"Unexpected contacts result type: {type(result).__name__}")

    def on_inbound_message(self, handler: EventHandler) -> None:
        """Register a callback for every new message event (incoming and outgoing)."""
        self.client.add_event_handler(handler, events.NewMessage())

    async def send_text(self, target_id: int, text: str) -> Any:
        """
        Send a plain text message to a user.

        Raises:
            GatewayError: On RPC, flood-wait, connection or entity resolution failure.
                Cancellation is not wrapped and propagates as-is.
        """
        try:
            return await self.client.send_message(target_id, text)
        except errors.FloodWaitError as e:
            raise GatewayError(
                f"Flood wait of {e.seconds}s while sending to {target_id}",
                retry_after=e.seconds
            ) from e
        except (*TRANSPORT_ERRORS, ValueError) as e:
            # ValueError: the user is not in the session's entity cache
            raise GatewayError(f"Failed to send message to {target_id}: {e}") from e

    async def run_until_disconnected(self) -> None:
        await self.client.run_until_disconnected()

    async def disconnect(self) -> None:
        await self.client.disconnect()


def decode_update(event: Any) -> InboundUpdate:
    """
    Convert a Telethon NewMessage event into one of the update variants.

    Anything that is not a regular message in a user, chat or channel peer
    becomes OtherUpdate. Never raises.
    """
    message = getattr(event, "message", None)
    if not isinstance(message, types.Message):
        return OtherUpdate(description=type(message).__name__)

    sender = getattr(event, "sender", None)
    sender_name = utils.get_display_name(sender) if sender is not None else ""
    from_user = getattr(message.from_id, "user_id", 0)
    peer = message.peer_id

    if isinstance(peer, types.PeerUser):
        inbound = InboundMessage(
            message_id=message.id,
            chat_id=peer.user_id,
            sender_id=peer.user_id,
            sender_name=sender_name,
            text=message.message or "",
            outgoing=bool(message.out),
            peer_kind=PeerKind.DIRECT,
        )
        return DirectMessage(message=inbound)

    if isinstance(peer, types.PeerChat):
        inbound = InboundMessage(
            message_id=message.id,
            chat_id=peer.chat_id,
            sender_id=from_user,
            sender_name=sender_name,
            text=message.message or "",
            outgoing=bool(message.out),
            peer_kind=PeerKind.GROUP,
        )
        return GroupMessage(message=inbound)

    if isinstance(peer, types.PeerChannel):
        inbound = InboundMessage(
            message_id=message.id,
            chat_id=peer.channel_id,
            sender_id=from_user,
            sender_name=sender_name,
            text=message.message or "",
            outgoing=bool(message.out),
            peer_kind=PeerKind.CHANNEL,
        )
        return ChannelMessage(message=inbound)

    return OtherUpdate(description=f"unknown peer {type(peer).__name__}")
