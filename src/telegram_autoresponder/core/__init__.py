"""Core autoresponder modules."""

from telegram_autoresponder.core.errors import AutoResponderError, ConfigError, GatewayError
from telegram_autoresponder.core.models import (
    DaemonConfig,
    InboundMessage,
    PeerKind,
    DirectMessage,
    GroupMessage,
    ChannelMessage,
    OtherUpdate,
    ContactsSnapshot,
    Outcome,
)

__all__ = [
    "AutoResponderError",
    "ConfigError",
    "GatewayError",
    "DaemonConfig",
    "InboundMessage",
    "PeerKind",
    "DirectMessage",
    "GroupMessage",
    "ChannelMessage",
    "OtherUpdate",
    "ContactsSnapshot",
    "Outcome",
]
