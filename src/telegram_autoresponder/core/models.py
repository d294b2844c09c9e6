"""
Pydantic models for the Telegram autoresponder.

Holds the daemon configuration, the decoded form of inbound updates and the
small result types passed between the gateway, the registry and the engine.
"""
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

DEFAULT_RESPONSE_MESSAGE = (
    "Hi! I'm no longer using Telegram. Please contact me via email or other means."
)

LOG_LEVELS = ("debug", "info", "warning", "error")


class DaemonConfig(BaseModel):
    """
    Configuration for the autoresponder daemon.

    Values come from defaults, then the YAML config file, then environment
    variables (see telegram_autoresponder.core.config.load_config).
    """
    app_id: int  # my.telegram.org API ID
    app_hash: str
    phone: str  # Account phone number, international format
    password: Optional[str] = None  # Two-step verification password, if enabled
    session_file: Path = Path("session")  # Telethon appends .session
    response_message: str = DEFAULT_RESPONSE_MESSAGE
    response_timeout_hours: int = 24  # Cooldown between replies to the same sender
    log_level: str = "info"
    log_file: Optional[Path] = None

    @field_validator('app_id')
    @classmethod
    def validate_app_id(cls, v: int) -> int:
        if v == 0:
            raise ValueError("app_id is required")
        return v

    @field_validator('app_hash', 'phone')
    @classmethod
    def validate_required_text(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator('response_message')
    @classmethod
    def validate_response_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("response_message cannot be empty")
        return v

    @field_validator('response_timeout_hours')
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("response_timeout_hours must be at least 1")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return v

    @field_validator('log_file', mode='before')
    @classmethod
    def validate_log_file(cls, v):
        # Empty string means "no log file", not the current directory
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def cooldown(self) -> timedelta:
        """Minimum time between two auto-replies to the same sender."""
        return timedelta(hours=self.response_timeout_hours)

    @property
    def debug(self) -> bool:
        return self.log_level == "debug"


class PeerKind(str, Enum):
    """Context a message was posted in."""
    DIRECT = "direct"  # One-to-one chat with a user
    GROUP = "group"  # Basic group chat
    CHANNEL = "channel"  # Channel or supergroup


class InboundMessage(BaseModel):
    """A new message as seen by the engine, stripped of Telethon types."""
    message_id: int = 0
    chat_id: int  # User, chat or channel ID of the peer the message belongs to
    sender_id: int
    sender_name: str = ""  # Best-effort display name, empty when unknown
    text: str = ""
    outgoing: bool = False  # Sent by our own account
    peer_kind: PeerKind = PeerKind.DIRECT


class DirectMessage(BaseModel):
    """Message in a one-to-one chat. The only actionable variant."""
    kind: Literal["direct"] = "direct"
    message: InboundMessage


class GroupMessage(BaseModel):
    kind: Literal["group"] = "group"
    message: InboundMessage


class ChannelMessage(BaseModel):
    kind: Literal["channel"] = "channel"
    message: InboundMessage


class OtherUpdate(BaseModel):
    """Anything the engine does not understand (service messages, unknown peers)."""
    kind: Literal["other"] = "other"
    description: str = ""


InboundUpdate = Union[DirectMessage, GroupMessage, ChannelMessage, OtherUpdate]


class ContactsSnapshot(BaseModel):
    """Result of a contact-list request."""
    user_ids: frozenset[int] = Field(default_factory=frozenset)
    changed: bool = True  # False when Telegram answered "not modified"

    class Config:
        frozen = True


class Outcome(str, Enum):
    """What the engine did with one inbound update."""
    SENT = "sent"
    IGNORED_UNRECOGNIZED = "ignored_unrecognized"
    IGNORED_OUTGOING = "ignored_outgoing"
    IGNORED_GROUP = "ignored_group"
    IGNORED_CHANNEL = "ignored_channel"
    IGNORED_NON_CONTACT = "ignored_non_contact"
    IGNORED_COOLDOWN = "ignored_cooldown"
