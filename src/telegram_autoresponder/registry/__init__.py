"""Contact registry."""

from telegram_autoresponder.registry.contacts import ContactRegistry

__all__ = [
    "ContactRegistry",
]
