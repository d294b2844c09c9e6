"""Time-based response tracking."""

from telegram_autoresponder.temporal.response_ledger import ResponseLedger

__all__ = [
    "ResponseLedger",
]
