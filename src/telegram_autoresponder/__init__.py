"""
Telegram Autoresponder - replies to known contacts on an account you no longer read.

This package runs a long-lived Telethon user client that watches incoming
direct messages and answers senders from the account's contact list with a
fixed message, at most once per cooldown window per sender.
"""

__version__ = "1.0.0"
