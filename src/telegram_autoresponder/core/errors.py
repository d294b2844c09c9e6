"""Exception types raised by the autoresponder."""
from typing import Optional


class AutoResponderError(Exception):
    """Base class for all autoresponder errors."""


class ConfigError(AutoResponderError):
    """Configuration could not be loaded or failed validation."""


class GatewayError(AutoResponderError):
    """A call into the Telegram client failed (transport, auth or rate limit).

    Attributes:
        retry_after: Seconds Telegram asked us to wait, for flood-wait errors.
    """

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after
