"""
Response Ledger - remembers when each sender last got an auto-reply.

Entries are created on the first successful reply and overwritten on every
later one. Stale entries are kept; the daemon serves one account at low
volume, so the map stays small.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

logger = logging.getLogger(__name__)


class ResponseLedger:
    """
    Per-sender timestamp of the last successful auto-reply.

    Every read and write goes through one lock, so the ledger can be shared
    by concurrently running handlers (and threads) without lost updates.

    Example:
        >>> from datetime import datetime, timedelta
        >>> ledger = ResponseLedger()
        >>> t0 = datetime(2026, 1, 1)
        >>> ledger.should_respond(42, t0, timedelta(hours=1))
        True
        >>> ledger.record_response(42, t0)
        >>> ledger.should_respond(42, t0 + timedelta(minutes=30), timedelta(hours=1))
        False
    """

    def __init__(self) -> None:
        self._last_response: dict[int, datetime] = {}
        self._lock = threading.Lock()

    def should_respond(self, user_id: int, now: datetime, cooldown: timedelta) -> bool:
        """
        Check whether a sender is outside the cooldown window.

        Args:
            user_id: Sender's Telegram user ID
            now: Current time
            cooldown: Minimum gap between two replies

        Returns:
            True if we never replied, or the last reply is strictly older than cooldown
        """
        with self._lock:
            last = self._last_response.get(user_id)

        if last is None:
            return True
        return now - last > cooldown

    def record_response(self, user_id: int, now: datetime) -> None:
        """Store `now` as the last reply time for this sender."""
        with self._lock:
            self._last_response[user_id] = now
        logger.debug("Recorded response to %s at %s", user_id, now.isoformat())

    def last_response(self, user_id: int) -> Optional[datetime]:
        with self._lock:
            return self._last_response.get(user_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_response)
