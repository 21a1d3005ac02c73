"""
Identity Tracker

Shared set of nicknames that have identified with the account service
during this connection. Consulted before any privileged command.
"""

import threading
from typing import List

from ..utils.logging_config import get_logger

# Logger setup
logger = get_logger(__name__)


class IdentityTracker:
    """
    Thread-safe set of identified nicknames.

    Every read and write takes the lock for the duration of that single
    operation only.
    """

    def __init__(self):
        self._identified = set()
        self._lock = threading.Lock()

    def identify(self, nickname: str) -> None:
        with self._lock:
            self._identified.add(nickname)
        logger.debug(f"Nickname identified: {nickname}")

    def is_identified(self, nickname: str) -> bool:
        with self._lock:
            return nickname in self._identified

    def remove(self, nickname: str) -> None:
        with self._lock:
            self._identified.discard(nickname)

    def identified(self) -> List[str]:
        """Snapshot of every identified nickname."""
        with self._lock:
            return sorted(self._identified)

    def __len__(self) -> int:
        with self._lock:
            return len(self._identified)
