"""Duplicate inbound message suppression"""

import threading
import time
from typing import Callable, Dict


class MessageDeduplicator:
    """Remembers (user, message) keys for a short window"""

    def __init__(self, ttl_seconds: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def seen_recently(self, user_id: str, message_id: str) -> bool:
        """
        True if this message was already handled inside the window;
        otherwise records it and returns False.

        Check and record happen under one lock, so concurrent deliveries of
        the same message see exactly one False.
        """
        key = f"{user_id}-{message_id}"

        with self._lock:
            now = self.clock()
            expires_at = self._seen.get(key)
            if expires_at is not None and now < expires_at:
                return True

            self._purge(now)
            self._seen[key] = now + self.ttl_seconds
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def _purge(self, now: float) -> None:
        # Caller holds the lock
        for key in [k for k, expires_at in self._seen.items() if now >= expires_at]:
            del self._seen[key]
