"""
Escalation Queue

Unresolved human-assist requests, keyed by a short correlation token that the
operator quotes back in their reply (/ans <token> ...).

Entries never expire. They are removed only when resolved, and are lost on
process restart.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


@dataclass(frozen=True)
class PendingQuery:
    """A query waiting for a human answer."""
    token: str
    requester: str
    display_name: str
    prompt_text: str


class EscalationQueue:
    """
    In-memory table of pending queries.

    Tokens are the millisecond clock in base 36, bumped past the last issued
    value so two escalations in the same millisecond still get distinct tokens.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._pending: Dict[str, PendingQuery] = {}
        self._lock = threading.Lock()
        self._last_stamp = 0

    def _next_token(self) -> str:
        # caller holds the lock
        stamp = max(int(self._clock() * 1000), self._last_stamp + 1)
        self._last_stamp = stamp
        return to_base36(stamp)

    def enqueue(self, requester: str, display_name: str, prompt_text: str) -> str:
        """Store a pending query and return its correlation token."""
        with self._lock:
            token = self._next_token()
            self._pending[token] = PendingQuery(
                token=token,
                requester=requester,
                display_name=display_name,
                prompt_text=prompt_text,
            )

        logger.info(
            f"Query escalated with token {token}",
            extra={"token": token, "requester": requester},
        )
        return token

    def resolve(self, token: str) -> Optional[PendingQuery]:
        """Remove and return the pending query, or None if unknown."""
        with self._lock:
            query = self._pending.pop(token, None)

        if query is not None:
            logger.info(
                f"Escalation {token} resolved",
                extra={"token": token, "requester": query.requester},
            )
        return query

    def restore(self, query: PendingQuery) -> None:
        """Put a resolved query back, e.g. when its answer could not be delivered."""
        with self._lock:
            self._pending.setdefault(query.token, query)

    def get(self, token: str) -> Optional[PendingQuery]:
        """Look up without resolving."""
        with self._lock:
            return self._pending.get(token)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def __len__(self) -> int:
        return self.pending_count()
