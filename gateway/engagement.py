"""
Engagement Tracker

Counts inbound requester messages per conversation for the lifetime of the
process. The count drives automatic promotion into the permission store.
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)


class EngagementTracker:
    """In-memory per-conversation message counter."""

    def __init__(self):
        self._counts: Dict[str, int] = {}

    def record_message(self, conversation_id: str) -> int:
        """Increment the counter for a conversation and return the new count."""
        count = self._counts.get(conversation_id, 0) + 1
        self._counts[conversation_id] = count
        logger.debug(
            f"Engagement recorded for {conversation_id}: {count}",
            extra={"conversation_id": conversation_id, "count": count},
        )
        return count

    def count(self, conversation_id: str) -> int:
        """Current count without incrementing."""
        return self._counts.get(conversation_id, 0)
