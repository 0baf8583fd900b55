"""
Gateway core: routing, engagement, permissions and escalation.
"""

from .engagement import EngagementTracker
from .escalation import EscalationQueue, PendingQuery
from .permissions import PermissionStore, PermissionStoreError
from .policy import HEDGING_PHRASE, is_low_confidence
from .router import MessageRouter

__all__ = [
    "EngagementTracker",
    "EscalationQueue",
    "PendingQuery",
    "PermissionStore",
    "PermissionStoreError",
    "HEDGING_PHRASE",
    "is_low_confidence",
    "MessageRouter",
]
