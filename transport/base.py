"""
Messaging transport boundary.

The router talks to the messaging network only through this interface:
send a text to a conversation, fetch the bytes of an inbound media item.
"""

from abc import ABC, abstractmethod


class MessagingTransport(ABC):
    """Outbound half of a messaging transport."""

    @abstractmethod
    async def send_text(self, conversation_id: str, text: str) -> None:
        """Deliver a text message. Raises on failure."""
        raise NotImplementedError

    @abstractmethod
    async def download_media(self, media_id: str) -> bytes:
        """Fetch raw media bytes referenced by an inbound message. Raises on failure."""
        raise NotImplementedError
