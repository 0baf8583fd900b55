"""Pytest configuration and fixtures."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from gateway import EngagementTracker, EscalationQueue, MessageRouter, PermissionStore  # noqa: E402
from inference import StubCompletionBackend  # noqa: E402
from transport.base import MessagingTransport  # noqa: E402
from transport.whatsapp.schemas import NormalizedMessage  # noqa: E402

OPERATOR_ID = "15550000000"


class RecordingTransport(MessagingTransport):
    """In-memory transport: records sends, serves canned media."""

    def __init__(self, media: Optional[dict] = None):
        self.sent: list[tuple[str, str]] = []
        self.media = media or {}
        self.fail_sends_to: set[str] = set()

    async def send_text(self, conversation_id: str, text: str) -> None:
        if conversation_id in self.fail_sends_to:
            raise RuntimeError(f"send to {conversation_id} failed")
        self.sent.append((conversation_id, text))

    async def download_media(self, media_id: str) -> bytes:
        if media_id not in self.media:
            raise RuntimeError(f"unknown media {media_id}")
        return self.media[media_id]

    def messages_to(self, conversation_id: str) -> list[str]:
        return [text for to, text in self.sent if to == conversation_id]


def make_message(
    sender_id: str = "15551234567",
    text: str = "",
    input_type: str = "text",
    media_id: Optional[str] = None,
    display_name: str = "Dana",
    message_id: str = "wamid.test",
) -> NormalizedMessage:
    return NormalizedMessage(
        sender_id=sender_id,
        display_name=display_name,
        message_id=message_id,
        timestamp=datetime(2024, 2, 9, 12, 0, 0),
        input_type=input_type,
        input_text=text,
        media_id=media_id,
    )


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def permissions(tmp_path):
    return PermissionStore(tmp_path / "permissions.json")


@pytest.fixture
def completion_backend():
    return StubCompletionBackend(reply="4")


@pytest.fixture
def message_router(transport, permissions, completion_backend):
    return MessageRouter(
        transport=transport,
        completion_backend=completion_backend,
        tracker=EngagementTracker(),
        permissions=permissions,
        escalations=EscalationQueue(),
        audio_pipeline=None,
        operator_id=OPERATOR_ID,
    )
