"""
WhatsApp Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the contract between the WhatsApp Cloud API and the router.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# NORMALIZED MESSAGE (THE CONTRACT)
# ============================================================================

class NormalizedMessage(BaseModel):
    """
    Canonical inbound event the router consumes.

    The router never sees raw webhook JSON.
    """

    model_config = ConfigDict(frozen=True)

    sender_id: str = Field(..., description="Conversation id (wa_id of the sender)")
    display_name: str = Field("Unknown", description="Sender profile name")
    message_id: str = Field(..., description="Unique WhatsApp message ID")
    timestamp: datetime = Field(..., description="Message timestamp")
    input_type: Literal["text", "audio", "image", "other"] = Field(
        ...,
        description="Content modality (\"other\" for stickers, video, documents, ...)"
    )
    input_text: str = Field(
        "",
        description="Message body. Empty for everything but text."
    )
    media_id: Optional[str] = Field(
        None,
        description="Graph API media id for audio/image. None for text."
    )

    @property
    def is_audio(self) -> bool:
        return self.input_type == "audio"


# ============================================================================
# WHATSAPP WEBHOOK PAYLOAD SCHEMAS (INPUT)
# ============================================================================

class MessageObject(BaseModel):
    """A single WhatsApp message."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    from_: str = Field(..., alias="from")
    id: str
    timestamp: str
    type: str

    text: Optional[dict[str, str]] = None
    audio: Optional[dict[str, str | bool]] = None
    image: Optional[dict[str, str]] = None


class ContactObject(BaseModel):
    """Contact info attached to inbound messages."""

    model_config = ConfigDict(extra="allow")

    wa_id: str
    profile: dict[str, str] = Field(default_factory=dict)


class WhatsAppWebhookPayload(BaseModel):
    """
    Full WhatsApp webhook payload.

    ref: https://developers.facebook.com/docs/whatsapp/cloud-api/webhooks/payload-examples
    """

    model_config = ConfigDict(extra="allow")

    object: str = Field(..., description="Always 'whatsapp_business_account'")
    entry: list[dict] = Field(..., description="Webhook entries")


# ============================================================================
# WHATSAPP API RESPONSES (OUTPUT)
# ============================================================================

class WhatsAppMessageResponse(BaseModel):
    """Response from the Cloud API when sending a message."""

    model_config = ConfigDict(extra="allow")

    messaging_product: str = Field(default="whatsapp")
    contacts: list[dict[str, str]] = Field(default_factory=list)
    messages: list[dict[str, str]] = Field(default_factory=list)


class MediaInfo(BaseModel):
    """Response from GET /{media_id}."""

    model_config = ConfigDict(extra="allow")

    id: str
    url: str
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
