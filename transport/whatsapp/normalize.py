"""
WhatsApp Input Normalization

PURE CONVERSION - NO LOGIC, NO MODEL CALLS

Converts WhatsApp webhook payloads into NormalizedMessage.
- TEXT: Extract body, trim
- AUDIO: Keep media id only; transcription happens in the audio pipeline
- IMAGE: Keep media id only
- ANY OTHER TYPE: input_type "other", no content
- Status-only deliveries (sent/delivered/read receipts): None
"""

from datetime import datetime
from typing import Optional

from .schemas import NormalizedMessage, WhatsAppWebhookPayload

UNKNOWN_SENDER_NAME = "Unknown"


class NormalizationError(Exception):
    """Input normalization failed."""
    pass


def normalize_message(
    payload: dict | WhatsAppWebhookPayload,
) -> Optional[NormalizedMessage]:
    """
    Convert a WhatsApp webhook payload into a NormalizedMessage.

    Args:
        payload: Raw WhatsApp webhook payload

    Returns:
        NormalizedMessage, or None when the payload carries no message
        (e.g. a delivery status update)

    Raises:
        NormalizationError: Malformed payload
    """

    if isinstance(payload, WhatsAppWebhookPayload):
        payload = payload.model_dump()

    try:
        value = payload["entry"][0]["changes"][0]["value"]
    except (KeyError, IndexError, TypeError) as e:
        raise NormalizationError(f"Invalid payload structure: {e}")

    messages = value.get("messages") or []
    if not messages:
        return None

    try:
        message = messages[0]
        sender_id = message["from"]
        message_id = message["id"]
        timestamp = datetime.fromtimestamp(int(message["timestamp"]))
    except (KeyError, ValueError, TypeError) as e:
        raise NormalizationError(f"Invalid message structure: {e}")

    display_name = _display_name(value, sender_id)
    message_type = message.get("type")

    if message_type == "text":
        try:
            body = message["text"]["body"]
        except (KeyError, TypeError):
            raise NormalizationError("Text message missing 'text.body'")

        return NormalizedMessage(
            sender_id=sender_id,
            display_name=display_name,
            message_id=message_id,
            timestamp=timestamp,
            input_type="text",
            input_text=body.strip(),
        )

    if message_type in ("audio", "image"):
        media = message.get(message_type) or {}
        media_id = media.get("id") if isinstance(media, dict) else None
        if not media_id:
            raise NormalizationError(f"{message_type.capitalize()} message missing ID")

        return NormalizedMessage(
            sender_id=sender_id,
            display_name=display_name,
            message_id=message_id,
            timestamp=timestamp,
            input_type=message_type,
            media_id=media_id,
        )

    # Stickers, video, documents, reactions, ... still count as engagement
    return NormalizedMessage(
        sender_id=sender_id,
        display_name=display_name,
        message_id=message_id,
        timestamp=timestamp,
        input_type="other",
    )


def _display_name(value: dict, sender_id: str) -> str:
    """Profile name of the sender, or 'Unknown'."""
    contacts = value.get("contacts") or []
    for contact in contacts:
        if contact.get("wa_id") == sender_id:
            name = (contact.get("profile") or {}).get("name")
            if name:
                return name
    if contacts:
        return (contacts[0].get("profile") or {}).get("name") or UNKNOWN_SENDER_NAME
    return UNKNOWN_SENDER_NAME


def extract_sender_id(payload: dict) -> str:
    """
    Extract sender phone number from payload.

    Useful for logging without full normalization.
    """
    try:
        return payload["entry"][0]["changes"][0]["value"]["messages"][0]["from"]
    except (KeyError, IndexError, TypeError):
        raise NormalizationError("Cannot extract sender_id from payload")
