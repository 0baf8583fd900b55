"""
WhatsApp Normalization Tests

Webhook payload → NormalizedMessage.
"""

import pytest

from transport.whatsapp.normalize import (
    NormalizationError,
    extract_sender_id,
    normalize_message,
)
from transport.whatsapp.schemas import NormalizedMessage, WhatsAppWebhookPayload


def webhook(message=None, contacts=None, statuses=None):
    value = {"messaging_product": "whatsapp"}
    if message is not None:
        value["messages"] = [message]
    if contacts is not None:
        value["contacts"] = contacts
    if statuses is not None:
        value["statuses"] = statuses
    return {
        "object": "whatsapp_business_account",
        "entry": [{"id": "waba-1", "changes": [{"field": "messages", "value": value}]}],
    }


def text_message(body="  alpha what is 2+2  ", sender="15551234567"):
    return {
        "from": sender,
        "id": "wamid.msg_123",
        "timestamp": "1707500000",
        "type": "text",
        "text": {"body": body},
    }


class TestTextNormalization:

    def test_text_message(self):
        normalized = normalize_message(webhook(
            text_message(),
            contacts=[{"wa_id": "15551234567", "profile": {"name": "Dana"}}],
        ))

        assert isinstance(normalized, NormalizedMessage)
        assert normalized.input_type == "text"
        assert normalized.input_text == "alpha what is 2+2"
        assert normalized.sender_id == "15551234567"
        assert normalized.display_name == "Dana"
        assert normalized.message_id == "wamid.msg_123"
        assert normalized.media_id is None
        assert normalized.is_audio is False

    def test_missing_contacts_gives_unknown_name(self):
        assert normalize_message(webhook(text_message())).display_name == "Unknown"

    def test_contact_matched_by_wa_id(self):
        normalized = normalize_message(webhook(
            text_message(sender="222"),
            contacts=[
                {"wa_id": "111", "profile": {"name": "Someone Else"}},
                {"wa_id": "222", "profile": {"name": "Dana"}},
            ],
        ))
        assert normalized.display_name == "Dana"

    def test_pydantic_payload_accepted(self):
        payload = WhatsAppWebhookPayload(**webhook(text_message()))
        assert normalize_message(payload).input_text == "alpha what is 2+2"

    def test_text_without_body_rejected(self):
        message = text_message()
        del message["text"]
        with pytest.raises(NormalizationError):
            normalize_message(webhook(message))


class TestMediaNormalization:

    def test_audio_keeps_media_id(self):
        normalized = normalize_message(webhook({
            "from": "15551234567",
            "id": "wamid.voice",
            "timestamp": "1707500000",
            "type": "audio",
            "audio": {"id": "media-1", "mime_type": "audio/ogg; codecs=opus", "voice": True},
        }))

        assert normalized.input_type == "audio"
        assert normalized.media_id == "media-1"
        assert normalized.input_text == ""
        assert normalized.is_audio is True

    def test_image_keeps_media_id(self):
        normalized = normalize_message(webhook({
            "from": "15551234567",
            "id": "wamid.img",
            "timestamp": "1707500000",
            "type": "image",
            "image": {"id": "media-2"},
        }))
        assert normalized.input_type == "image"
        assert normalized.media_id == "media-2"

    def test_audio_without_id_rejected(self):
        with pytest.raises(NormalizationError, match="Audio message missing ID"):
            normalize_message(webhook({
                "from": "1",
                "id": "wamid.voice",
                "timestamp": "1707500000",
                "type": "audio",
                "audio": {},
            }))


class TestOtherPayloads:

    def test_status_update_returns_none(self):
        payload = webhook(statuses=[{"id": "wamid.x", "status": "delivered"}])
        assert normalize_message(payload) is None

    @pytest.mark.parametrize("message_type,content", [
        ("location", {"latitude": 0, "longitude": 0}),
        ("sticker", {"id": "media-3", "mime_type": "image/webp"}),
        ("reaction", {"message_id": "wamid.prev", "emoji": "👍"}),
        ("unknown", None),
    ])
    def test_other_types_normalized_without_content(self, message_type, content):
        message = {
            "from": "15551234567",
            "id": "wamid.other",
            "timestamp": "1707500000",
            "type": message_type,
        }
        if content is not None:
            message[message_type] = content

        normalized = normalize_message(webhook(message))

        assert normalized.input_type == "other"
        assert normalized.sender_id == "15551234567"
        assert normalized.input_text == ""
        assert normalized.media_id is None

    @pytest.mark.parametrize("payload", [{}, {"entry": []}, {"entry": [{"changes": []}]}])
    def test_malformed_structure_rejected(self, payload):
        with pytest.raises(NormalizationError):
            normalize_message(payload)

    def test_bad_timestamp_rejected(self):
        message = text_message()
        message["timestamp"] = "yesterday"
        with pytest.raises(NormalizationError):
            normalize_message(webhook(message))


class TestExtractSenderId:

    def test_extracts_sender(self):
        assert extract_sender_id(webhook(text_message(sender="999"))) == "999"

    def test_missing_sender(self):
        with pytest.raises(NormalizationError):
            extract_sender_id(webhook(statuses=[]))
