"""
WhatsApp Cloud API Client

Outbound half of the WhatsApp transport:
- send a text message to a conversation
- download media referenced by an inbound message

No formatting intelligence. No retries.
"""

import logging
from typing import Optional

import httpx

from config import Config
from transport.base import MessagingTransport

from .schemas import MediaInfo, WhatsAppMessageResponse

logger = logging.getLogger(__name__)

# Cloud API limit for a text body
MAX_TEXT_LENGTH = 4096


class WhatsAppSenderError(Exception):
    """Failed to send a message to WhatsApp."""
    pass


class MediaDownloadError(Exception):
    """Failed to fetch media from WhatsApp."""
    pass


class WhatsAppClient(MessagingTransport):
    """Graph API transport bound to one business phone number."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        phone_number_id: Optional[str] = None,
        api_version: Optional[str] = None,
        graph_url: Optional[str] = None,
        timeout_s: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.access_token = access_token or Config.WHATSAPP_ACCESS_TOKEN
        self.phone_number_id = phone_number_id or Config.WHATSAPP_PHONE_NUMBER_ID
        self.api_version = api_version or Config.WHATSAPP_API_VERSION
        self.graph_url = (graph_url or Config.WHATSAPP_GRAPH_URL).rstrip("/")
        self.timeout_s = timeout_s
        self.http_client = http_client

    @property
    def api_base(self) -> str:
        return f"{self.graph_url}/{self.api_version}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared async HTTP client."""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(timeout=self.timeout_s)
        return self.http_client

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None

    async def send_text(self, conversation_id: str, text: str) -> WhatsAppMessageResponse:
        """
        Send a text message.

        Raises:
            WhatsAppSenderError: Missing configuration or API failure
        """
        if not self.access_token:
            raise WhatsAppSenderError("WHATSAPP_ACCESS_TOKEN not configured")
        if not self.phone_number_id:
            raise WhatsAppSenderError("WHATSAPP_PHONE_NUMBER_ID not configured")

        if len(text) > MAX_TEXT_LENGTH:
            text = text[:MAX_TEXT_LENGTH - 1] + "…"

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": conversation_id,
            "type": "text",
            "text": {"body": text},
        }

        try:
            client = await self._get_http_client()
            response = await client.post(
                f"{self.api_base}/{self.phone_number_id}/messages",
                json=payload,
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            logger.error(
                f"HTTP request failed: {e}",
                exc_info=True,
                extra={"conversation_id": conversation_id},
            )
            raise WhatsAppSenderError(f"HTTP request failed: {e}")

        if response.status_code != 200:
            logger.error(
                f"WhatsApp API error: {response.status_code} - {response.text}",
                extra={
                    "status_code": response.status_code,
                    "conversation_id": conversation_id,
                },
            )
            raise WhatsAppSenderError(f"WhatsApp API returned {response.status_code}")

        result = WhatsAppMessageResponse(**response.json())
        logger.info(
            f"Message sent to {conversation_id}",
            extra={
                "conversation_id": conversation_id,
                "response_id": (result.messages or [{}])[0].get("id"),
            },
        )
        return result

    async def download_media(self, media_id: str) -> bytes:
        """
        Fetch media bytes: resolve the media URL, then download it.

        Raises:
            MediaDownloadError: Lookup or download failed
        """
        if not self.access_token:
            raise MediaDownloadError("WHATSAPP_ACCESS_TOKEN not configured")

        try:
            client = await self._get_http_client()

            info_response = await client.get(
                f"{self.api_base}/{media_id}",
                headers=self._headers(),
            )
            if info_response.status_code != 200:
                raise MediaDownloadError(
                    f"Media lookup for {media_id} returned {info_response.status_code}"
                )
            info = MediaInfo(**info_response.json())

            file_response = await client.get(info.url, headers=self._headers())
            if file_response.status_code != 200:
                raise MediaDownloadError(
                    f"Media download for {media_id} returned {file_response.status_code}"
                )

        except httpx.RequestError as e:
            raise MediaDownloadError(f"HTTP request failed: {e}")
        except ValueError as e:
            raise MediaDownloadError(f"Unexpected media lookup response: {e}")

        content = file_response.content
        logger.debug(
            f"Downloaded {len(content)} bytes for media {media_id}",
            extra={"media_id": media_id, "mime_type": info.mime_type},
        )
        return content
