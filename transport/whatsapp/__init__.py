"""WhatsApp Transport Layer - Module Exports

The FastAPI router lives in transport.whatsapp.webhook and is imported by
the application directly.
"""

from .client import MediaDownloadError, WhatsAppClient, WhatsAppSenderError
from .normalize import (
    NormalizationError,
    extract_sender_id,
    normalize_message,
)
from .schemas import (
    ContactObject,
    MediaInfo,
    MessageObject,
    NormalizedMessage,
    WhatsAppMessageResponse,
    WhatsAppWebhookPayload,
)
from .security import (
    SignatureVerificationError,
    check_signature,
    compute_signature,
    verify_signature,
    verify_webhook_challenge,
)

__all__ = [
    # Schemas
    "NormalizedMessage",
    "WhatsAppWebhookPayload",
    "MessageObject",
    "ContactObject",
    "MediaInfo",
    "WhatsAppMessageResponse",
    # Normalization
    "normalize_message",
    "extract_sender_id",
    "NormalizationError",
    # Security
    "compute_signature",
    "check_signature",
    "verify_signature",
    "verify_webhook_challenge",
    "SignatureVerificationError",
    # Client
    "WhatsAppClient",
    "WhatsAppSenderError",
    "MediaDownloadError",
]
