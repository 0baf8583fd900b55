"""
WhatsApp Signature Verification

SECURITY BOUNDARY - Verify Meta HMAC signature on every delivery.
No router imports. No retries.
"""

import hashlib
import hmac
from typing import Optional

from fastapi import HTTPException, Request, status

from config import Config


class SignatureVerificationError(Exception):
    """Signature verification failed."""
    pass


def compute_signature(body: bytes, app_secret: str) -> str:
    """X-Hub-Signature-256 value Meta would send for this body."""
    return "sha256=" + hmac.new(
        key=app_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).hexdigest()


def check_signature(signature: Optional[str], body: bytes, app_secret: str) -> None:
    """
    Compare a received signature with the expected one (constant time).

    Raises:
        SignatureVerificationError: Missing or mismatched signature
    """
    if not signature:
        raise SignatureVerificationError("Missing signature")
    if not hmac.compare_digest(signature, compute_signature(body, app_secret)):
        raise SignatureVerificationError("Invalid signature")


async def verify_signature(
    request: Request,
    body: bytes,
    app_secret: Optional[str] = None,
) -> None:
    """
    Verify the HMAC-SHA256 signature of a webhook delivery.

    Raises:
        HTTPException(401): Missing signature
        HTTPException(403): Invalid signature
        HTTPException(500): App secret not configured
    """

    signature = request.headers.get("X-Hub-Signature-256")
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Hub-Signature-256 header"
        )

    app_secret = app_secret or Config.WHATSAPP_APP_SECRET
    if not app_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="WHATSAPP_APP_SECRET not configured"
        )

    try:
        check_signature(signature, body, app_secret)
    except SignatureVerificationError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid signature"
        )


def verify_webhook_challenge(
    hub_mode: str,
    hub_challenge: str,
    hub_verify_token: str,
    expected_token: Optional[str] = None,
) -> str:
    """
    Answer Meta's subscription handshake.

    Meta calls GET /webhook/whatsapp with hub.mode=subscribe, a random
    hub.challenge and the configured hub.verify_token. We echo the challenge
    back when the token matches.

    Raises:
        HTTPException(400): Invalid mode
        HTTPException(403): Invalid token
    """

    expected_token = expected_token or Config.WHATSAPP_VERIFY_TOKEN

    if hub_mode != "subscribe":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid hub.mode"
        )

    if not expected_token or not hmac.compare_digest(hub_verify_token, expected_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid hub.verify_token"
        )

    return hub_challenge
