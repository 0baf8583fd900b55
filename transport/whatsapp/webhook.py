"""
WhatsApp Webhook Receiver

FastAPI router for the WhatsApp Cloud API webhook.

Flow:
1. Verify signature (401 missing, 403 invalid)
2. Parse + normalize the payload
3. Hand the message to the gateway router in a background task
4. Acknowledge with 200 immediately (Meta redelivers on anything else)
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from gateway import MessageRouter
from infra.bootstrap import bootstrap_infrastructure, run_guarded

from .normalize import NormalizationError, extract_sender_id, normalize_message
from .schemas import NormalizedMessage
from .security import verify_signature, verify_webhook_challenge

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["WhatsApp Transport"])


def get_message_router() -> MessageRouter:
    """Process-wide gateway router (overridable in tests)."""
    return bootstrap_infrastructure().get_router()


async def dispatch_message(message_router: MessageRouter, message: NormalizedMessage) -> None:
    """Background task body: route one message under the fatal-error guard."""
    await run_guarded(
        message_router.handle(message),
        description=f"message {message.message_id} from {message.sender_id}",
    )


# ============================================================================
# WEBHOOK CHALLENGE (Setup only)
# ============================================================================

@router.get("/whatsapp", response_class=PlainTextResponse)
async def whatsapp_webhook_challenge(
    hub_mode: str = Query(..., alias="hub.mode"),
    hub_challenge: str = Query(..., alias="hub.challenge"),
    hub_verify_token: str = Query(..., alias="hub.verify_token"),
) -> str:
    """
    Verify webhook subscription challenge from Meta.

    Returns:
        The challenge string (plain text)

    Raises:
        HTTPException(403): Invalid token
        HTTPException(400): Invalid mode
    """
    return verify_webhook_challenge(hub_mode, hub_challenge, hub_verify_token)


# ============================================================================
# WEBHOOK RECEIVER (Message processing)
# ============================================================================

@router.post("/whatsapp")
async def whatsapp_webhook_receiver(
    request: Request,
    background_tasks: BackgroundTasks,
    message_router: MessageRouter = Depends(get_message_router),
) -> dict[str, str]:
    """
    Receive WhatsApp messages via webhook.

    Returns:
        {"status": "ok"} when a message was queued for routing,
        {"status": "ignored"} for status updates and malformed deliveries

    Raises:
        HTTPException(401): Missing signature
        HTTPException(403): Invalid signature
        HTTPException(422): Invalid JSON
    """

    body = await request.body()

    try:
        await verify_signature(request, body)
    except HTTPException as e:
        logger.warning(f"Signature verification failed: {e.detail}")
        raise

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid JSON payload"
        )

    try:
        normalized = normalize_message(payload)
    except NormalizationError as e:
        try:
            sender_id = extract_sender_id(payload)
        except NormalizationError:
            sender_id = None
        logger.warning(
            f"Normalization failed, event ignored: {e}",
            extra={"sender_id": sender_id},
        )
        return {"status": "ignored"}

    if normalized is None:
        logger.debug("Webhook event without messages ignored")
        return {"status": "ignored"}

    logger.info(
        "Message normalized",
        extra={
            "sender_id": normalized.sender_id,
            "message_id": normalized.message_id,
            "input_type": normalized.input_type,
        }
    )

    background_tasks.add_task(dispatch_message, message_router, normalized)
    return {"status": "ok"}
