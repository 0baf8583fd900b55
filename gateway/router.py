"""
Message Router

Top-level orchestrator for inbound messages.

Requester flow:
    Received → (AudioDecoded?) → WakeWordMatched? → PermissionChecked
             → Completion → {RepliedDirectly | Escalated}

Operator flow:
    /ans <token> <reply> → resolve pending query → forward reply to requester

Every requester message counts towards promotion, wake word or not. Errors in
the requester flow become a single generic reply; they never reach the
caller.
"""

import asyncio
import logging
import re
from typing import Optional

from inference import CompletionBackend, CompletionRequest, CompletionResponse
from services.audio import AudioPipeline
from transport.base import MessagingTransport
from transport.whatsapp.schemas import NormalizedMessage

from .engagement import EngagementTracker
from .escalation import EscalationQueue
from .permissions import PermissionStore, PermissionStoreError
from .policy import is_low_confidence

logger = logging.getLogger(__name__)

APPROVAL_THRESHOLD = 3
WAKE_WORD = "alpha"
BOT_NAME = "Alpha"

ACKNOWLEDGEMENT_REPLY = "Consulting knowledge base... ⏳"
AUDIO_ERROR_REPLY = "⚠️ Couldn't process audio message"
TEXT_ERROR_REPLY = "⚠️ Error processing request"

OPERATOR_COMMAND_RE = re.compile(r"^/ans\s+(\S+)(?:\s+(.*))?$", re.DOTALL)


def format_assistance_request(display_name: str, prompt: str, token: str) -> str:
    """Operator notification for an escalated query."""
    return (
        f"❓ Assistance Request\n\n"
        f"User: {display_name}\n"
        f"Query: {prompt}\n"
        f"ID: {token}\n"
        f"Reply with: /ans {token} [response]"
    )


def parse_operator_command(text: str) -> Optional[tuple[str, str]]:
    """Split '/ans <token> <reply...>' into (token, reply); None if not a command."""
    match = OPERATOR_COMMAND_RE.match(text.strip())
    if not match:
        return None
    return match.group(1), (match.group(2) or "").strip()


class MessageRouter:
    """
    Routes normalized inbound messages.

    All state lives in the injected stores; the router itself only holds
    configuration.
    """

    def __init__(
        self,
        transport: MessagingTransport,
        completion_backend: CompletionBackend,
        tracker: EngagementTracker,
        permissions: PermissionStore,
        escalations: EscalationQueue,
        audio_pipeline: Optional[AudioPipeline],
        operator_id: str,
        wake_word: str = WAKE_WORD,
        approval_threshold: int = APPROVAL_THRESHOLD,
        bot_name: str = BOT_NAME,
        timeout_s: Optional[int] = 30,
    ):
        self.transport = transport
        self.completion_backend = completion_backend
        self.tracker = tracker
        self.permissions = permissions
        self.escalations = escalations
        self.audio_pipeline = audio_pipeline
        self.operator_id = operator_id
        self.wake_word = wake_word
        self.approval_threshold = approval_threshold
        self.bot_name = bot_name
        self.timeout_s = timeout_s
        self._wake_word_re = re.compile(re.escape(wake_word), re.IGNORECASE)

    async def handle(self, message: NormalizedMessage) -> None:
        """
        Entry point for every inbound message.

        Raises only if the error reply itself cannot be delivered.
        """
        if self.operator_id and message.sender_id == self.operator_id:
            await self.handle_operator_message(message)
            return

        try:
            await self.handle_requester_message(message)
        except Exception as e:
            logger.error(
                f"Error handling message from {message.sender_id}: {e}",
                exc_info=True,
                extra={
                    "conversation_id": message.sender_id,
                    "message_id": message.message_id,
                    "input_type": message.input_type,
                },
            )
            await self.transport.send_text(
                message.sender_id,
                AUDIO_ERROR_REPLY if message.is_audio else TEXT_ERROR_REPLY,
            )

    # ------------------------------------------------------------------
    # Requester flow
    # ------------------------------------------------------------------

    async def handle_requester_message(self, message: NormalizedMessage) -> None:
        conversation_id = message.sender_id

        if message.is_audio:
            text = await self._transcribe(message)
            if text is None:
                await self.transport.send_text(conversation_id, AUDIO_ERROR_REPLY)
                return
        else:
            text = message.input_text

        # Permission file reads and writes stay on the event loop: no other
        # coroutine can interleave inside a grant.
        count = self.tracker.record_message(conversation_id)
        if count >= self.approval_threshold:
            self._promote(conversation_id)

        prompt = self.extract_prompt(text)
        if prompt is None:
            logger.debug(
                "Message without wake word ignored",
                extra={"conversation_id": conversation_id},
            )
            return

        if not self.permissions.is_approved(conversation_id):
            remaining = self.approval_threshold - count
            await self.transport.send_text(
                conversation_id,
                f"🔒 You need {remaining} more messages to use {self.bot_name}",
            )
            return

        response = await self._complete(prompt, trace_id=message.message_id)

        if is_low_confidence(response):
            await self._escalate(message, prompt)
            return

        await self.transport.send_text(conversation_id, response.output)

    def extract_prompt(self, text: str) -> Optional[str]:
        """
        Strip the wake word from an addressed message.

        Returns None when the message does not start with the wake word.
        """
        text = (text or "").strip()
        if not text.lower().startswith(self.wake_word.lower()):
            return None
        return self._wake_word_re.sub("", text).strip()

    async def _transcribe(self, message: NormalizedMessage) -> Optional[str]:
        if self.audio_pipeline is None or not message.media_id:
            logger.warning(
                "Voice note received but audio pipeline is unavailable",
                extra={"conversation_id": message.sender_id},
            )
            return None
        return await self.audio_pipeline.transcribe(message.media_id, trace_id=message.message_id)

    def _promote(self, conversation_id: str) -> None:
        try:
            self.permissions.grant(conversation_id)
        except PermissionStoreError as e:
            logger.error(
                f"Promotion failed for {conversation_id}: {e}",
                extra={"conversation_id": conversation_id},
            )

    async def _complete(self, prompt: str, trace_id: Optional[str] = None) -> Optional[CompletionResponse]:
        request = CompletionRequest(prompt=prompt, timeout_s=self.timeout_s, trace_id=trace_id)
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self.completion_backend.complete, request)
        except Exception as e:
            logger.error(f"Completion backend raised: {e}", exc_info=True, extra={"trace_id": trace_id})
            return None

    async def _escalate(self, message: NormalizedMessage, prompt: str) -> None:
        token = self.escalations.enqueue(message.sender_id, message.display_name, prompt)
        await self.transport.send_text(
            self.operator_id,
            format_assistance_request(message.display_name, prompt, token),
        )
        await self.transport.send_text(message.sender_id, ACKNOWLEDGEMENT_REPLY)

    # ------------------------------------------------------------------
    # Operator flow
    # ------------------------------------------------------------------

    async def handle_operator_message(self, message: NormalizedMessage) -> None:
        """
        Forward an operator answer to the original requester.

        Anything that is not a /ans command for a pending token is dropped
        without telling the operator.
        """
        if message.input_type != "text":
            return

        command = parse_operator_command(message.input_text)
        if command is None:
            return

        token, reply = command
        query = self.escalations.resolve(token)
        if query is None:
            logger.info(f"Operator reply for unknown token {token} ignored", extra={"token": token})
            return

        try:
            await self.transport.send_text(query.requester, f"🤖 {self.bot_name}: {reply}")
        except Exception as e:
            # keep the query answerable so the operator can resend
            self.escalations.restore(query)
            logger.error(
                f"Failed to forward operator reply for {token}: {e}",
                exc_info=True,
                extra={"token": token, "requester": query.requester},
            )
