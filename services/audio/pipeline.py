"""
Voice Note Pipeline

Turns an inbound voice note into prompt text:
1. Download the media through the transport
2. Transcode to mono 16 kHz MP3 (temp file)
3. Submit the file for transcription
4. Delete the temp file, whatever the transcription outcome

Any failed stage short-circuits to None; the router then replies with an
audio error instead of continuing the text flow. No retries.
"""

import asyncio
import logging
import os
from typing import Optional

from services.stt import TranscriptionBackend, TranscriptionRequest
from transport.base import MessagingTransport

from .transcoder import FFmpegTranscoder

logger = logging.getLogger(__name__)


class AudioPipeline:
    """Download → transcode → transcribe, with guaranteed temp cleanup."""

    def __init__(
        self,
        transport: MessagingTransport,
        transcoder: FFmpegTranscoder,
        stt_backend: TranscriptionBackend,
        timeout_s: Optional[int] = 30,
    ):
        self.transport = transport
        self.transcoder = transcoder
        self.stt_backend = stt_backend
        self.timeout_s = timeout_s

    async def transcribe(self, media_id: str, trace_id: Optional[str] = None) -> Optional[str]:
        """
        Run the full pipeline for one voice note.

        Returns:
            Transcribed text, or None if any stage failed
        """
        loop = asyncio.get_running_loop()

        try:
            audio_data = await self.transport.download_media(media_id)
        except Exception as e:
            logger.error(f"Audio download failed: {e}", exc_info=True, extra={"media_id": media_id})
            return None

        try:
            audio_path = await loop.run_in_executor(None, self.transcoder.transcode, audio_data)
        except Exception as e:
            logger.error(f"Audio transcoding failed: {e}", extra={"media_id": media_id})
            return None

        try:
            response = await loop.run_in_executor(
                None,
                self.stt_backend.transcribe,
                TranscriptionRequest(
                    audio_path=audio_path,
                    timeout_s=self.timeout_s,
                    trace_id=trace_id,
                ),
            )
        except Exception as e:
            logger.error(f"Transcription failed: {e}", exc_info=True, extra={"media_id": media_id})
            return None
        finally:
            try:
                os.unlink(audio_path)
            except FileNotFoundError:
                pass

        if response.status != "success" or not response.text:
            logger.warning(
                f"Transcription unsuccessful: {response.error_type}",
                extra={"media_id": media_id, "status": response.status},
            )
            return None

        text = response.text.strip()
        logger.info(
            f"Voice note transcribed: {text[:50]}",
            extra={"media_id": media_id, "chars": len(text)},
        )
        return text or None
