"""
Remote STT backend for OpenAI-compatible transcription APIs.

Uploads the audio as a multipart form to /v1/audio/transcriptions and reads
the recognized text from the JSON body. One attempt, no retries.
"""

import logging
from typing import Optional

import requests

from .base import TranscriptionBackend, TranscriptionRequest, TranscriptionResponse

logger = logging.getLogger(__name__)


class OpenAICompatTranscriptionBackend(TranscriptionBackend):
    """Whisper-style transcription over HTTP."""

    def __init__(
        self,
        model_name: str = "whisper-1",
        base_url: str = "https://free.churchless.tech",
        api_key: Optional[str] = None,
    ):
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        base_metadata = {
            "backend": "openai_compat_stt",
            "model": self.model_name,
            "trace_id": request.trace_id,
        }
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            with open(request.audio_path, "rb") as audio_file:
                resp = requests.post(
                    f"{self.base_url}/v1/audio/transcriptions",
                    files={"file": (request.filename, audio_file, "audio/mpeg")},
                    data={"model": self.model_name},
                    headers=headers,
                    timeout=request.timeout_s,
                )
            resp.raise_for_status()
            text = resp.json().get("text")

        except requests.Timeout:
            logger.error("Transcription request timed out", extra=base_metadata)
            return TranscriptionResponse(
                status="recoverable_error",
                error_type="timeout",
                metadata=base_metadata,
            )

        except Exception as e:
            logger.error(f"Transcription API error: {e}", exc_info=True, extra=base_metadata)
            return TranscriptionResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={**base_metadata, "error": str(e)},
            )

        if not isinstance(text, str) or not text.strip():
            return TranscriptionResponse(
                status="recoverable_error",
                error_type="invalid_audio",
                metadata=base_metadata,
            )

        return TranscriptionResponse(
            status="success",
            text=text.strip(),
            metadata=base_metadata,
        )
