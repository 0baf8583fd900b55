"""
Stub STT backends for testing and offline development.
"""

from typing import Optional

from .base import TranscriptionBackend, TranscriptionRequest, TranscriptionResponse


class StubTranscriptionBackend(TranscriptionBackend):
    """
    Deterministic fake STT.

    Returns a fixed transcript for any non-empty file and records the paths
    it was given, so tests can check the file existed at submission time.
    """

    def __init__(self, text: str = "alpha this is a stubbed transcript"):
        self.text = text
        self.submitted: list = []

    def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        path = request.audio_path
        exists = path.exists()
        self.submitted.append((path, exists))

        if not exists or path.stat().st_size == 0:
            return TranscriptionResponse(
                status="recoverable_error",
                error_type="invalid_audio",
                metadata={"backend": "stub_stt", "trace_id": request.trace_id},
            )

        return TranscriptionResponse(
            status="success",
            text=self.text,
            metadata={"backend": "stub_stt", "trace_id": request.trace_id},
        )


class NoOpTranscriptionBackend(TranscriptionBackend):
    """STT that always fails (voice notes disabled)."""

    def __init__(self, reason: Optional[str] = "STT disabled"):
        self.reason = reason

    def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        return TranscriptionResponse(
            status="fatal_error",
            error_type="backend_unavailable",
            metadata={
                "backend": "noop_stt",
                "trace_id": request.trace_id,
                "reason": self.reason,
            },
        )
