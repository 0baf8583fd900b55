"""
Speech-to-Text (STT) abstract interface.

Role: normalized audio file → plain text, nothing else.

Rules:
- Pure transformation (no state mutation)
- No intent inference
- Failure is returned as a typed status, never raised
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any, Literal


TranscriptionStatus = Literal["success", "recoverable_error", "fatal_error"]


@dataclass
class TranscriptionRequest:
    """Speech-to-Text request for an audio file on disk."""

    audio_path: Path
    filename: str = "audio.mp3"  # Name announced in the upload
    timeout_s: Optional[int] = 30
    trace_id: Optional[str] = None


@dataclass
class TranscriptionResponse:
    """Speech-to-Text response."""

    status: TranscriptionStatus
    text: Optional[str] = None
    error_type: Optional[str] = None  # timeout | invalid_audio | backend_unavailable
    metadata: Optional[Dict[str, Any]] = None


class TranscriptionBackend(ABC):
    """
    Abstract STT boundary.
    The audio pipeline depends ONLY on this interface.
    """

    @abstractmethod
    def transcribe(self, request: TranscriptionRequest) -> TranscriptionResponse:
        """
        Transcribe an audio file to text.

        Args:
            request: TranscriptionRequest pointing at a normalized audio file

        Returns:
            TranscriptionResponse with text or explicit error status
        """
        raise NotImplementedError
