"""
Speech-to-Text service exports.
"""

from .base import (
    TranscriptionBackend,
    TranscriptionRequest,
    TranscriptionResponse,
    TranscriptionStatus,
)
from .stub import StubTranscriptionBackend, NoOpTranscriptionBackend
from .openai_compat import OpenAICompatTranscriptionBackend

__all__ = [
    "TranscriptionBackend",
    "TranscriptionRequest",
    "TranscriptionResponse",
    "TranscriptionStatus",
    "StubTranscriptionBackend",
    "NoOpTranscriptionBackend",
    "OpenAICompatTranscriptionBackend",
]
