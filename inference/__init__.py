"""
Completion boundary for the language-model backend.

The gateway stays agnostic of the service behind it.

Supported backends:
- StubCompletionBackend: Deterministic fake model (tests, offline runs)
- OpenAICompatCompletionBackend: Any OpenAI-style /v1/chat/completions API

Example usage:
    from inference import StubCompletionBackend, CompletionRequest

    backend = StubCompletionBackend()
    response = backend.complete(CompletionRequest(prompt="what is 2+2"))
"""

from .types import CompletionRequest, CompletionResponse, CompletionStatus, DEFAULT_PERSONA
from .base import CompletionBackend
from .stub import StubCompletionBackend
from .openai_compat import OpenAICompatCompletionBackend

__all__ = [
    "CompletionRequest",
    "CompletionResponse",
    "CompletionStatus",
    "DEFAULT_PERSONA",
    "CompletionBackend",
    "StubCompletionBackend",
    "OpenAICompatCompletionBackend",
]
