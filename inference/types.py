from dataclasses import dataclass
from typing import Optional, Dict, Any, Literal

CompletionStatus = Literal["success", "recoverable_error", "fatal_error"]

DEFAULT_PERSONA = "You are Alpha, a helpful WhatsApp assistant. Respond concisely."


@dataclass
class CompletionRequest:
    prompt: str
    system_prompt: str = DEFAULT_PERSONA
    timeout_s: Optional[int] = 30
    trace_id: Optional[str] = None


@dataclass
class CompletionResponse:
    status: CompletionStatus
    output: Optional[str] = None
    error_type: Optional[str] = None   # timeout | invalid_output | backend_unavailable
    metadata: Optional[Dict[str, Any]] = None
