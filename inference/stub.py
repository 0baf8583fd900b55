from typing import Optional

from .base import CompletionBackend
from .types import CompletionRequest, CompletionResponse


class StubCompletionBackend(CompletionBackend):
    """
    Deterministic fake model for tests and offline runs.

    Answers every prompt with a fixed reply. A reply of None simulates a
    backend outage. Prompts are recorded so tests can assert on what was sent.
    """

    def __init__(self, reply: Optional[str] = "This is a stubbed response."):
        self.reply = reply
        self.prompts: list[str] = []

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.prompts.append(request.prompt)

        if self.reply is None:
            return CompletionResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={"backend": "stub", "trace_id": request.trace_id},
            )

        return CompletionResponse(
            status="success",
            output=self.reply,
            metadata={"backend": "stub", "trace_id": request.trace_id},
        )
