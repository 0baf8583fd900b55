import logging
from typing import Optional

import requests

from .base import CompletionBackend
from .types import CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)


class OpenAICompatCompletionBackend(CompletionBackend):
    """
    Completion backend for any OpenAI-compatible chat API.

    Sends [system persona, user prompt] to /v1/chat/completions and returns
    the first choice's message content. Single attempt, no retries.
    """

    def __init__(
        self,
        model_name: str = "mistral-7b",
        base_url: str = "https://free.churchless.tech",
        api_key: Optional[str] = None,
    ):
        """
        Args:
            model_name: Model identifier understood by the service
            base_url:   Service root, without the /v1 suffix
            api_key:    Optional bearer token
        """
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        base_metadata = {
            "backend": "openai_compat",
            "model": self.model_name,
            "trace_id": request.trace_id,
        }

        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.prompt},
            ],
        }
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            resp = requests.post(
                f"{self.base_url}/v1/chat/completions",
                json=payload,
                headers=headers,
                timeout=request.timeout_s,
            )
            resp.raise_for_status()
            data = resp.json()
            output = data["choices"][0]["message"]["content"]

        except requests.Timeout:
            logger.error("Completion request timed out", extra=base_metadata)
            return CompletionResponse(
                status="recoverable_error",
                error_type="timeout",
                metadata=base_metadata,
            )

        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected completion payload: {e}", extra=base_metadata)
            return CompletionResponse(
                status="recoverable_error",
                error_type="invalid_output",
                metadata={**base_metadata, "error": str(e)},
            )

        except Exception as e:
            logger.error(f"Completion API error: {e}", exc_info=True, extra=base_metadata)
            return CompletionResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={**base_metadata, "error": str(e)},
            )

        if not isinstance(output, str):
            return CompletionResponse(
                status="recoverable_error",
                error_type="invalid_output",
                metadata=base_metadata,
            )

        return CompletionResponse(
            status="success",
            output=output,
            metadata=base_metadata,
        )
