"""
Infrastructure configuration system.

Environment-based backend selection and gateway policy settings.
"""

import os
from typing import Literal
from dataclasses import dataclass

from gateway import PermissionStore
from gateway.router import APPROVAL_THRESHOLD, WAKE_WORD
from inference import CompletionBackend, StubCompletionBackend, OpenAICompatCompletionBackend
from services.audio import FFmpegTranscoder
from services.stt import (
    TranscriptionBackend,
    StubTranscriptionBackend,
    NoOpTranscriptionBackend,
    OpenAICompatTranscriptionBackend,
)


LLMBackendType = Literal["stub", "openai"]
STTBackendType = Literal["stub", "openai"]

DEFAULT_SERVICE_URL = "https://free.churchless.tech"


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # LLM
    llm_backend: LLMBackendType
    llm_base_url: str
    llm_model: str
    llm_api_key: str

    # STT
    stt_enabled: bool
    stt_backend: STTBackendType
    stt_base_url: str
    stt_model: str
    stt_api_key: str

    # Audio
    ffmpeg_bin: str
    audio_temp_dir: str

    # Gateway policy
    permissions_path: str
    approval_threshold: int
    wake_word: str
    request_timeout_s: int

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        The transcription service defaults to the completion service's host
        and key when not set separately.
        """
        llm_base_url = os.getenv("LLM_BASE_URL", DEFAULT_SERVICE_URL)
        llm_api_key = os.getenv("LLM_API_KEY", "")

        return cls(
            # LLM Configuration
            llm_backend=os.getenv("LLM_BACKEND", "openai"),  # type: ignore
            llm_base_url=llm_base_url,
            llm_model=os.getenv("LLM_MODEL", "mistral-7b"),
            llm_api_key=llm_api_key,

            # STT Configuration
            stt_enabled=os.getenv("STT_ENABLED", "true").lower() == "true",
            stt_backend=os.getenv("STT_BACKEND", "openai"),  # type: ignore
            stt_base_url=os.getenv("STT_BASE_URL", llm_base_url),
            stt_model=os.getenv("STT_MODEL", "whisper-1"),
            stt_api_key=os.getenv("STT_API_KEY", llm_api_key),

            # Audio Configuration
            ffmpeg_bin=os.getenv("FFMPEG_BIN", "ffmpeg"),
            audio_temp_dir=os.getenv("AUDIO_TEMP_DIR", "temp"),

            # Gateway Configuration
            permissions_path=os.getenv("PERMISSIONS_PATH", "permissions.json"),
            approval_threshold=int(os.getenv("APPROVAL_THRESHOLD", str(APPROVAL_THRESHOLD))),
            wake_word=os.getenv("WAKE_WORD", WAKE_WORD),
            request_timeout_s=int(os.getenv("REQUEST_TIMEOUT_S", "30")),
        )

    def create_completion_backend(self) -> CompletionBackend:
        """Create completion backend instance based on configuration."""
        if self.llm_backend == "stub":
            return StubCompletionBackend()
        return OpenAICompatCompletionBackend(
            model_name=self.llm_model,
            base_url=self.llm_base_url,
            api_key=self.llm_api_key or None,
        )

    def create_stt_backend(self) -> TranscriptionBackend:
        """Create STT backend; a disabled STT still answers, with a failure."""
        if not self.stt_enabled:
            return NoOpTranscriptionBackend()

        if self.stt_backend == "stub":
            return StubTranscriptionBackend()
        return OpenAICompatTranscriptionBackend(
            model_name=self.stt_model,
            base_url=self.stt_base_url,
            api_key=self.stt_api_key or None,
        )

    def create_transcoder(self) -> FFmpegTranscoder:
        return FFmpegTranscoder(
            temp_dir=self.audio_temp_dir,
            ffmpeg_bin=self.ffmpeg_bin,
        )

    def create_permission_store(self) -> PermissionStore:
        return PermissionStore(self.permissions_path)


def get_config() -> InfraConfig:
    """Get infrastructure configuration from the current environment."""
    return InfraConfig.from_env()
