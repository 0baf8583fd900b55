"""
Test suite for infrastructure wiring.

Verifies:
- Configuration defaults and overrides
- Factories create the configured backends
- Bootstrap shares one set of stores across the process
- Escaped errors are fatal
"""

import sys
from unittest.mock import patch

import pytest

from gateway import MessageRouter, PermissionStore
from infra import InfraBootstrap, InfraConfig
from infra.bootstrap import _log_uncaught, install_fatal_excepthook, run_guarded
from inference import OpenAICompatCompletionBackend, StubCompletionBackend
from services.audio import AudioPipeline, FFmpegTranscoder
from services.stt import (
    NoOpTranscriptionBackend,
    OpenAICompatTranscriptionBackend,
    StubTranscriptionBackend,
)
from transport.whatsapp.client import WhatsAppClient

ENV_VARS = [
    "LLM_BACKEND", "LLM_BASE_URL", "LLM_MODEL", "LLM_API_KEY",
    "STT_ENABLED", "STT_BACKEND", "STT_BASE_URL", "STT_MODEL", "STT_API_KEY",
    "FFMPEG_BIN", "AUDIO_TEMP_DIR", "PERMISSIONS_PATH",
    "APPROVAL_THRESHOLD", "WAKE_WORD", "REQUEST_TIMEOUT_S",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def stub_config(clean_env, tmp_path):
    clean_env.setenv("LLM_BACKEND", "stub")
    clean_env.setenv("STT_BACKEND", "stub")
    clean_env.setenv("PERMISSIONS_PATH", str(tmp_path / "permissions.json"))
    clean_env.setenv("AUDIO_TEMP_DIR", str(tmp_path / "temp"))
    return InfraConfig.from_env()


@pytest.fixture(autouse=True)
def reset_singleton():
    InfraBootstrap.reset()
    yield
    InfraBootstrap.reset()


class TestInfraConfig:
    """Test infrastructure configuration."""

    def test_config_from_env_defaults(self, clean_env):
        """Defaults point at the free OpenAI-compatible service."""
        config = InfraConfig.from_env()

        assert config.llm_backend == "openai"
        assert config.llm_base_url == "https://free.churchless.tech"
        assert config.llm_model == "mistral-7b"
        assert config.stt_enabled is True
        assert config.stt_model == "whisper-1"
        assert config.ffmpeg_bin == "ffmpeg"
        assert config.audio_temp_dir == "temp"
        assert config.permissions_path == "permissions.json"
        assert config.approval_threshold == 3
        assert config.wake_word == "alpha"
        assert config.request_timeout_s == 30

    def test_stt_service_defaults_to_llm_service(self, clean_env):
        clean_env.setenv("LLM_BASE_URL", "https://llm.example")
        clean_env.setenv("LLM_API_KEY", "key")

        config = InfraConfig.from_env()

        assert config.stt_base_url == "https://llm.example"
        assert config.stt_api_key == "key"

    def test_overrides(self, clean_env):
        clean_env.setenv("APPROVAL_THRESHOLD", "5")
        clean_env.setenv("WAKE_WORD", "beta")
        clean_env.setenv("STT_ENABLED", "false")

        config = InfraConfig.from_env()

        assert config.approval_threshold == 5
        assert config.wake_word == "beta"
        assert config.stt_enabled is False

    def test_creates_openai_backends(self, clean_env):
        config = InfraConfig.from_env()

        assert isinstance(config.create_completion_backend(), OpenAICompatCompletionBackend)
        assert isinstance(config.create_stt_backend(), OpenAICompatTranscriptionBackend)

    def test_creates_stub_backends(self, stub_config):
        assert isinstance(stub_config.create_completion_backend(), StubCompletionBackend)
        assert isinstance(stub_config.create_stt_backend(), StubTranscriptionBackend)

    def test_stt_disabled(self, stub_config):
        stub_config.stt_enabled = False
        assert isinstance(stub_config.create_stt_backend(), NoOpTranscriptionBackend)

    def test_creates_transcoder_and_store(self, stub_config, tmp_path):
        transcoder = stub_config.create_transcoder()
        store = stub_config.create_permission_store()

        assert isinstance(transcoder, FFmpegTranscoder)
        assert transcoder.temp_dir == tmp_path / "temp"
        assert isinstance(store, PermissionStore)
        assert store.path == tmp_path / "permissions.json"


class TestInfraBootstrap:
    """Test bootstrap wiring."""

    def test_wires_router(self, stub_config):
        infra = InfraBootstrap(stub_config, operator_id="15550000000")
        router = infra.get_router()

        assert isinstance(router, MessageRouter)
        assert isinstance(infra.transport, WhatsAppClient)
        assert isinstance(router.audio_pipeline, AudioPipeline)
        assert router.transport is infra.transport
        assert router.audio_pipeline.transport is infra.transport
        assert router.operator_id == "15550000000"
        assert router.approval_threshold == 3
        assert router.permissions is infra.permissions

    def test_singleton(self, stub_config):
        first = InfraBootstrap.get_instance(stub_config)
        second = InfraBootstrap.get_instance()

        assert first is second
        assert first.get_router().escalations is second.get_router().escalations

    def test_repr(self, stub_config):
        assert "llm=stub" in repr(InfraBootstrap(stub_config, operator_id="op"))


class TestFatalErrorHandling:

    @pytest.mark.asyncio
    async def test_successful_work_does_not_terminate(self):
        async def work():
            return None

        with patch("infra.bootstrap.terminate_process") as terminate:
            await run_guarded(work())

        terminate.assert_not_called()

    @pytest.mark.asyncio
    async def test_escaped_exception_terminates(self, caplog):
        async def work():
            raise RuntimeError("send failed")

        with patch("infra.bootstrap.terminate_process") as terminate:
            await run_guarded(work(), description="message wamid.1")

        terminate.assert_called_once()
        assert any(
            r.levelname == "CRITICAL" and "message wamid.1" in r.getMessage()
            for r in caplog.records
        )

    def test_excepthook_installed(self, monkeypatch):
        monkeypatch.setattr(sys, "excepthook", sys.__excepthook__)
        install_fatal_excepthook()
        assert sys.excepthook is _log_uncaught

    def test_excepthook_logs_critical(self, caplog):
        try:
            raise ValueError("boom")
        except ValueError:
            _log_uncaught(*sys.exc_info())

        assert any(r.levelname == "CRITICAL" for r in caplog.records)
