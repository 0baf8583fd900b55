"""
Infrastructure initialization and bootstrap.

Builds the transport, stores, backends and router once per process, and
owns the last-resort error handling: anything escaping the router is fatal.
"""

import logging
import os
import signal
import sys
from typing import Awaitable, Optional

from config import Config
from gateway import EngagementTracker, EscalationQueue, MessageRouter
from services.audio import AudioPipeline
from transport.whatsapp.client import WhatsAppClient

from .config import InfraConfig, get_config

logger = logging.getLogger(__name__)


class InfraBootstrap:
    """
    Wire every component from configuration.

    Singleton pattern - single instance per process, so the in-memory
    engagement counters and pending escalations are shared by all requests.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(self, config: Optional[InfraConfig] = None, operator_id: Optional[str] = None):
        self.config = config or get_config()

        self.transport = WhatsAppClient(timeout_s=float(self.config.request_timeout_s))
        self.completion_backend = self.config.create_completion_backend()
        self.stt_backend = self.config.create_stt_backend()

        self.tracker = EngagementTracker()
        self.permissions = self.config.create_permission_store()
        self.escalations = EscalationQueue()

        self.audio_pipeline = AudioPipeline(
            transport=self.transport,
            transcoder=self.config.create_transcoder(),
            stt_backend=self.stt_backend,
            timeout_s=self.config.request_timeout_s,
        )

        self.router = MessageRouter(
            transport=self.transport,
            completion_backend=self.completion_backend,
            tracker=self.tracker,
            permissions=self.permissions,
            escalations=self.escalations,
            audio_pipeline=self.audio_pipeline,
            operator_id=operator_id if operator_id is not None else Config.OPERATOR_ID,
            wake_word=self.config.wake_word,
            approval_threshold=self.config.approval_threshold,
            timeout_s=self.config.request_timeout_s,
        )

    @classmethod
    def get_instance(cls, config: Optional[InfraConfig] = None) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_router(self) -> MessageRouter:
        return self.router

    def __repr__(self) -> str:
        return (
            f"InfraBootstrap(llm={self.config.llm_backend}, "
            f"stt={self.config.stt_backend if self.config.stt_enabled else 'disabled'}, "
            f"threshold={self.config.approval_threshold})"
        )


def bootstrap_infrastructure(config: Optional[InfraConfig] = None) -> InfraBootstrap:
    """Bootstrap all infrastructure (singleton)."""
    return InfraBootstrap.get_instance(config)


# ============================================================================
# FATAL ERROR HANDLING
# ============================================================================

def terminate_process() -> None:
    """Ask the server to stop; the process manager restarts it."""
    os.kill(os.getpid(), signal.SIGTERM)


async def run_guarded(work: Awaitable[None], description: str = "background task") -> None:
    """
    Await work outside any request scope.

    An exception reaching this point escaped the router's own error handling
    and leaves the process in an unknown state: log it and shut down.
    """
    try:
        await work
    except Exception:
        logger.critical(f"Uncaught exception in {description}", exc_info=True)
        terminate_process()


def _log_uncaught(exc_type, exc_value, exc_traceback) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))


def install_fatal_excepthook() -> None:
    """Log uncaught exceptions at CRITICAL before the interpreter exits."""
    sys.excepthook = _log_uncaught
