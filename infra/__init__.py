"""
Infrastructure module exports.

Configuration, component wiring and process-level error handling.
"""

from .config import InfraConfig, get_config, LLMBackendType, STTBackendType
from .bootstrap import (
    InfraBootstrap,
    bootstrap_infrastructure,
    install_fatal_excepthook,
    run_guarded,
    terminate_process,
)

__all__ = [
    "InfraConfig",
    "get_config",
    "LLMBackendType",
    "STTBackendType",
    "InfraBootstrap",
    "bootstrap_infrastructure",
    "install_fatal_excepthook",
    "run_guarded",
    "terminate_process",
]
