"""
Core module - Contains configuration, logging, errors and the pipeline.
"""

from capturevault.core.config import CaptureVaultConfig
from capturevault.core.errors import CryptoFailure, FailureKind, IoFailure, PipelineError
from capturevault.core.logging import SecureLogFilter, configure_logging, get_secure_logger

__all__ = [
    "CaptureVaultConfig",
    "CryptoFailure",
    "FailureKind",
    "IoFailure",
    "PipelineError",
    "SecureLogFilter",
    "configure_logging",
    "get_secure_logger",
]
