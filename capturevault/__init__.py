"""
CaptureVault - Encrypt-and-Purge Pipeline for Captured Images
=============================================================

Takes a freshly captured plaintext file, quarantines it, encrypts it into
a protected store and destroys every plaintext copy, one job at a time.

Security Notice:
- No key material is logged
- Plaintext is overwritten before it is unlinked
- A failed run never touches the original file
"""

from capturevault.core.config import CaptureVaultConfig
from capturevault.core.logging import configure_logging, get_secure_logger
from capturevault.core.pipeline import JobQueueFront, JobState, PipelineOrchestrator

__version__ = "0.1.0"
__author__ = "CaptureVault Team"

__all__ = [
    "CaptureVaultConfig",
    "JobQueueFront",
    "JobState",
    "PipelineOrchestrator",
    "configure_logging",
    "get_secure_logger",
    "__version__",
]
