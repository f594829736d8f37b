"""
Error Taxonomy
==============

Exceptions raised by the capture protection pipeline.

Pipeline failures come in exactly two kinds:
- IoFailure: filesystem copy, create or delete failed
- CryptoFailure: key unavailable, bad cipher parameters or cipher rejection

Both are terminal for a run and are never retried automatically.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(Enum):
    """Kinds of terminal pipeline failure."""
    IO_FAILURE = "IoFailure"
    CRYPTO_FAILURE = "CryptoFailure"


class CaptureVaultError(Exception):
    """Base exception for all CaptureVault errors."""
    pass


class PipelineError(CaptureVaultError):
    """Base class for failures that terminate a pipeline run."""

    kind: FailureKind = FailureKind.IO_FAILURE


class IoFailure(PipelineError):
    """Raised when a filesystem copy, create or delete fails."""

    kind = FailureKind.IO_FAILURE


class CryptoFailure(PipelineError):
    """Raised when the key is unavailable or the cipher rejects the operation."""

    kind = FailureKind.CRYPTO_FAILURE


class JobStateError(CaptureVaultError):
    """Raised when a run is started while another run holds the job state."""
    pass
