"""
CaptureVault File Operations Module
===================================

Filesystem steps of the protection pipeline.

Components:
- secure_delete.py: overwrite-then-unlink destruction of plaintext
- quarantine.py: private staging copy of a captured file
"""

from capturevault.core.file_ops.quarantine import quarantine_copy
from capturevault.core.file_ops.secure_delete import (
    DEFAULT_OVERWRITE_PASSES,
    SecureDeleteError,
    secure_delete,
)

__all__ = [
    "DEFAULT_OVERWRITE_PASSES",
    "SecureDeleteError",
    "quarantine_copy",
    "secure_delete",
]
