"""
Secure Deletion Module
======================

Destroys file contents before removing the directory entry.

Properties:
- At least one full overwrite pass over the file's current length
- Every pass flushed and fsynced to stable storage
- Overwritten content is never read back
- Deleting a missing path is a successful no-op

This is best-effort unrecoverability, not atomic deletion: if a pass or
the unlink fails partway the file is left in an indeterminate state and
SecureDeleteError is raised. Callers must never assume the plaintext is
recoverable afterwards. Wear levelling on flash storage can still retain
old blocks.
"""

from __future__ import annotations

import os
import secrets
import stat
from pathlib import Path
from typing import Final

from capturevault.core.errors import IoFailure
from capturevault.core.logging import get_secure_logger

logger = get_secure_logger(__name__)

DEFAULT_OVERWRITE_PASSES: Final[int] = 3
BLOCK_SIZE: Final[int] = 4096

_ZEROS: Final[bytes] = b"\x00" * BLOCK_SIZE
_ONES: Final[bytes] = b"\xFF" * BLOCK_SIZE


class SecureDeleteError(IoFailure):
    """Raised when secure deletion fails."""
    pass


def _pass_block(pass_num: int, size: int) -> bytes:
    # Pass 1: zeros, pass 2: ones, pass 3+: random
    if pass_num == 0:
        return _ZEROS[:size]
    if pass_num == 1:
        return _ONES[:size]
    return secrets.token_bytes(size)


def secure_delete(path: Path | str, passes: int = DEFAULT_OVERWRITE_PASSES) -> None:
    """
    Overwrite a file in place, then unlink it.

    Args:
        path: Path to the file to destroy
        passes: Number of overwrite passes (at least 1)

    Raises:
        SecureDeleteError: If the path is not a regular file, or any
            overwrite, truncate or unlink step fails
    """
    if passes < 1:
        raise ValueError("passes must be at least 1")

    path = Path(path)

    try:
        try:
            st = os.lstat(path)
        except FileNotFoundError:
            return

        if not stat.S_ISREG(st.st_mode):
            raise SecureDeleteError(f"Not a regular file: {path}")

        file_size = st.st_size

        # Write-only, no O_TRUNC: blocks are overwritten in place
        fd = os.open(path, os.O_WRONLY | getattr(os, "O_BINARY", 0))
        with os.fdopen(fd, "wb", buffering=0) as f:
            for pass_num in range(passes):
                f.seek(0)

                bytes_written = 0
                while bytes_written < file_size:
                    chunk_size = min(BLOCK_SIZE, file_size - bytes_written)
                    f.write(_pass_block(pass_num, chunk_size))
                    bytes_written += chunk_size

                os.fsync(f.fileno())

            f.truncate(0)
            os.fsync(f.fileno())

        path.unlink()

        try:
            os.lstat(path)
        except FileNotFoundError:
            pass
        else:
            raise SecureDeleteError(f"File still exists after deletion: {path}")

    except OSError as e:
        raise SecureDeleteError(f"Secure deletion failed for {path.name}: {e.strerror or e}") from e

    logger.debug("Securely deleted %s (%d bytes, %d passes)", path.name, file_size, passes)
