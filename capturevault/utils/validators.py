"""
Validation Utilities
====================

Argument checks applied to encrypt requests at submission time.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import Optional


class ValidationError(ValueError):
    """Raised when a submitted path is unusable."""
    pass


def validate_submission_path(path: Optional[str | PurePath]) -> Path:
    """
    Check a submitted file path.

    Only the shape of the path is checked here. Whether the file exists is
    decided by the pipeline, which reports a missing file as IoFailure.

    Args:
        path: The path handed to submit()

    Returns:
        The path as a Path object

    Raises:
        ValidationError: If the path is empty, relative, contains NUL
            bytes or parent-directory segments, or names no file
    """
    if path is None or str(path) == "":
        raise ValidationError("A file path is required")

    if "\x00" in str(path):
        raise ValidationError("Path contains invalid characters")

    candidate = Path(path)

    if not candidate.is_absolute():
        raise ValidationError(f"Path must be absolute: {candidate}")

    if ".." in candidate.parts:
        raise ValidationError("Path traversal detected")

    if not candidate.name:
        raise ValidationError(f"Path does not name a file: {candidate}")

    return candidate


def may_be_same_file(first: Path, second: Path) -> bool:
    """
    Check whether two paths can name the same file.

    Paths are compared after resolving symlinks, so a directory reached
    through a link (such as /sdcard on Android) is recognised. When both
    files exist their inodes are compared too, which catches hard links.

    Returns:
        True if the paths are, or cannot be proven not to be, the same file
    """
    first, second = Path(first), Path(second)
    if first == second:
        return True

    try:
        if first.resolve() == second.resolve():
            return True
        if first.exists() and second.exists():
            return os.path.samefile(first, second)
    except (OSError, RuntimeError):
        # Unverifiable paths are treated as aliases
        return True

    return False
