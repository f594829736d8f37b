"""
Quarantine Copy
===============

Duplicates a freshly captured file into the private quarantine directory
so the pipeline holds a copy the user cannot alter or remove.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from capturevault.core.errors import IoFailure


def quarantine_copy(source_path: Path, quarantine_path: Path) -> None:
    """
    Copy source_path byte for byte to quarantine_path and fsync the copy.

    The source is left in place. An existing file at quarantine_path is
    replaced.

    Raises:
        IoFailure: If the source cannot be read or the copy cannot be written
    """
    try:
        shutil.copyfile(source_path, quarantine_path)
        with open(quarantine_path, "rb+") as f:
            os.fsync(f.fileno())
    except OSError as e:
        raise IoFailure(
            f"Cannot quarantine {Path(source_path).name}: {e.strerror or e}"
        ) from e
