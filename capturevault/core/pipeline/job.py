"""
Pipeline Data Model
===================

EncryptionJob describes one request to protect a captured file.
PipelineResult is the outcome of running it: PipelineSuccess or
PipelineFailure.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from capturevault.core.errors import FailureKind
from capturevault.utils.validators import may_be_same_file


class PipelineStage(Enum):
    """Stages of the linear pipeline state machine."""
    IDLE = "Idle"
    QUARANTINING = "Quarantining"
    ENCRYPTING = "Encrypting"
    PURGING_QUARANTINE = "PurgingQuarantine"
    PURGING_ORIGINAL = "PurgingOriginal"


def _new_job_id() -> str:
    return secrets.token_hex(4)


@dataclass(frozen=True, slots=True)
class EncryptionJob:
    """
    One request to protect a file.

    The three paths are pairwise distinct. Jobs live only in memory and
    are consumed by a single pipeline run.
    """

    source_path: Path
    quarantine_path: Path
    destination_path: Path
    job_id: str = field(default_factory=_new_job_id)

    def __post_init__(self) -> None:
        self.ensure_distinct()

    def ensure_distinct(self) -> None:
        """
        Check that no two of the job's paths name the same file.

        Symlinked directories and hard links count as the same file.
        The filesystem can change after a job is created, so the pipeline
        checks again before touching anything.

        Raises:
            ValueError: If two paths are, or may be, the same file
        """
        paths = (self.source_path, self.quarantine_path, self.destination_path)
        for i, first in enumerate(paths):
            for second in paths[i + 1:]:
                if may_be_same_file(first, second):
                    raise ValueError(
                        "source, quarantine and destination paths must be distinct: "
                        f"{first} and {second} are the same file"
                    )

    @classmethod
    def for_source(
        cls,
        source_path: Path | str,
        encrypted_dir: Path,
        quarantine_dir: Path,
    ) -> EncryptionJob:
        """
        Derive a job for source_path.

        The destination keeps the source's base name inside the encrypted
        store; the quarantine copy keeps the destination's name inside the
        quarantine directory.
        """
        source_path = Path(source_path)
        destination_path = Path(encrypted_dir) / source_path.name
        quarantine_path = Path(quarantine_dir) / destination_path.name

        return cls(
            source_path=source_path,
            quarantine_path=quarantine_path,
            destination_path=destination_path,
        )

    def __repr__(self) -> str:
        return f"EncryptionJob(id={self.job_id}, file={self.source_path.name!r})"


@dataclass(frozen=True, slots=True)
class PipelineSuccess:
    """
    The ciphertext is safely in the store.

    purge_errors lists soft failures from the purge steps. The run is
    still a success when it is non-empty, but a plaintext copy may remain.
    """

    job: EncryptionJob
    destination_path: Path
    purge_errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class PipelineFailure:
    """The run stopped before the original was purged; the source is untouched."""

    job: EncryptionJob
    reason: FailureKind
    message: str
    stage: PipelineStage
    error: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @property
    def ok(self) -> bool:
        return False


PipelineResult = Union[PipelineSuccess, PipelineFailure]
