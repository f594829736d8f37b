"""
Pipeline Orchestrator
=====================

Runs the protection pipeline for one job.

State Machine:
    Idle -> Quarantining -> Encrypting -> PurgingQuarantine -> PurgingOriginal -> Idle(Success)
                 \\-> Idle(Error)    \\-> Idle(Error)

Run Flow:
1. Enter: take the job slot (busy = True), show the in-progress notification
2. Quarantine: copy the source into the private quarantine directory
3. Pre-clean: secure-delete a stale file at the destination, create it fresh
4. Encrypt: the provider reads the ORIGINAL source and writes the destination
5. Purge quarantine copy
6. Purge original: on the purge executor, awaited before the run finishes
7. Exit: release the slot, settle the notifications

Failure Policy:
- IoFailure or CryptoFailure in steps 2-4 ends the run as PipelineFailure.
  The source is untouched; the partial quarantine copy and destination
  are secure-deleted, unless they turn out to be the source itself.
- A job whose paths name the same file (through a symlink or hard
  link) fails as IoFailure before any file is touched.
- Provider errors outside the cipher error types are logged as
  unexpected and classified as CryptoFailure.
- A failed purge in steps 5-6 is logged and recorded in
  PipelineSuccess.purge_errors. The ciphertext already exists, so the
  run still reports success.
- Nothing is retried and nothing is cancelable once started.
"""

from __future__ import annotations

import os
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from cryptography.exceptions import (
    AlreadyFinalized,
    InvalidKey,
    InvalidTag,
    UnsupportedAlgorithm,
)

from capturevault.core.crypto.provider import EncryptionProvider
from capturevault.core.errors import CryptoFailure, IoFailure, PipelineError
from capturevault.core.file_ops.quarantine import quarantine_copy
from capturevault.core.file_ops.secure_delete import (
    DEFAULT_OVERWRITE_PASSES,
    SecureDeleteError,
    secure_delete,
)
from capturevault.core.logging import get_secure_logger
from capturevault.core.pipeline.job import (
    EncryptionJob,
    PipelineFailure,
    PipelineResult,
    PipelineStage,
    PipelineSuccess,
)
from capturevault.core.pipeline.notifications import PipelineNotifier
from capturevault.core.pipeline.state import JobState
from capturevault.utils.validators import may_be_same_file

logger = get_secure_logger(__name__)

_CIPHER_ERRORS = (ValueError, InvalidKey, InvalidTag, UnsupportedAlgorithm, AlreadyFinalized)


class PipelineOrchestrator:
    """
    Executes the ordered pipeline steps for one job at a time.

    Usage:
        orchestrator = PipelineOrchestrator(provider, state, notifier)
        job = EncryptionJob.for_source(path, encrypted_dir, quarantine_dir)
        result = orchestrator.run(job)

    run() blocks the calling thread until the original has been purged
    (or the purge has failed). Callers serialize runs; JobState rejects
    an overlapping run with JobStateError.
    """

    def __init__(
        self,
        provider: EncryptionProvider,
        state: Optional[JobState] = None,
        notifier: Optional[PipelineNotifier] = None,
        overwrite_passes: int = DEFAULT_OVERWRITE_PASSES,
        purge_executor: Optional[Executor] = None,
    ) -> None:
        if overwrite_passes < 1:
            raise ValueError("overwrite_passes must be at least 1")

        self._provider = provider
        self._state = state or JobState()
        self._notifier = notifier or PipelineNotifier()
        self._passes = overwrite_passes
        self._owns_executor = purge_executor is None
        self._purge_executor = purge_executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="capturevault-purge"
        )
        self._stage = PipelineStage.IDLE

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def notifier(self) -> PipelineNotifier:
        return self._notifier

    @property
    def stage(self) -> PipelineStage:
        return self._stage

    def run(self, job: EncryptionJob) -> PipelineResult:
        """
        Run the pipeline for job.

        Returns:
            PipelineSuccess or PipelineFailure

        Raises:
            JobStateError: If another run holds the job slot
        """
        with self._state.running():
            self._notifier.begin_run(job)
            result: Optional[PipelineResult] = None
            try:
                result = self._execute(job)
            finally:
                self._set_stage(PipelineStage.IDLE)
                self._notifier.end_run(result)

        return result

    def close(self) -> None:
        """Shut down the purge executor if this orchestrator created it."""
        if self._owns_executor:
            self._purge_executor.shutdown(wait=True)

    def __enter__(self) -> PipelineOrchestrator:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _execute(self, job: EncryptionJob) -> PipelineResult:
        logger.info("Job %s: protecting %s", job.job_id, job.source_path.name)

        try:
            self._set_stage(PipelineStage.QUARANTINING)
            self._check_paths(job)
            quarantine_copy(job.source_path, job.quarantine_path)

            self._set_stage(PipelineStage.ENCRYPTING)
            self._encrypt(job)
        except PipelineError as e:
            stage = self._stage
            logger.error(
                "Job %s: %s while %s: %s",
                job.job_id, e.kind.value, stage.value, e, exc_info=True,
            )
            self._discard_partial_output(job, stage)
            return PipelineFailure(
                job=job,
                reason=e.kind,
                message=str(e),
                stage=stage,
                error=e,
            )

        purge_errors: List[str] = []

        self._set_stage(PipelineStage.PURGING_QUARANTINE)
        try:
            secure_delete(job.quarantine_path, passes=self._passes)
        except SecureDeleteError as e:
            logger.warning("Job %s: quarantine copy not purged: %s", job.job_id, e)
            purge_errors.append(str(e))

        # The ciphertext is persisted; from here on failures are soft
        self._set_stage(PipelineStage.PURGING_ORIGINAL)
        future = self._purge_executor.submit(secure_delete, job.source_path, self._passes)
        try:
            future.result()
        except SecureDeleteError as e:
            logger.warning("Job %s: original not purged, plaintext remains: %s", job.job_id, e)
            purge_errors.append(str(e))

        logger.info("Job %s: %s stored encrypted", job.job_id, job.destination_path.name)
        return PipelineSuccess(
            job=job,
            destination_path=job.destination_path,
            purge_errors=tuple(purge_errors),
        )

    def _encrypt(self, job: EncryptionJob) -> None:
        destination = job.destination_path

        if os.path.lexists(destination):
            logger.info("Job %s: removing stale %s from the store", job.job_id, destination.name)
        secure_delete(destination, passes=self._passes)

        try:
            destination.touch(mode=0o600, exist_ok=False)
        except OSError as e:
            raise IoFailure(f"Cannot create {destination.name}: {e.strerror or e}") from e

        # Reads the original source, not the quarantine copy
        try:
            self._provider.encrypt(job.source_path, destination)
        except PipelineError:
            raise
        except OSError as e:
            raise IoFailure(f"Encryption provider I/O error: {e.strerror or e}") from e
        except _CIPHER_ERRORS as e:
            raise CryptoFailure(f"Encryption provider failed: {e}") from e
        except Exception as e:
            logger.exception("Job %s: unexpected error from encryption provider", job.job_id)
            raise CryptoFailure(f"Encryption provider failed: {e!r}") from e

    def _check_paths(self, job: EncryptionJob) -> None:
        try:
            job.ensure_distinct()
        except ValueError as e:
            raise IoFailure(str(e)) from e

    def _discard_partial_output(self, job: EncryptionJob, stage: PipelineStage) -> None:
        leftovers: List[Path] = [job.quarantine_path]
        if stage is PipelineStage.ENCRYPTING:
            leftovers.append(job.destination_path)

        for path in leftovers:
            if may_be_same_file(path, job.source_path):
                logger.error("Job %s: %s aliases the source, not deleted", job.job_id, path.name)
                continue
            try:
                secure_delete(path, passes=self._passes)
            except SecureDeleteError as e:
                logger.error("Job %s: cleanup of %s failed: %s", job.job_id, path.name, e)

    def _set_stage(self, stage: PipelineStage) -> None:
        if stage is not self._stage:
            logger.debug("Stage %s -> %s", self._stage.value, stage.value)
            self._stage = stage
