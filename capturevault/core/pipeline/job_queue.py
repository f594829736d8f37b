"""
Job Queue Front
===============

Entry point for encrypt requests.

submit() returns immediately; a single worker thread runs the jobs one
after another in submission order, so the orchestrator never runs
concurrently with itself. Requests that arrive while a run is in flight
are queued, never rejected and never interleaved. Duplicate paths are
not deduplicated: each submission is an independent run.

Completion is reported to observers, called on the worker thread with
the PipelineResult of each run. A run that crashes with an unexpected
exception is reported as a PipelineFailure.
"""

from __future__ import annotations

import queue
import threading
from pathlib import Path
from typing import Callable, List, Optional

from capturevault.core.config import CaptureVaultConfig
from capturevault.core.crypto.provider import EncryptionProvider
from capturevault.core.errors import FailureKind
from capturevault.core.logging import get_secure_logger
from capturevault.core.pipeline.job import EncryptionJob, PipelineFailure, PipelineResult
from capturevault.core.pipeline.notifications import NotificationSink, PipelineNotifier
from capturevault.core.pipeline.orchestrator import PipelineOrchestrator
from capturevault.core.pipeline.state import JobState
from capturevault.utils.validators import validate_submission_path

logger = get_secure_logger(__name__)

ResultObserver = Callable[[PipelineResult], None]

_STOP = object()


class JobQueueFront:
    """
    Serializes encrypt requests onto one worker thread.

    Usage:
        front = JobQueueFront.from_config(config, provider)
        front.add_observer(lambda result: print(result.ok))
        front.submit("/sdcard/DCIM/IMG_1.jpg")
        ...
        front.shutdown()
    """

    def __init__(
        self,
        orchestrator: PipelineOrchestrator,
        encrypted_dir: Path,
        quarantine_dir: Path,
    ) -> None:
        self._orchestrator = orchestrator
        self._encrypted_dir = Path(encrypted_dir)
        self._quarantine_dir = Path(quarantine_dir)
        self._queue: queue.Queue = queue.Queue()
        self._observers: List[ResultObserver] = []
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self._closed = False

    @classmethod
    def from_config(
        cls,
        config: CaptureVaultConfig,
        provider: EncryptionProvider,
        sink: Optional[NotificationSink] = None,
        state: Optional[JobState] = None,
    ) -> JobQueueFront:
        """Wire the pipeline from configuration and create its directories."""
        config.ensure_directories()

        orchestrator = PipelineOrchestrator(
            provider=provider,
            state=state,
            notifier=PipelineNotifier(sink),
            overwrite_passes=config.pipeline.overwrite_passes,
        )
        return cls(
            orchestrator,
            encrypted_dir=config.paths.encrypted_dir,
            quarantine_dir=config.paths.quarantine_dir,
        )

    @property
    def state(self) -> JobState:
        return self._orchestrator.state

    @property
    def busy(self) -> bool:
        return self._orchestrator.state.busy

    @property
    def pending(self) -> int:
        """Jobs accepted but not yet finished, including the one running."""
        return self._queue.unfinished_tasks

    def add_observer(self, observer: ResultObserver) -> None:
        with self._lock:
            self._observers.append(observer)

    def remove_observer(self, observer: ResultObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def submit(self, file_path: Path | str) -> None:
        """
        Queue file_path for protection.

        Raises:
            ValueError: If file_path is empty or not absolute, or names a
                file inside the encrypted store or quarantine directory
            RuntimeError: If the queue has been shut down
        """
        source_path = validate_submission_path(file_path)
        job = EncryptionJob.for_source(source_path, self._encrypted_dir, self._quarantine_dir)

        with self._lock:
            if self._closed:
                raise RuntimeError("JobQueueFront has been shut down")
            self._queue.put(job)
            self._ensure_worker()

        logger.debug("Queued %r", job)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every submitted job has finished.

        Returns:
            True if the queue drained, False on timeout
        """
        with self._queue.all_tasks_done:
            if timeout is None:
                while self._queue.unfinished_tasks:
                    self._queue.all_tasks_done.wait()
                return True
            return self._queue.all_tasks_done.wait_for(
                lambda: not self._queue.unfinished_tasks, timeout
            )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs; the worker exits after draining the queue."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            worker = self._worker
            if worker is None:
                self._orchestrator.close()
                return
            self._queue.put(_STOP)

        if wait:
            worker.join()

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(
                target=self._work,
                name="capturevault-pipeline",
                daemon=True,
            )
            self._worker.start()

    def _work(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    self._orchestrator.close()
                    return
                self._process(job)
            finally:
                self._queue.task_done()

    def _process(self, job: EncryptionJob) -> None:
        try:
            result = self._orchestrator.run(job)
        except Exception as e:
            logger.exception("Job %s: pipeline crashed", job.job_id)
            result = PipelineFailure(
                job=job,
                reason=FailureKind.IO_FAILURE,
                message=f"Pipeline crashed: {e!r}",
                stage=self._orchestrator.stage,
                error=e,
            )

        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                observer(result)
            except Exception:
                logger.exception("Result observer failed for job %s", job.job_id)
