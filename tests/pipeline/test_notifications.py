"""Tests for pipeline notifications."""

from __future__ import annotations

from pathlib import Path

import pytest

from capturevault.core.errors import FailureKind
from capturevault.core.pipeline.job import (
    EncryptionJob,
    PipelineFailure,
    PipelineStage,
    PipelineSuccess,
)
from capturevault.core.pipeline.notifications import Notification, PipelineNotifier


@pytest.fixture
def job() -> EncryptionJob:
    return EncryptionJob.for_source("/sdcard/IMG_1.jpg", Path("/data/enc"), Path("/data/tmp"))


def _failure(job: EncryptionJob) -> PipelineFailure:
    return PipelineFailure(
        job=job,
        reason=FailureKind.CRYPTO_FAILURE,
        message="Invalid key material",
        stage=PipelineStage.ENCRYPTING,
    )


class TestPipelineNotifier:
    """Tests for PipelineNotifier."""

    def test_success_only_dismisses_progress(self, sink, job) -> None:
        """A successful run shows progress then cancels it."""
        notifier = PipelineNotifier(sink)

        notifier.begin_run(job)
        notifier.end_run(PipelineSuccess(job=job, destination_path=job.destination_path))

        assert sink.events == [
            ("notify", Notification.ENCRYPTING),
            ("cancel", Notification.ENCRYPTING),
        ]
        assert notifier.error_shown is False

    def test_failure_shows_error(self, sink, job) -> None:
        """A failed run cancels progress and shows the error."""
        notifier = PipelineNotifier(sink)

        notifier.begin_run(job)
        notifier.end_run(_failure(job))

        assert sink.events[-2:] == [
            ("cancel", Notification.ENCRYPTING),
            ("notify", Notification.ENCRYPTION_ERROR),
        ]
        assert "IMG_1.jpg" in sink.messages[-1]
        assert notifier.error_shown is True

    def test_crashed_run_shows_error(self, sink, job) -> None:
        """end_run without a result is treated as a failure."""
        notifier = PipelineNotifier(sink)

        notifier.begin_run(job)
        notifier.end_run(None)

        assert sink.count("notify", Notification.ENCRYPTION_ERROR) == 1

    def test_next_run_clears_stale_error(self, sink, job) -> None:
        """An error notification does not outlive the next run's start."""
        notifier = PipelineNotifier(sink)
        notifier.begin_run(job)
        notifier.end_run(_failure(job))

        notifier.begin_run(job)

        assert sink.count("cancel", Notification.ENCRYPTION_ERROR) == 1
        assert notifier.error_shown is False

    def test_user_can_dismiss_error(self, sink, job) -> None:
        """dismiss_error cancels the error once."""
        notifier = PipelineNotifier(sink)
        notifier.begin_run(job)
        notifier.end_run(_failure(job))

        notifier.dismiss_error()
        notifier.dismiss_error()

        assert sink.count("cancel", Notification.ENCRYPTION_ERROR) == 1

    def test_default_sink_logs(self, job, caplog) -> None:
        """Without a host sink, notifications go to the log."""
        notifier = PipelineNotifier()

        with caplog.at_level("INFO", logger="capturevault"):
            notifier.begin_run(job)
            notifier.end_run(_failure(job))

        assert "Encrypting IMG_1.jpg" in caplog.text
        assert "Error encrypting IMG_1.jpg" in caplog.text
