"""
CaptureVault Pipeline
=====================

Quarantine, encrypt and purge a captured file, one job at a time.

Components:
- job.py: EncryptionJob and run results
- state.py: process-wide busy flag
- notifications.py: in-progress and error notifications
- orchestrator.py: the step sequence for one run
- job_queue.py: single-worker submission front
"""

from capturevault.core.pipeline.job import (
    EncryptionJob,
    PipelineFailure,
    PipelineResult,
    PipelineStage,
    PipelineSuccess,
)
from capturevault.core.pipeline.job_queue import JobQueueFront
from capturevault.core.pipeline.notifications import (
    LoggingNotificationSink,
    Notification,
    NotificationSink,
    PipelineNotifier,
)
from capturevault.core.pipeline.orchestrator import PipelineOrchestrator
from capturevault.core.pipeline.state import JobState

__all__ = [
    "EncryptionJob",
    "JobQueueFront",
    "JobState",
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "PipelineFailure",
    "PipelineNotifier",
    "PipelineOrchestrator",
    "PipelineResult",
    "PipelineStage",
    "PipelineSuccess",
]
