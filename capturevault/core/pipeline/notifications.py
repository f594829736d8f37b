"""
Pipeline Notifications
======================

Two logical signals reach the user:
- ENCRYPTING: shown for the duration of a run
- ENCRYPTION_ERROR: shown when a run fails; dismissible, and cleared
  when the next run starts so it never outlives an unrelated run

Rendering belongs to the host. It plugs in a NotificationSink; the
pipeline only talks to PipelineNotifier.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from capturevault.core.logging import get_secure_logger
from capturevault.core.pipeline.job import EncryptionJob, PipelineFailure, PipelineResult

logger = get_secure_logger(__name__)


class Notification(Enum):
    """Notification handles, valued by their stable host ids."""
    ENCRYPTION_ERROR = 1337
    ENCRYPTING = 1338


class NotificationSink(ABC):
    """Host-side renderer for pipeline notifications."""

    @abstractmethod
    def notify(self, notification: Notification, message: str) -> None:
        """Show or replace a notification."""

    @abstractmethod
    def cancel(self, notification: Notification) -> None:
        """Remove a notification if it is shown."""


class LoggingNotificationSink(NotificationSink):
    """Default sink for hosts without a notification surface."""

    def notify(self, notification: Notification, message: str) -> None:
        if notification is Notification.ENCRYPTION_ERROR:
            logger.error("[notification] %s", message)
        else:
            logger.info("[notification] %s", message)

    def cancel(self, notification: Notification) -> None:
        logger.debug("[notification] cancel %s", notification.name)


class PipelineNotifier:
    """
    Drives the notification lifecycle of pipeline runs.

    Each run gets exactly one begin_run() and one end_run(). end_run()
    with a failure, or with no result at all (the run crashed), shows the
    error notification.
    """

    __slots__ = ("_sink", "_lock", "_error_shown")

    def __init__(self, sink: Optional[NotificationSink] = None) -> None:
        self._sink = sink or LoggingNotificationSink()
        self._lock = threading.Lock()
        self._error_shown = False

    @property
    def error_shown(self) -> bool:
        with self._lock:
            return self._error_shown

    def begin_run(self, job: EncryptionJob) -> None:
        with self._lock:
            if self._error_shown:
                self._sink.cancel(Notification.ENCRYPTION_ERROR)
                self._error_shown = False
            self._sink.notify(Notification.ENCRYPTING, f"Encrypting {job.source_path.name}")

    def end_run(self, result: Optional[PipelineResult]) -> None:
        with self._lock:
            self._sink.cancel(Notification.ENCRYPTING)

            if result is not None and result.ok:
                return

            if isinstance(result, PipelineFailure):
                message = f"Error encrypting {result.job.source_path.name}"
            else:
                message = "Error encrypting and saving image"

            self._sink.notify(Notification.ENCRYPTION_ERROR, message)
            self._error_shown = True

    def dismiss_error(self) -> None:
        """User dismissal of the error notification."""
        with self._lock:
            if self._error_shown:
                self._sink.cancel(Notification.ENCRYPTION_ERROR)
                self._error_shown = False
