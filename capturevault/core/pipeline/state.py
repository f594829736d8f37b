"""
Job State
=========

Single-slot job state shared by the queue front and the orchestrator.

busy is true for the whole duration of exactly one pipeline run and false
otherwise. It is only set and cleared by the scoped running() context, so
every exit path of a run clears it.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List

from capturevault.core.errors import JobStateError
from capturevault.core.logging import get_secure_logger

logger = get_secure_logger(__name__)

BusyListener = Callable[[bool], None]


class JobState:
    """
    Process-wide "is a job running" flag.

    Other subsystems read busy to decide whether it is safe to act on the
    capture directory. Listeners are told about every transition, on the
    thread that performs it.

    Usage:
        state = JobState()
        with state.running():
            ...  # busy is True here
    """

    __slots__ = ("_lock", "_busy", "_listeners")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._busy = False
        self._listeners: List[BusyListener] = []

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    def add_listener(self, listener: BusyListener) -> None:
        """Register a callback invoked with the new busy value on each transition."""
        self._listeners.append(listener)

    def remove_listener(self, listener: BusyListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @contextmanager
    def running(self) -> Iterator[None]:
        """
        Hold the job slot for the duration of one run.

        Raises:
            JobStateError: If another run already holds the slot
        """
        with self._lock:
            if self._busy:
                raise JobStateError("A pipeline run is already in progress")
            self._busy = True

        self._notify(True)
        try:
            yield
        finally:
            with self._lock:
                self._busy = False
            self._notify(False)

    def _notify(self, busy: bool) -> None:
        for listener in list(self._listeners):
            try:
                listener(busy)
            except Exception:
                logger.exception("Busy listener failed")

    def __repr__(self) -> str:
        return f"JobState(busy={self._busy})"
