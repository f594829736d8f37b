"""Test doubles shared by the pipeline tests."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from capturevault.core.crypto.provider import EncryptionProvider
from capturevault.core.errors import CryptoFailure
from capturevault.core.pipeline.notifications import Notification, NotificationSink


class RecordingSink(NotificationSink):
    """Notification sink that remembers every call."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Notification]] = []
        self.messages: List[str] = []
        self._lock = threading.Lock()

    def notify(self, notification: Notification, message: str) -> None:
        with self._lock:
            self.events.append(("notify", notification))
            self.messages.append(message)

    def cancel(self, notification: Notification) -> None:
        with self._lock:
            self.events.append(("cancel", notification))

    def count(self, action: str, notification: Notification) -> int:
        return self.events.count((action, notification))


class RecordingProvider(EncryptionProvider):
    """Wraps a provider and records each call before delegating."""

    def __init__(
        self,
        inner: EncryptionProvider,
        on_encrypt: Optional[Callable[[Path, Path], None]] = None,
    ) -> None:
        self.inner = inner
        self.on_encrypt = on_encrypt
        self.calls: List[Tuple[Path, Path]] = []

    def encrypt(self, source_path: Path, destination_path: Path) -> None:
        self.calls.append((source_path, destination_path))
        if self.on_encrypt is not None:
            self.on_encrypt(source_path, destination_path)
        self.inner.encrypt(source_path, destination_path)


class FailingProvider(EncryptionProvider):
    """Writes some bytes to the destination, then rejects the operation."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or CryptoFailure("Invalid cipher parameters")

    def encrypt(self, source_path: Path, destination_path: Path) -> None:
        destination_path.write_bytes(b"partial container")
        raise self.error
