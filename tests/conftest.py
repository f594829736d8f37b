"""Shared pytest fixtures for CaptureVault tests."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Callable, List, Optional

import pytest

from capturevault.core.crypto.provider import AesGcmEncryptionProvider, EncryptionProvider
from capturevault.core.pipeline.job import EncryptionJob
from capturevault.core.pipeline.notifications import PipelineNotifier
from capturevault.core.pipeline.orchestrator import PipelineOrchestrator
from capturevault.core.pipeline.state import JobState
from tests.helpers import RecordingSink


TEST_KEY = bytes(range(32))


@pytest.fixture
def aes_key() -> bytes:
    return TEST_KEY


@pytest.fixture
def provider(aes_key) -> AesGcmEncryptionProvider:
    return AesGcmEncryptionProvider(lambda: aes_key)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def vault_dirs(tmp_path: Path) -> SimpleNamespace:
    """Capture directory, encrypted store and quarantine directory."""
    dirs = SimpleNamespace(
        capture=tmp_path / "sdcard",
        encrypted=tmp_path / "data" / "enc",
        quarantine=tmp_path / "data" / "tmp",
    )
    for path in vars(dirs).values():
        path.mkdir(parents=True)
    return dirs


@pytest.fixture
def capture_file(vault_dirs) -> Callable[..., Path]:
    """Factory writing a plaintext file into the capture directory."""

    def _write(name: str = "IMG_1.jpg", content: bytes = b"\xff\xd8\xff\xe0 jpeg body") -> Path:
        path = vault_dirs.capture / name
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def make_job(vault_dirs) -> Callable[[Path], EncryptionJob]:
    def _make(source_path: Path) -> EncryptionJob:
        return EncryptionJob.for_source(source_path, vault_dirs.encrypted, vault_dirs.quarantine)

    return _make


@pytest.fixture
def make_orchestrator(sink):
    """Factory for orchestrators sharing the recording sink; closed after the test."""
    created: List[PipelineOrchestrator] = []

    def _make(provider: EncryptionProvider, state: Optional[JobState] = None) -> PipelineOrchestrator:
        orchestrator = PipelineOrchestrator(
            provider=provider,
            state=state or JobState(),
            notifier=PipelineNotifier(sink),
            overwrite_passes=1,
        )
        created.append(orchestrator)
        return orchestrator

    yield _make

    for orchestrator in created:
        orchestrator.close()
