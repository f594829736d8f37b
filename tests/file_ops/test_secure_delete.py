"""Tests for secure deletion."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from capturevault.core.errors import IoFailure
from capturevault.core.file_ops.secure_delete import BLOCK_SIZE, SecureDeleteError, secure_delete


class TestSecureDelete:
    """Tests for secure_delete()."""

    def test_removes_file(self, tmp_path: Path) -> None:
        """secure_delete removes an existing file."""
        target = tmp_path / "IMG_1.jpg"
        target.write_bytes(b"plaintext image")

        secure_delete(target)

        assert not target.exists()

    def test_missing_path_is_noop(self, tmp_path: Path) -> None:
        """Deleting a path that does not exist succeeds."""
        secure_delete(tmp_path / "never-existed.jpg")

    def test_second_call_leaves_same_end_state(self, tmp_path: Path) -> None:
        """Calling twice on the same path ends with the file absent both times."""
        target = tmp_path / "IMG_2.jpg"
        target.write_bytes(b"plaintext")

        secure_delete(target)
        assert not target.exists()

        secure_delete(target)
        assert not target.exists()

    def test_handles_empty_and_multi_block_files(self, tmp_path: Path) -> None:
        """Empty files and files spanning several blocks are both removed."""
        empty = tmp_path / "empty.jpg"
        empty.write_bytes(b"")
        large = tmp_path / "large.jpg"
        large.write_bytes(os.urandom(BLOCK_SIZE * 3 + 17))

        secure_delete(empty)
        secure_delete(large, passes=4)

        assert not empty.exists()
        assert not large.exists()

    def test_rejects_directory(self, tmp_path: Path) -> None:
        """A directory is not a regular file."""
        with pytest.raises(SecureDeleteError, match="Not a regular file"):
            secure_delete(tmp_path)

    def test_error_is_io_failure(self) -> None:
        """SecureDeleteError belongs to the IoFailure taxonomy."""
        assert issubclass(SecureDeleteError, IoFailure)

    def test_rejects_zero_passes(self, tmp_path: Path) -> None:
        """At least one overwrite pass is required."""
        target = tmp_path / "IMG_3.jpg"
        target.write_bytes(b"plaintext")

        with pytest.raises(ValueError):
            secure_delete(target, passes=0)

        assert target.exists()

    def test_opens_write_only(self, tmp_path: Path) -> None:
        """The file is never opened for reading."""
        target = tmp_path / "IMG_4.jpg"
        target.write_bytes(b"plaintext")
        real_open = os.open
        flags_seen = []

        def recording_open(path, flags, *args, **kwargs):
            flags_seen.append(flags)
            return real_open(path, flags, *args, **kwargs)

        with patch("capturevault.core.file_ops.secure_delete.os.open", side_effect=recording_open):
            secure_delete(target)

        assert len(flags_seen) == 1
        assert flags_seen[0] & (os.O_RDWR | os.O_WRONLY) == os.O_WRONLY

    def test_fsyncs_every_pass(self, tmp_path: Path) -> None:
        """Each pass is flushed to stable storage."""
        target = tmp_path / "IMG_5.jpg"
        target.write_bytes(b"plaintext" * 100)

        with patch("capturevault.core.file_ops.secure_delete.os.fsync", wraps=os.fsync) as fsync:
            secure_delete(target, passes=3)

        # One per pass plus one after truncation
        assert fsync.call_count == 4

    def test_unlink_failure_leaves_no_plaintext(self, tmp_path: Path) -> None:
        """When the unlink fails the content is already destroyed."""
        target = tmp_path / "IMG_6.jpg"
        target.write_bytes(b"very private plaintext")

        with patch.object(Path, "unlink", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(SecureDeleteError, match="Secure deletion failed"):
                secure_delete(target)

        assert target.exists()
        assert b"private" not in target.read_bytes()

    def test_overwrite_failure_raises(self, tmp_path: Path) -> None:
        """An OSError while overwriting surfaces as SecureDeleteError."""
        target = tmp_path / "IMG_7.jpg"
        target.write_bytes(b"plaintext")

        with patch(
            "capturevault.core.file_ops.secure_delete.os.fsync",
            side_effect=OSError(28, "No space left on device"),
        ):
            with pytest.raises(SecureDeleteError):
                secure_delete(target)

    def test_stat_failure_raises(self, tmp_path: Path) -> None:
        """A stat error before overwriting surfaces as SecureDeleteError."""
        target = tmp_path / "IMG_8.jpg"
        target.write_bytes(b"plaintext")

        with patch(
            "capturevault.core.file_ops.secure_delete.os.lstat",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with pytest.raises(SecureDeleteError, match="Permission denied"):
                secure_delete(target)

        assert target.read_bytes() == b"plaintext"

    def test_rejects_symlink(self, tmp_path: Path) -> None:
        """A symlink is refused and its target left intact."""
        target = tmp_path / "IMG_9.jpg"
        target.write_bytes(b"plaintext")
        link = tmp_path / "link.jpg"
        link.symlink_to(target)

        with pytest.raises(SecureDeleteError, match="Not a regular file"):
            secure_delete(link)

        assert target.read_bytes() == b"plaintext"
