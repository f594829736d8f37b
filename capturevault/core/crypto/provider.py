"""
Encryption Providers
====================

The pipeline treats encryption as an opaque capability: an
EncryptionProvider turns a readable plaintext file into a self-contained
ciphertext container at a destination path.

Contract:
    - The destination is a freshly created, empty file
    - On error the provider raises CryptoFailure or IoFailure and either
      leaves the destination untouched or leaves output the pipeline
      will secure-delete

Container Format (AesGcmEncryptionProvider):
    MAGIC (4) | VERSION (1) | NONCE (12) | CIPHERTEXT + TAG

The AAD binds the magic, the version and the destination file name, so a
container renamed inside the store fails authentication.
"""

from __future__ import annotations

import os
import struct
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Final, Optional

from cryptography.exceptions import InvalidTag

from capturevault.core.crypto.aes_gcm import AES_NONCE_SIZE, AesGcmCipher
from capturevault.core.errors import CryptoFailure, IoFailure
from capturevault.core.logging import get_secure_logger

logger = get_secure_logger(__name__)

MAGIC_BYTES: Final[bytes] = b"CVEF"  # CaptureVault Encrypted File
FORMAT_VERSION: Final[int] = 1
HEADER_SIZE: Final[int] = len(MAGIC_BYTES) + 1 + AES_NONCE_SIZE

KeyLoader = Callable[[], Optional[bytes]]


class EncryptionProvider(ABC):
    """Turns a plaintext file into ciphertext at a destination path."""

    @abstractmethod
    def encrypt(self, source_path: Path, destination_path: Path) -> None:
        """
        Encrypt source_path into destination_path.

        Raises:
            CryptoFailure: Key unavailable or cipher rejection
            IoFailure: Source unreadable or destination unwritable
        """


class AesGcmEncryptionProvider(EncryptionProvider):
    """
    AES-256-GCM provider with key material from an injected loader.

    The loader is called once per operation; it may return None or raise
    when the key is unavailable (for example, a locked keystore), which
    surfaces as CryptoFailure.

    Usage:
        provider = AesGcmEncryptionProvider(lambda: keystore.current_key())
        provider.encrypt(Path("/sdcard/IMG_1.jpg"), Path("/data/enc/IMG_1.jpg"))
    """

    __slots__ = ("_key_loader",)

    def __init__(self, key_loader: KeyLoader) -> None:
        self._key_loader = key_loader

    def encrypt(self, source_path: Path, destination_path: Path) -> None:
        source_path = Path(source_path)
        destination_path = Path(destination_path)

        cipher = self._cipher()

        try:
            plaintext = source_path.read_bytes()
        except OSError as e:
            raise IoFailure(f"Cannot read plaintext file {source_path.name}: {e.strerror}") from e

        try:
            result = cipher.encrypt(plaintext, aad=self._aad(destination_path.name))
        except (ValueError, OverflowError) as e:
            raise CryptoFailure("Cipher rejected the plaintext") from e

        container = MAGIC_BYTES + struct.pack("<B", FORMAT_VERSION) + result.nonce + result.ciphertext

        # Nothing is written until the whole container exists in memory
        try:
            with open(destination_path, "wb") as f:
                f.write(container)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise IoFailure(f"Cannot write ciphertext to {destination_path.name}: {e.strerror}") from e

        logger.debug("Wrote %d byte container for %s", len(container), destination_path.name)

    def decrypt_file(self, encrypted_path: Path) -> bytes:
        """
        Decrypt a container from the store.

        Raises:
            CryptoFailure: Malformed container, wrong key or tampered data
            IoFailure: Container unreadable
        """
        encrypted_path = Path(encrypted_path)

        try:
            data = encrypted_path.read_bytes()
        except OSError as e:
            raise IoFailure(f"Cannot read container {encrypted_path.name}: {e.strerror}") from e

        if len(data) < HEADER_SIZE or data[:len(MAGIC_BYTES)] != MAGIC_BYTES:
            raise CryptoFailure("Invalid container (bad magic bytes)")

        (version,) = struct.unpack_from("<B", data, len(MAGIC_BYTES))
        if version != FORMAT_VERSION:
            raise CryptoFailure(f"Unsupported container version: {version}")

        nonce = data[len(MAGIC_BYTES) + 1:HEADER_SIZE]
        ciphertext = data[HEADER_SIZE:]

        try:
            return self._cipher().decrypt(ciphertext, nonce, aad=self._aad(encrypted_path.name))
        except (InvalidTag, ValueError) as e:
            raise CryptoFailure("Container failed authentication") from e

    def _cipher(self) -> AesGcmCipher:
        try:
            key = self._key_loader()
        except CryptoFailure:
            raise
        except Exception as e:
            raise CryptoFailure("Encryption key unavailable") from e

        if not key:
            raise CryptoFailure("Encryption key unavailable")

        try:
            return AesGcmCipher(key)
        except ValueError as e:
            raise CryptoFailure("Invalid key material") from e

    @staticmethod
    def _aad(file_name: str) -> bytes:
        return MAGIC_BYTES + struct.pack("<B", FORMAT_VERSION) + file_name.encode("utf-8")
