"""
AES-256-GCM Authenticated Encryption
====================================

Thin wrapper over the `cryptography` AESGCM primitive used by the
default encryption provider.

Properties:
    - 256-bit key supplied by the caller
    - 96-bit random nonce per encryption (NIST SP 800-38D)
    - 128-bit authentication tag appended to the ciphertext
    - Additional Authenticated Data (AAD) support

WARNING:
    - Never reuse (key, nonce) pairs
    - Always verify the tag before using plaintext
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Final, Optional

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

AES_KEY_SIZE: Final[int] = 32  # 256 bits
AES_NONCE_SIZE: Final[int] = 12  # 96 bits
AES_TAG_SIZE: Final[int] = 16  # 128 bits


@dataclass(frozen=True, slots=True)
class AesGcmResult:
    """
    Result of one AES-GCM encryption.

    Attributes:
        ciphertext: Encrypted data with appended authentication tag
        nonce: Nonce used for this encryption (stored with the ciphertext)
    """

    ciphertext: bytes
    nonce: bytes

    def __repr__(self) -> str:
        return f"AesGcmResult(ciphertext_len={len(self.ciphertext)}, nonce_len={len(self.nonce)})"


class AesGcmCipher:
    """
    AES-256-GCM bound to one key.

    Usage:
        cipher = AesGcmCipher(key)
        result = cipher.encrypt(plaintext, aad=b"context")
        plaintext = cipher.decrypt(result.ciphertext, result.nonce, aad=b"context")

    Raises ValueError on a key of the wrong size and
    cryptography.exceptions.InvalidTag when authentication fails.
    """

    __slots__ = ("_aesgcm",)

    def __init__(self, key: bytes) -> None:
        if len(key) != AES_KEY_SIZE:
            raise ValueError(f"Key must be exactly {AES_KEY_SIZE} bytes")
        self._aesgcm = AESGCM(key)

    def __repr__(self) -> str:
        return "AesGcmCipher(key=<hidden>)"

    @staticmethod
    def generate_key() -> bytes:
        """Generate a random AES-256 key from the OS CSPRNG."""
        return secrets.token_bytes(AES_KEY_SIZE)

    @staticmethod
    def generate_nonce() -> bytes:
        return secrets.token_bytes(AES_NONCE_SIZE)

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> AesGcmResult:
        """
        Encrypt plaintext under a fresh random nonce.

        Args:
            plaintext: Data to encrypt (can be empty)
            aad: Additional Authenticated Data (authenticated, not encrypted)

        Returns:
            AesGcmResult with ciphertext and nonce
        """
        nonce = self.generate_nonce()
        ciphertext = self._aesgcm.encrypt(nonce, plaintext, aad)
        return AesGcmResult(ciphertext=ciphertext, nonce=nonce)

    def decrypt(self, ciphertext: bytes, nonce: bytes, aad: Optional[bytes] = None) -> bytes:
        """
        Decrypt and authenticate ciphertext.

        Integrity is verified before any plaintext is returned.
        """
        if len(nonce) != AES_NONCE_SIZE:
            raise ValueError(f"Nonce must be exactly {AES_NONCE_SIZE} bytes")
        if len(ciphertext) < AES_TAG_SIZE:
            raise ValueError("Ciphertext too short (missing authentication tag)")

        return self._aesgcm.decrypt(nonce, ciphertext, aad)
