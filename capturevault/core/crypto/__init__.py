"""
CaptureVault Cryptographic Core
===============================

Encryption capability used by the pipeline.

Architecture:
    1. EncryptionProvider: contract the pipeline depends on
    2. AesGcmEncryptionProvider: default AES-256-GCM container writer
    3. AesGcmCipher: authenticated encryption primitive

Key material is supplied by the host through a key loader; this package
never stores or derives keys.
"""

from capturevault.core.crypto.aes_gcm import AesGcmCipher
from capturevault.core.crypto.provider import AesGcmEncryptionProvider, EncryptionProvider

__all__ = [
    "AesGcmCipher",
    "AesGcmEncryptionProvider",
    "EncryptionProvider",
]
