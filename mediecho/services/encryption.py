"""
Summary Encryption Service

Encrypts weekly brief summaries at rest with AES-256-CBC.

ARCHITECTURE:
- Uses cryptography library (AES-CBC + PKCS7, scrypt KDF)
- One key per server secret, derived with a fixed salt: any holder of the
  secret can decrypt every user's summaries
- Fresh random IV per call; IV and ciphertext stored as hex
"""

import json
import logging
import os
from datetime import date, datetime
from typing import Any, Dict

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from mediecho.errors import DecryptionError

logger = logging.getLogger(__name__)

KDF_SALT = b"salt"
KDF_N = 2 ** 14
KDF_R = 8
KDF_P = 1
KEY_LENGTH = 32
IV_LENGTH = 16


def _json_default(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_summary(summary: Dict[str, Any]) -> str:
    """Canonical text form of a summary: compact JSON, key order preserved."""
    return json.dumps(summary, separators=(",", ":"), default=_json_default)


def derive_key(secret: str) -> bytes:
    kdf = Scrypt(salt=KDF_SALT, length=KEY_LENGTH, n=KDF_N, r=KDF_R, p=KDF_P)
    return kdf.derive(secret.encode("utf-8"))


class SummaryCipher:
    """Handles encryption/decryption of serialized summaries."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("An encryption secret is required")
        # scrypt is deliberately slow; derive once per instance
        self._key = derive_key(secret)

    def encrypt_text(self, plaintext: str) -> Dict[str, str]:
        """
        Encrypt text.

        Returns:
            {"iv": <hex>, "content": <hex>}
        """
        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        content = encryptor.update(padded) + encryptor.finalize()
        return {"iv": iv.hex(), "content": content.hex()}

    def decrypt_text(self, payload: Dict[str, str]) -> str:
        """
        Decrypt a payload produced by encrypt_text.

        Raises:
            DecryptionError: wrong secret, tampered or malformed payload
        """
        try:
            iv = bytes.fromhex(payload["iv"])
            content = bytes.fromhex(payload["content"])
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(content) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Summary decryption failed: {e}")
            raise DecryptionError("Unable to decrypt summary") from e

    def encrypt_summary(self, summary: Dict[str, Any]) -> Dict[str, str]:
        return self.encrypt_text(serialize_summary(summary))

    def decrypt_summary(self, payload: Dict[str, str]) -> Dict[str, Any]:
        return json.loads(self.decrypt_text(payload))
