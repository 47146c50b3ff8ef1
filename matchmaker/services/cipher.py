"""Symmetric codec for message text and photo blobs (AES-256-CBC, PKCS7)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

logger = logging.getLogger(__name__)

KEY_LEN = 32
IV_LEN = 16
BLOCK_BITS = 128


class DecryptionError(Exception):
    """Raised when a sealed binary payload cannot be opened."""


@dataclass(frozen=True)
class DecryptedText:
    """Outcome of a text decryption.

    ``fallback`` is True when the input was not a valid token and ``value`` is
    the input returned unchanged.
    """

    value: Optional[str]
    fallback: bool = False


def derive_key(secret: str, salt: str) -> bytes:
    if not secret:
        raise ValueError("Encryption secret required")
    kdf = Scrypt(salt=salt.encode("utf-8"), length=KEY_LEN, n=2**14, r=8, p=1)
    return kdf.derive(secret.encode("utf-8"))


class ContentCipher:
    """
    Encrypts message content and photo bytes with a fresh IV per payload.

    Text tokens are serialised as ``ivHex:cipherHex``. Binary payloads are the
    16-byte IV followed by the ciphertext. There is no MAC: tampering is only
    detected when it breaks the padding.
    """

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_LEN:
            raise ValueError("AES-256-CBC requires 32-byte key")
        self._key = key

    @classmethod
    def from_secret(cls, secret: str, salt: str) -> "ContentCipher":
        return cls(derive_key(secret, salt))

    # Text -------------------------------------------------------------------
    def encrypt_text(self, plaintext: Optional[str]) -> Optional[str]:
        if not plaintext:
            return plaintext
        iv = os.urandom(IV_LEN)
        ct = self._encrypt(iv, plaintext.encode("utf-8"))
        return f"{iv.hex()}:{ct.hex()}"

    def decrypt_text_result(self, token: Optional[str]) -> DecryptedText:
        if not token:
            return DecryptedText(token)
        parts = token.split(":")
        if len(parts) != 2:
            return DecryptedText(token, fallback=True)
        try:
            iv = bytes.fromhex(parts[0])
            ct = bytes.fromhex(parts[1])
            if len(iv) != IV_LEN:
                return DecryptedText(token, fallback=True)
            return DecryptedText(self._decrypt(iv, ct).decode("utf-8"))
        except ValueError:
            # Covers bad hex, bad padding, wrong block length and undecodable bytes.
            logger.debug("Returning undecryptable text token unchanged")
            return DecryptedText(token, fallback=True)

    def decrypt_text(self, token: Optional[str]) -> Optional[str]:
        return self.decrypt_text_result(token).value

    # Binary -----------------------------------------------------------------
    def encrypt_bytes(self, data: bytes) -> bytes:
        iv = os.urandom(IV_LEN)
        return iv + self._encrypt(iv, data)

    def decrypt_bytes(self, sealed: bytes) -> bytes:
        if len(sealed) < IV_LEN + BLOCK_BITS // 8:
            raise DecryptionError("Sealed payload too short")
        try:
            return self._decrypt(sealed[:IV_LEN], sealed[IV_LEN:])
        except ValueError as exc:
            raise DecryptionError(f"Failed to decrypt payload: {exc}") from exc

    # Primitives -------------------------------------------------------------
    def _encrypt(self, iv: bytes, data: bytes) -> bytes:
        padder = padding.PKCS7(BLOCK_BITS).padder()
        padded = padder.update(data) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    def _decrypt(self, iv: bytes, ct: bytes) -> bytes:
        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ct) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
