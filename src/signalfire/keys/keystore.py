"""
Encrypted private key storage.

The key file holds a single hex string:

    salt (16 bytes) | iv (16 bytes) | GCM tag (16 bytes) | ciphertext

The plaintext is the operator's hex private key. The AES-256-GCM key is
derived from ``ENCRYPTION_KEY`` with scrypt (N=16384, r=8, p=1).
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Protocol

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..errors import DecryptionFailedError, KeyNotFoundError

SALT_LENGTH = 16
IV_LENGTH = 16
TAG_LENGTH = 16
KEY_LENGTH = 32
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1

_PRIVATE_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


class KeyStore(Protocol):
    def key_exists(self) -> bool:
        ...

    def decrypt_key(self) -> str:
        ...


def is_valid_private_key(value: str) -> bool:
    """64 hex characters, optionally 0x-prefixed."""
    return bool(_PRIVATE_KEY_RE.match(value.removeprefix("0x")))


def derive_file_key(passphrase: str, salt: bytes) -> bytes:
    if not passphrase:
        raise ValueError("Encryption passphrase cannot be empty.")
    kdf = Scrypt(salt=salt, length=KEY_LENGTH, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
    return kdf.derive(passphrase.encode("utf-8"))


class EncryptedKeyFile:
    """
    Key store backed by one AES-256-GCM encrypted file.

    Args:
        path: Location of the key file
        passphrase: Secret the file key is derived from (``ENCRYPTION_KEY``)
    """

    def __init__(self, path: Path, passphrase: str) -> None:
        self.path = path
        self._passphrase = passphrase

    def key_exists(self) -> bool:
        return self.path.is_file()

    def save(self, private_key: str) -> Path:
        """
        Encrypt and write a private key.

        Raises:
            ValueError: If the key is not 64 hex characters
        """
        private_key = private_key.strip()
        if not is_valid_private_key(private_key):
            raise ValueError("Invalid private key format. Must be a 64-character hex string.")

        salt = os.urandom(SALT_LENGTH)
        iv = os.urandom(IV_LENGTH)
        sealed = AESGCM(derive_file_key(self._passphrase, salt)).encrypt(
            iv, private_key.encode("utf-8"), None
        )
        # cryptography appends the tag; the file format stores it first
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text((salt + iv + tag + ciphertext).hex(), encoding="utf-8")
            if os.name != "nt":
                tmp.chmod(0o600)
            tmp.replace(self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

        return self.path

    def decrypt_key(self) -> str:
        """
        Decrypt and return the stored private key.

        Raises:
            KeyNotFoundError: If the key file does not exist
            DecryptionFailedError: If the file is corrupt or the passphrase is wrong
        """
        if not self.path.is_file():
            raise KeyNotFoundError(f"Key file not found at {self.path}")

        try:
            blob = bytes.fromhex(self.path.read_text(encoding="utf-8").strip())
        except ValueError as exc:
            raise DecryptionFailedError(f"Key file {self.path} is not valid hex") from exc

        header = SALT_LENGTH + IV_LENGTH + TAG_LENGTH
        if len(blob) <= header:
            raise DecryptionFailedError(f"Key file {self.path} is truncated")

        salt = blob[:SALT_LENGTH]
        iv = blob[SALT_LENGTH:SALT_LENGTH + IV_LENGTH]
        tag = blob[SALT_LENGTH + IV_LENGTH:header]
        ciphertext = blob[header:]

        try:
            plaintext = AESGCM(derive_file_key(self._passphrase, salt)).decrypt(
                iv, ciphertext + tag, None
            )
        except (InvalidTag, ValueError) as exc:
            raise DecryptionFailedError(
                "Decryption failed: wrong ENCRYPTION_KEY or corrupted key file"
            ) from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionFailedError("Decrypted key is not valid text") from exc
