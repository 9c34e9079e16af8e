# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Encoding - Protect/unprotect primitive for encrypted state.

The state engines treat encoding as an opaque byte transform:

    protect(bytes) -> str       (text safe to embed in JSON)
    unprotect(str) -> bytes     (unprotect(protect(b)) == b)

FernetEncoder implements it with Fernet (AES-128-CBC + HMAC-SHA256).
Tokens are URL-safe Base64 text.
"""

import base64
import os
from abc import ABC, abstractmethod
from pathlib import Path

import structlog
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from wmr.errors import explain_bad_token
from wmr.exceptions import EncodingError

logger = structlog.get_logger()

# Key derivation settings for passphrase-based keys
DEFAULT_SALT = b"wmr_state_salt_v1"
DEFAULT_KDF_ITERATIONS = 480_000


class Encoder(ABC):
    """Abstract protect/unprotect primitive."""

    @abstractmethod
    def protect(self, data: bytes) -> str:
        """Encode bytes into text."""
        ...

    @abstractmethod
    def unprotect(self, encoded: str) -> bytes:
        """
        Decode text produced by protect().

        Raises:
            EncodingError: If the text is not a valid encoding for this key
        """
        ...


class FernetEncoder(Encoder):
    """
    Fernet-backed encoder.

    Example:
        encoder = FernetEncoder.load_or_create(Path("~/.wmr/state.key").expanduser())
        token = encoder.protect(b"secret")
        encoder.unprotect(token)  # b"secret"
    """

    def __init__(self, key: bytes) -> None:
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise EncodingError(
                f"Invalid Fernet key: {e}",
                details={"key_length": len(key) if key else 0},
            )

    @classmethod
    def from_passphrase(
        cls,
        passphrase: str,
        salt: bytes = DEFAULT_SALT,
        iterations: int = DEFAULT_KDF_ITERATIONS,
    ) -> "FernetEncoder":
        """
        Derive a Fernet key from a passphrase with PBKDF2-HMAC-SHA256.

        The same passphrase, salt and iteration count always yield the
        same key, so state protected on one machine decodes on another.

        Args:
            passphrase: Secret passphrase
            salt: KDF salt
            iterations: PBKDF2 iteration count

        Returns:
            FernetEncoder using the derived key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        key = base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))
        return cls(key)

    @classmethod
    def load_or_create(cls, key_path: Path) -> "FernetEncoder":
        """
        Load a Fernet key from key_path, generating and saving one if absent.

        A new key file is written with owner-only permissions.

        Args:
            key_path: Path to the key file

        Returns:
            FernetEncoder using the stored key
        """
        if key_path.exists():
            key = key_path.read_bytes().strip()
            return cls(key)

        key_path.parent.mkdir(parents=True, exist_ok=True)
        key = Fernet.generate_key()
        key_path.write_bytes(key)
        try:
            os.chmod(key_path, 0o600)
        except OSError as e:
            # Not all filesystems support POSIX modes
            logger.debug("key_file_chmod_failed", key_path=str(key_path), error=str(e))

        logger.info("encryption_key_created", key_path=str(key_path))
        return cls(key)

    def protect(self, data: bytes) -> str:
        return self._fernet.encrypt(data).decode("ascii")

    def unprotect(self, encoded: str) -> bytes:
        try:
            return self._fernet.decrypt(encoded.encode("ascii"))
        except (InvalidToken, UnicodeEncodeError, AttributeError) as e:
            raise EncodingError(
                explain_bad_token(),
                details={"error": type(e).__name__},
            )
