"""
ChaCha20-Poly1305 sealing for files served by the gateway.

The key is derived from the caller's passphrase with PBKDF2-HMAC-SHA256.
Sealed layout: salt (16) + nonce (12) + ciphertext + tag (16).
The KDF and cipher are fixed; there is no per-file or per-request choice.
"""

from __future__ import annotations

import secrets
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32
KDF_ITERATIONS = 100_000

HEADER_SIZE = SALT_SIZE + NONCE_SIZE


class UnsealError(ValueError):
    """Raised when sealed data cannot be opened (bad passphrase, truncated or tampered)."""


def derive_key(passphrase: bytes, salt: bytes) -> bytes:
    """Derive a 256-bit key from a passphrase."""
    kdf = PBKDF2HMAC(
        algorithm=SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(passphrase)


def seal(plaintext: bytes, passphrase: bytes) -> bytes:
    """Encrypt plaintext under a passphrase. Fresh salt and nonce on every call."""
    salt = secrets.token_bytes(SALT_SIZE)
    nonce = secrets.token_bytes(NONCE_SIZE)
    cipher = ChaCha20Poly1305(derive_key(passphrase, salt))
    return salt + nonce + cipher.encrypt(nonce, plaintext, None)


def unseal(data: bytes, passphrase: bytes) -> bytes:
    """Decrypt salt + nonce + ciphertext + tag back to plaintext."""
    if len(data) < HEADER_SIZE + TAG_SIZE:
        raise UnsealError("Sealed data too short")
    salt = data[:SALT_SIZE]
    nonce = data[SALT_SIZE:HEADER_SIZE]
    cipher = ChaCha20Poly1305(derive_key(passphrase, salt))
    try:
        return cipher.decrypt(nonce, data[HEADER_SIZE:], None)
    except InvalidTag:
        raise UnsealError("Authentication failed: wrong passphrase or tampered data") from None


def seal_file(source: Path | str, destination: Path | str, passphrase: bytes) -> Path:
    """Seal a plaintext file into destination. Returns the destination path."""
    destination = Path(destination)
    destination.write_bytes(seal(Path(source).read_bytes(), passphrase))
    return destination


def unseal_file(path: Path | str, passphrase: bytes) -> bytes:
    """Read and decrypt a sealed file. OSError from reading propagates."""
    return unseal(Path(path).read_bytes(), passphrase)
