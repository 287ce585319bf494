"""
Sealgate Vault — the decryption primitives behind the gateway.

Public API:
    vault.seal(plaintext, passphrase)      → sealed bytes
    vault.unseal(data, passphrase)         → plaintext or UnsealError
    vault.unseal_file(path, passphrase)    → plaintext of a sealed file
    vault.run_openssl(path, passphrase)    → (returncode, stdout, stderr) from `openssl enc`
"""

from __future__ import annotations

from sealgate.vault.crypto import UnsealError, seal, seal_file, unseal, unseal_file
from sealgate.vault.openssl import run_openssl

__all__ = ["UnsealError", "seal", "seal_file", "unseal", "unseal_file", "run_openssl"]
