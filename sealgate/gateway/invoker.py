"""
Decryption invoker — runs the configured primitive under admission control.

At most ``max_workers`` decryptions are in flight; further requests wait
on a semaphore on the event loop. In-process decryption runs on a
dedicated thread pool of the same size. The openssl backend runs as an
asyncio subprocess that is killed if the request is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from sealgate.config import GatewayConfig
from sealgate.gateway.auth import Credential
from sealgate.gateway.errors import InternalUnexpected
from sealgate.vault.crypto import UnsealError, unseal_file
from sealgate.vault.openssl import run_openssl

logger = logging.getLogger(__name__)

TIMEOUT_RETURNCODE = -1


@dataclass(frozen=True)
class DecryptionOutcome:
    """Success carries the payload; failure carries an exit code and diagnostic."""

    payload: bytes | None = None
    returncode: int = 0
    diagnostic: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and self.payload is not None

    @classmethod
    def success(cls, payload: bytes) -> DecryptionOutcome:
        return cls(payload=payload)

    @classmethod
    def failure(cls, returncode: int, diagnostic: str) -> DecryptionOutcome:
        return cls(returncode=returncode or 1, diagnostic=diagnostic)


def _unseal_in_thread(path: Path, passphrase: bytes) -> DecryptionOutcome:
    try:
        return DecryptionOutcome.success(unseal_file(path, passphrase))
    except UnsealError as e:
        return DecryptionOutcome.failure(1, str(e))


class DecryptionInvoker:
    """Drives one decryption per call. No retries: failure is final."""

    def __init__(self, config: GatewayConfig):
        self.backend = config.backend
        self.timeout = config.decrypt_timeout
        self.max_workers = config.max_workers
        self._openssl = config.openssl_binary
        self._slots = asyncio.Semaphore(config.max_workers)
        self._pool = ThreadPoolExecutor(
            max_workers=config.max_workers, thread_name_prefix="sealgate-decrypt"
        )

    async def invoke(self, path: Path, credential: Credential) -> DecryptionOutcome:
        """Decrypt path with credential.

        Raises InternalUnexpected when the primitive cannot be started or
        the file cannot be read; every other failure is an outcome.
        """
        async with self._slots:
            try:
                return await asyncio.wait_for(self._run(path, credential), self.timeout)
            except asyncio.TimeoutError:
                logger.warning("Decryption of %s timed out after %ss", path, self.timeout)
                return DecryptionOutcome.failure(
                    TIMEOUT_RETURNCODE, f"decryption timed out after {self.timeout}s"
                )
            except OSError as e:
                raise InternalUnexpected(f"{self.backend} decryption could not run: {e}") from e

    async def _run(self, path: Path, credential: Credential) -> DecryptionOutcome:
        if self.backend == "openssl":
            returncode, stdout, stderr = await run_openssl(
                path, credential.reveal(), binary=self._openssl
            )
            if returncode != 0:
                diagnostic = stderr.decode("utf-8", errors="replace").strip()
                return DecryptionOutcome.failure(
                    returncode, f"OpenSSL command failed: {diagnostic}"
                )
            return DecryptionOutcome.success(stdout)

        # A queued job is dropped if the awaiting request is cancelled first
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._pool, _unseal_in_thread, path, credential.reveal()
        )

    def shutdown(self) -> None:
        """Stop the worker pool, discarding queued jobs."""
        self._pool.shutdown(wait=False, cancel_futures=True)
