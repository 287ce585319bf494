"""
External `openssl enc` primitive.

Runs ``openssl enc -d -pbkdf2 -chacha20`` against a file. The passphrase
is handed to the child through its own environment only, never argv, so
it does not show up in process listings.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

PASSPHRASE_ENV = "SEALGATE_PASSPHRASE"


def build_command(path: Path | str, binary: str = "openssl") -> list[str]:
    """Argument vector for decrypting path. Contains no secret material."""
    return [
        binary,
        "enc",
        "-d",
        "-pbkdf2",
        "-chacha20",
        f"-pass=env:{PASSPHRASE_ENV}",
        "-in",
        str(path),
    ]


def build_env(passphrase: bytes) -> dict[bytes, bytes]:
    """Child environment: the parent's plus the passphrase variable."""
    env = dict(os.environb)
    env[PASSPHRASE_ENV.encode()] = passphrase
    return env


async def run_openssl(
    path: Path | str, passphrase: bytes, *, binary: str = "openssl"
) -> tuple[int, bytes, bytes]:
    """Run the decryption and return (returncode, stdout, stderr).

    Spawn failures (missing binary, permissions) raise OSError. If the
    awaiting task is cancelled the child is killed and reaped before the
    cancellation propagates.
    """
    proc = await asyncio.create_subprocess_exec(
        *build_command(path, binary),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=build_env(passphrase),
    )
    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        logger.info("Killing openssl (pid %s) after cancellation", proc.pid)
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        raise
    return proc.returncode, stdout, stderr
