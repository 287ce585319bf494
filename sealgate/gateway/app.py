"""
Sealgate HTTP app — GET /{path} returns the decrypted contents of a sealed file.

Per request: credential extraction -> path containment -> decryption ->
response. Both checks pass before any decryption starts. Every failure
is resolved to a response here; nothing propagates to the server.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.responses import Response

from sealgate import __version__
from sealgate.audit.logger import log_event
from sealgate.config import GatewayConfig
from sealgate.gateway.auth import Credential, extract
from sealgate.gateway.errors import (
    DecryptionFailed,
    GatewayError,
    InternalUnexpected,
    ResourceUnavailable,
)
from sealgate.gateway.invoker import DecryptionInvoker, DecryptionOutcome
from sealgate.gateway.middleware import NormalizePathMiddleware
from sealgate.gateway.paths import resolve
from sealgate.gateway.responses import compose_error, compose_success

logger = logging.getLogger(__name__)

DISCONNECT_POLL_INTERVAL = 0.1


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def invoke_until_disconnect(
    request: Request, invoker: DecryptionInvoker, path, credential: Credential
) -> DecryptionOutcome:
    """Run the decryption, cancelling it if the client goes away first."""
    work = asyncio.ensure_future(invoker.invoke(path, credential))
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        if not work.done() and watcher.exception() is not None:
            # Disconnects can no longer be seen; let the decryption finish
            logger.warning("Disconnect watcher failed: %r", watcher.exception())
            await asyncio.wait({work})
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await watcher
        if not work.done():
            work.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await work

    if work.cancelled():
        raise InternalUnexpected("client disconnected before decryption completed")
    return work.result()


def create_app(config: GatewayConfig, invoker: DecryptionInvoker | None = None) -> FastAPI:
    """Build the gateway app around an immutable config."""
    invoker = invoker or DecryptionInvoker(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_event(
            "system.boot",
            f"sealgate {__version__} serving {config.root}",
            details={
                "backend": config.backend,
                "max_workers": config.max_workers,
                "socket": str(config.socket_path) if config.socket_path else None,
            },
        )
        if config.backend == "openssl":
            logger.warning(
                "openssl backend has no authentication tag; "
                "a wrong passphrase returns garbage instead of failing"
            )
        yield
        invoker.shutdown()

    app = FastAPI(
        title="Sealgate",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.invoker = invoker
    app.add_middleware(NormalizePathMiddleware)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> Response:
        return compose_error(request, exc)

    @app.get("/{path:path}")
    async def fetch(path: str, request: Request) -> Response:
        """Decrypt and return the sealed file at path."""
        request.state.started_at = time.monotonic()
        try:
            credential = extract(request.headers)
            resource = resolve(path, config.root)
            if not resource.available:
                raise ResourceUnavailable("resource is missing or outside the root")

            outcome = await invoke_until_disconnect(
                request, invoker, resource.path, credential
            )
        except GatewayError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure handling %s", request.url.path)
            raise InternalUnexpected(f"{type(e).__name__}: {e}") from e

        if not outcome.ok:
            raise DecryptionFailed(
                f"exit {outcome.returncode}: {outcome.diagnostic or '(no diagnostic)'}"
            )
        return compose_success(request, outcome.payload)

    return app
