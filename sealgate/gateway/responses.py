"""Response composer: maps outcomes to HTTP responses and writes the audit lines."""

from __future__ import annotations

import time

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.responses import Response

from sealgate.audit.logger import log_diagnostic, log_request
from sealgate.gateway.errors import GatewayError, MissingCredential, ResourceUnavailable

CHALLENGE = 'Basic charset="UTF-8"'


def error_response(error: GatewayError) -> Response:
    """Build the client-facing response for an error. Never includes ``detail``."""
    if isinstance(error, ResourceUnavailable):
        return Response(status_code=error.status_code)

    response = PlainTextResponse(error.public_message, status_code=error.status_code)
    if isinstance(error, MissingCredential):
        response.headers["WWW-Authenticate"] = CHALLENGE
    return response


def success_response(payload: bytes) -> Response:
    """Raw decrypted bytes, no content type and no caching headers."""
    return Response(content=payload, status_code=200)


def _elapsed_ms(request: Request) -> int | None:
    started = getattr(request.state, "started_at", None)
    if started is None:
        return None
    return int((time.monotonic() - started) * 1000)


def compose_error(request: Request, error: GatewayError) -> Response:
    """Resolve an error at the request boundary and record it."""
    response = error_response(error)
    path = request.url.path
    log_diagnostic(request.method, path, error.outcome, error.detail)
    log_request(
        request.method,
        path,
        error.outcome,
        response.status_code,
        duration_ms=_elapsed_ms(request),
    )
    return response


def compose_success(request: Request, payload: bytes) -> Response:
    response = success_response(payload)
    log_request(
        request.method,
        request.url.path,
        "ok",
        response.status_code,
        duration_ms=_elapsed_ms(request),
    )
    return response
