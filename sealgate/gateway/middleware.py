"""Path normalization applied before routing."""

from __future__ import annotations

import re

from starlette.types import ASGIApp, Receive, Scope, Send

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """Merge repeated slashes and trim the trailing one ("/a//b/" -> "/a/b")."""
    path = _REPEATED_SLASHES.sub("/", path)
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


class NormalizePathMiddleware:
    """Rewrite the request path in scope so routing sees the normalized form.

    Plain ASGI rather than BaseHTTPMiddleware so the downstream receive
    channel (used for disconnect detection) is passed through untouched.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            normalized = normalize_path(scope["path"])
            if normalized != scope["path"]:
                scope = dict(scope)
                scope["path"] = normalized
        await self.app(scope, receive, send)
