"""
Sealgate Audit Log — structured audit lines for every gateway request.

Event types:
  - gateway.request — one per completed request (method, path, outcome, status)
  - gateway.error — server-side diagnostic detail for any failed request
  - system.boot — server startup

Usage:
    from sealgate.audit.logger import log_event
    log_event("gateway.request", "GET /reports/q3.bin",
              target="/reports/q3.bin", details={"outcome": "ok"})

Entries are emitted on the ``sealgate.audit.logger`` logger as one JSON
object per line. Credentials must never be passed in here.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


def log_event(
    event_type: str,
    action: str,
    *,
    category: str | None = None,
    actor: str = "sealgate",
    details: dict | None = None,
    target: str | None = None,
    status: str = "ok",
) -> dict | None:
    """Log a structured audit event.

    Returns the emitted record on success, None on failure.
    Failures are logged and swallowed so auditing cannot break a request.
    """
    try:
        record = {
            "timestamp": datetime.now(UTC).isoformat(),
            "event_type": event_type,
            "category": category,
            "actor": actor,
            "action": action,
            "target": target,
            "status": status,
            "details": details or {},
        }
        level = logging.INFO if status == "ok" else logging.WARNING
        logger.log(level, "%s", json.dumps(record, default=str, sort_keys=True))
        return record
    except Exception as e:
        logger.warning("Audit log_event failed: %s", e)
        return None


def log_request(
    method: str,
    path: str,
    outcome: str,
    status_code: int,
    *,
    duration_ms: int | None = None,
) -> dict | None:
    """Convenience wrapper for the per-request audit line."""
    details: dict = {"method": method, "outcome": outcome, "status_code": status_code}
    if duration_ms is not None:
        details["duration_ms"] = duration_ms
    return log_event(
        "gateway.request",
        f"{method} {path}",
        category="gateway",
        target=path,
        details=details,
        status="ok" if outcome == "ok" else "denied" if status_code < 500 else "error",
    )


def log_diagnostic(method: str, path: str, outcome: str, detail: str) -> dict | None:
    """Record the full server-side detail of a failed request."""
    return log_event(
        "gateway.error",
        f"{method} {path} failed: {outcome}",
        category="gateway",
        target=path,
        details={"outcome": outcome, "detail": detail},
        status="error",
    )
