"""
Root-level shared test fixtures.

Inherited by the gateway and vault suites and by tests/.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove sealgate env vars that leak between tests."""
    for key in [
        "LISTEN_ON",
        "SEALGATE_ROOT",
        "SEALGATE_MAX_WORKERS",
        "SEALGATE_DECRYPT_TIMEOUT",
        "SEALGATE_BACKEND",
        "SEALGATE_OPENSSL",
        "SEALGATE_ALLOW_UNAUTHENTICATED_OPENSSL",
        "SEALGATE_LOG_LEVEL",
        "SEALGATE_PASSPHRASE",
    ]:
        monkeypatch.delenv(key, raising=False)
