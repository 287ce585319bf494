"""
Shared fixtures for the gateway test suite.

Provides an allowed root with a sealed fixture, a sibling directory
outside the root, and an async client wrapping the app via ASGITransport.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from sealgate.config import GatewayConfig
from sealgate.gateway.app import create_app
from sealgate.gateway.invoker import DecryptionInvoker
from sealgate.vault.crypto import seal

PASSPHRASE = "correct-horse-battery-staple"
PLAINTEXT = b"quarterly numbers\x00\xff binary tail\n"
OTHER_PLAINTEXT = b"second document"


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Allowed root holding sealed files."""
    root = tmp_path / "root"
    (root / "reports").mkdir(parents=True)
    (root / "reports" / "q3.bin").write_bytes(seal(PLAINTEXT, PASSPHRASE.encode()))
    (root / "other.bin").write_bytes(seal(OTHER_PLAINTEXT, PASSPHRASE.encode()))
    return root.resolve()


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    """A sealed file that exists but lives outside the root."""
    secret = tmp_path / "outside" / "secret.bin"
    secret.parent.mkdir()
    secret.write_bytes(seal(b"outside the root", PASSPHRASE.encode()))
    return secret.resolve()


@pytest.fixture
def gateway_config(root: Path) -> GatewayConfig:
    return GatewayConfig(root=root, max_workers=2)


@pytest.fixture
def invoker(gateway_config: GatewayConfig):
    inv = DecryptionInvoker(gateway_config)
    yield inv
    inv.shutdown()


@pytest_asyncio.fixture
async def client(gateway_config: GatewayConfig, invoker: DecryptionInvoker):
    """Async HTTP client wrapping the gateway app via ASGITransport."""
    app = create_app(gateway_config, invoker=invoker)
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def passphrase() -> str:
    return PASSPHRASE


@pytest.fixture
def plaintext() -> bytes:
    return PLAINTEXT


@pytest.fixture
def other_plaintext() -> bytes:
    return OTHER_PLAINTEXT
