"""
Centralized configuration for sealgate.

Everything is read from environment variables once at startup and frozen.
The resulting GatewayConfig is passed explicitly into the app factory.

Usage:
    from sealgate.config import get_config
    cfg = get_config()
    print(cfg.root)          # allowed root, defaults to the startup cwd
    print(cfg.socket_path)   # $LISTEN_ON
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

BACKENDS = ("inprocess", "openssl")

# `openssl enc -chacha20` has no authentication tag, so a wrong passphrase
# exits 0 with garbage output. That backend is refused unless this is set.
UNAUTHENTICATED_OPT_IN = "SEALGATE_ALLOW_UNAUTHENTICATED_OPENSSL"
_TRUTHY = ("1", "true", "yes", "on")


class ConfigError(ValueError):
    """Raised when the environment holds an unusable value."""


@dataclass(frozen=True)
class GatewayConfig:
    """Process-wide settings, fixed for the lifetime of the server."""

    socket_path: Path | None = None
    root: Path = field(default_factory=lambda: Path.cwd().resolve())

    # Admission control: max decryptions in flight (and worker threads)
    max_workers: int = 4
    decrypt_timeout: float | None = None

    # Decryption primitive, chosen once per process
    backend: str = "inprocess"
    openssl_binary: str = "openssl"

    log_level: str = "INFO"


# Singleton
_config: GatewayConfig | None = None


def get_config() -> GatewayConfig:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {value}")
    return value


def _optional_seconds(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _load_from_env(environ: Mapping[str, str] | None = None) -> GatewayConfig:
    """Load configuration from environment variables."""
    env = os.environ if environ is None else environ

    socket_raw = env.get("LISTEN_ON")
    socket_path = Path(socket_raw) if socket_raw else None

    root = Path(env.get("SEALGATE_ROOT") or Path.cwd()).resolve()
    if not root.is_dir():
        raise ConfigError(f"SEALGATE_ROOT is not a directory: {root}")

    backend = env.get("SEALGATE_BACKEND", "inprocess").strip().lower()
    if backend not in BACKENDS:
        raise ConfigError(
            f"SEALGATE_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}"
        )
    if backend == "openssl" and env.get(UNAUTHENTICATED_OPT_IN, "").strip().lower() not in _TRUTHY:
        raise ConfigError(
            "SEALGATE_BACKEND=openssl cannot reject a wrong passphrase "
            f"(no authentication tag); set {UNAUTHENTICATED_OPT_IN}=1 to use it anyway"
        )

    log_level = env.get("SEALGATE_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"SEALGATE_LOG_LEVEL is not a logging level: {log_level!r}")

    return GatewayConfig(
        socket_path=socket_path,
        root=root,
        max_workers=_positive_int(env, "SEALGATE_MAX_WORKERS", 4),
        decrypt_timeout=_optional_seconds(env, "SEALGATE_DECRYPT_TIMEOUT"),
        backend=backend,
        openssl_binary=env.get("SEALGATE_OPENSSL", "openssl"),
        log_level=log_level,
    )


def require_socket_path(config: GatewayConfig) -> Path:
    """Return the listen socket path, or raise if it is missing or unusable."""
    if config.socket_path is None:
        raise ConfigError("Missing socket path to listen on (`LISTEN_ON` env var)")
    parent = config.socket_path.parent
    if not parent.is_dir():
        raise ConfigError(f"Invalid socket path: directory {parent} does not exist")
    if config.socket_path.exists() and not config.socket_path.is_socket():
        raise ConfigError(f"Invalid socket path: {config.socket_path} exists and is not a socket")
    return config.socket_path
