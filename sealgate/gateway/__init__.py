"""Sealgate gateway: credential extraction, path containment, decryption, responses."""

from sealgate.gateway.app import create_app

__all__ = ["create_app"]
