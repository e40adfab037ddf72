"""Utility helpers for the Bullet Relay service."""

from .hash import blake3_hexdigest, fingerprint

__all__ = ["blake3_hexdigest", "fingerprint"]
