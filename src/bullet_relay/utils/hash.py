# src/bullet_relay/utils/hash.py
"""Hashing helpers built on BLAKE3."""

from __future__ import annotations

from blake3 import blake3

FINGERPRINT_HEX_CHARS = 12


def blake3_hexdigest(data: bytes) -> str:
    """Return the hexadecimal digest of the supplied data."""
    return blake3(data).hexdigest()


def fingerprint(value: str, length: int = FINGERPRINT_HEX_CHARS) -> str:
    """Return a short, non-reversible tag for log lines and map keys.

    Session identifiers are bearer capabilities and caller addresses are
    personal data, so neither is written to logs or held as a raw key.
    """
    return blake3_hexdigest(value.encode("utf-8"))[:length]
