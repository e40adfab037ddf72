# src/bullet_relay/services/__init__.py
"""Business logic services for the Bullet Relay application."""

from .credential import EphemeralCredential
from .crypto import CredentialCipher, DecryptError
from .generation import OpenAIChatGenerator, TextGenerator
from .orchestrator import BulletPointOrchestrator
from .rate_limit import Tier, TieredRateLimiter
from .relay import CredentialRelayService
from .session_store import SessionRecord, SessionStore
from .sweeper import SessionSweepWorker

__all__ = [
    "BulletPointOrchestrator",
    "CredentialCipher",
    "CredentialRelayService",
    "DecryptError",
    "EphemeralCredential",
    "OpenAIChatGenerator",
    "SessionRecord",
    "SessionStore",
    "SessionSweepWorker",
    "TextGenerator",
    "Tier",
    "TieredRateLimiter",
]
