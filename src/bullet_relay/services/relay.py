# src/bullet_relay/services/relay.py
"""Single-use relay for caller-supplied upstream credentials.

A session moves ``CREATED -> CONSUMED`` on its one successful redemption or
``CREATED -> EXPIRED`` when the sweep removes it. Both end states are
terminal: the record is deleted before decryption is attempted, so a
tampered or corrupted record cannot be retried through error responses.
"""

from __future__ import annotations

import asyncio
import logging
import re

from bullet_relay.core.settings import Settings
from bullet_relay.services.credential import EphemeralCredential
from bullet_relay.services.crypto import CredentialCipher, DecryptError
from bullet_relay.services.errors import (
    CredentialDecryptFailed,
    CredentialValidationError,
    SessionNotFound,
)
from bullet_relay.services.session_store import SessionRecord, SessionStore
from bullet_relay.utils.hash import fingerprint

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(r"[0-9a-f]{64}")
CREDENTIAL_MIN_LENGTH = 8
CREDENTIAL_MAX_LENGTH = 512


class CredentialRelayService:
    """Accept a credential once, release it once."""

    def __init__(
        self,
        cipher: CredentialCipher,
        store: SessionStore,
        *,
        min_length: int = CREDENTIAL_MIN_LENGTH,
        max_length: int = CREDENTIAL_MAX_LENGTH,
    ) -> None:
        self._cipher = cipher
        self._store = store
        self._min_length = min_length
        self._max_length = max_length

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: SessionStore | None = None,
    ) -> CredentialRelayService:
        """Build a relay whose cipher and store follow ``settings``."""
        master_secret = None
        if settings.relay_master_secret is not None:
            master_secret = settings.relay_master_secret.get_secret_value().encode("utf-8") or None
        cipher = CredentialCipher(
            master_secret,
            n=settings.scrypt_n,
            r=settings.scrypt_r,
            p=settings.scrypt_p,
        )
        return cls(
            cipher,
            store if store is not None else SessionStore(settings.session_ttl_seconds),
            min_length=settings.credential_min_length,
            max_length=settings.credential_max_length,
        )

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def session_ttl_seconds(self) -> float:
        return self._store.ttl_seconds

    @property
    def pending_sessions(self) -> int:
        return len(self._store)

    def _validate(self, plaintext: object) -> str:
        if not isinstance(plaintext, str):
            raise CredentialValidationError()
        if not plaintext.strip():
            raise CredentialValidationError("API key is required")
        if not self._min_length <= len(plaintext) <= self._max_length:
            raise CredentialValidationError("API key has an invalid length")
        if any(ch.isspace() or not ch.isprintable() for ch in plaintext):
            raise CredentialValidationError("API key contains invalid characters")
        return plaintext

    def submit_credential(self, plaintext: object) -> str:
        """Encrypt and store ``plaintext`` under a new session and return its id.

        Raises:
            CredentialValidationError: If the credential is empty or malformed.
        """
        credential = self._validate(plaintext)
        session_id = self._cipher.generate_session_id()
        sealed = self._cipher.encrypt(credential, session_id)
        self._store.put(SessionRecord(session_id, sealed, created_at=self._store.now()))
        logger.info("Relayed credential stored for session %s", fingerprint(session_id))
        return session_id

    def consume_credential(self, session_id: object) -> EphemeralCredential:
        """Redeem a session exactly once.

        Raises:
            SessionNotFound: Unknown, malformed, already consumed or expired id.
            CredentialDecryptFailed: The record failed authentication; it is gone.
        """
        if not isinstance(session_id, str) or not SESSION_ID_PATTERN.fullmatch(session_id):
            raise SessionNotFound()
        record = self._store.take_and_delete(session_id)
        sealed = record.sealed
        try:
            buffer = self._cipher.decrypt(sealed.ciphertext, sealed.nonce, sealed.tag, session_id)
        except DecryptError as err:
            logger.warning(
                "Relayed credential for session %s failed to decrypt", fingerprint(session_id)
            )
            raise CredentialDecryptFailed() from err
        try:
            return EphemeralCredential(buffer, source="session")
        finally:
            buffer[:] = b"\x00" * len(buffer)

    async def submit(self, plaintext: object) -> str:
        """Run :meth:`submit_credential` off the event loop (scrypt is CPU-bound)."""
        return await asyncio.to_thread(self.submit_credential, plaintext)

    async def consume(self, session_id: object) -> EphemeralCredential:
        """Run :meth:`consume_credential` off the event loop (scrypt is CPU-bound)."""
        return await asyncio.to_thread(self.consume_credential, session_id)
