# src/bullet_relay/services/session_store.py
"""In-process expiring store for encrypted credential records."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from bullet_relay.services.crypto import EncryptedCredential
from bullet_relay.services.errors import SessionNotFound
from bullet_relay.utils.hash import fingerprint

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 60.0

Clock = Callable[[], float]


@dataclass(frozen=True)
class SessionRecord:
    """Encrypted credential owned by exactly one session.

    Records are immutable: they are inserted once and removed once.
    """

    session_id: str
    sealed: EncryptedCredential
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return now - self.created_at >= ttl_seconds


class SessionStore:
    """Map of session id to record with single-winner takes and TTL sweeps.

    Every mutation is a single-key ``dict`` operation (``setdefault`` or
    ``pop``), which the interpreter performs atomically. Whoever pops a key
    owns the record; any concurrent ``take_and_delete`` or ``sweep`` of the
    same key sees it as already removed. No lock spans more than one key.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("Session TTL must be positive")
        self._ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._records: dict[str, SessionRecord] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def now(self) -> float:
        """Return the store clock reading used for ``created_at`` stamps."""
        return self._clock()

    def put(self, record: SessionRecord) -> str:
        """Insert a new record and return its session id.

        Raises:
            ValueError: If a record with the same id already exists.
        """
        existing = self._records.setdefault(record.session_id, record)
        if existing is not record:
            raise ValueError("Session id collision")
        return record.session_id

    def take_and_delete(self, session_id: str) -> SessionRecord:
        """Remove and return the record for ``session_id``.

        At most one caller ever receives a given record. A record found past
        its TTL is discarded rather than returned.

        Raises:
            SessionNotFound: If the id is unknown, already taken, or expired.
        """
        record = self._records.pop(session_id, None)
        if record is None:
            raise SessionNotFound()
        if record.is_expired(self._clock(), self._ttl_seconds):
            logger.info("Discarded expired session %s on redemption", fingerprint(session_id))
            raise SessionNotFound()
        return record

    def sweep(self) -> int:
        """Remove every record older than the TTL and return how many were removed."""
        now = self._clock()
        removed = 0
        for session_id, record in list(self._records.items()):
            if not record.is_expired(now, self._ttl_seconds):
                continue
            # Losing this pop to a concurrent take is fine: that caller owns it.
            if self._records.pop(session_id, None) is not None:
                removed += 1
        if removed:
            logger.debug("Swept %d expired credential sessions", removed)
        return removed

    def clear(self) -> None:
        """Drop all records, e.g. at shutdown."""
        self._records.clear()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._records

    def __len__(self) -> int:
        return len(self._records)
