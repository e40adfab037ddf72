# src/bullet_relay/services/credential.py
"""Short-lived owner for plaintext credential material."""

from __future__ import annotations

from types import TracebackType


class CredentialWipedError(RuntimeError):
    """Raised when a credential is read after its scope has ended."""


class EphemeralCredential:
    """Plaintext credential held in a mutable buffer that is zeroed on release.

    Use as a context manager so the buffer is wiped on every exit path::

        with relay.consume_credential(session_id) as credential:
            await generator.generate(system, user, credential.reveal())

    ``repr`` and ``str`` never include the secret.
    """

    __slots__ = ("_buffer", "_source")

    def __init__(self, secret: bytes | bytearray | str, *, source: str) -> None:
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        # Copy so wiping never touches a buffer owned by someone else.
        self._buffer: bytearray | None = bytearray(secret)
        self._source = source

    @property
    def source(self) -> str:
        """Where the credential came from: ``"session"`` or ``"default"``."""
        return self._source

    @property
    def wiped(self) -> bool:
        return self._buffer is None

    def reveal(self) -> str:
        """Return the plaintext for the single call it authorizes."""
        if self._buffer is None:
            raise CredentialWipedError("Credential has already been released")
        return self._buffer.decode("utf-8")

    def wipe(self) -> None:
        """Zero the buffer and drop the reference. Safe to call repeatedly."""
        if self._buffer is None:
            return
        self._buffer[:] = b"\x00" * len(self._buffer)
        self._buffer = None

    def __enter__(self) -> EphemeralCredential:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.wipe()

    def __del__(self) -> None:
        if getattr(self, "_buffer", None) is not None:
            self.wipe()

    def __repr__(self) -> str:
        state = "wiped" if self._buffer is None else "held"
        return f"EphemeralCredential(source={self._source!r}, state={state})"

    __str__ = __repr__
