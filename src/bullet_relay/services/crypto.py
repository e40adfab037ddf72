# src/bullet_relay/services/crypto.py
"""Per-session authenticated encryption for relayed credentials."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

KEY_LENGTH_BYTES = 32
NONCE_LENGTH_BYTES = 12
TAG_LENGTH_BYTES = 16
MASTER_SECRET_BYTES = 32
SESSION_ID_BYTES = 32


class DecryptError(Exception):
    """Generic decryption failure. Carries no detail on purpose."""

    def __init__(self) -> None:
        super().__init__("Unable to decrypt credential")


@dataclass(frozen=True)
class EncryptedCredential:
    """Hex-encoded AES-256-GCM output bound to one session."""

    ciphertext: str
    nonce: str
    tag: str


class CredentialCipher:
    """Derive per-session keys from a process-wide master secret and seal credentials.

    Each session key is ``scrypt(master_secret, salt=session_id)``, so no two
    sessions share a key and a leaked session key does not expose the master
    secret. The session id is also bound as GCM associated data.
    """

    def __init__(
        self,
        master_secret: bytes | None = None,
        *,
        n: int = 2**14,
        r: int = 8,
        p: int = 1,
    ) -> None:
        if master_secret is not None and not master_secret:
            raise ValueError("Master secret must not be empty")
        self._master_secret = master_secret or secrets.token_bytes(MASTER_SECRET_BYTES)
        self._n = n
        self._r = r
        self._p = p

    @staticmethod
    def generate_session_id() -> str:
        """Return a fresh 256-bit session identifier, hex encoded."""
        return secrets.token_hex(SESSION_ID_BYTES)

    @staticmethod
    def _decode_hex(data: str, expected_length: int | None = None) -> bytes:
        try:
            decoded = bytes.fromhex(data)
        except (TypeError, ValueError) as err:
            raise DecryptError() from err
        if expected_length is not None and len(decoded) != expected_length:
            raise DecryptError()
        return decoded

    def _derive_key(self, session_id: str) -> bytes:
        kdf = Scrypt(
            salt=session_id.encode("utf-8"),
            length=KEY_LENGTH_BYTES,
            n=self._n,
            r=self._r,
            p=self._p,
        )
        return kdf.derive(self._master_secret)

    def encrypt(self, plaintext: str, session_id: str) -> EncryptedCredential:
        """Encrypt a credential under the key derived for ``session_id``.

        Args:
            plaintext: Credential to protect.
            session_id: Identifier of the session that will own the record.

        Returns:
            Hex-encoded ciphertext, nonce and authentication tag.
        """
        if not session_id:
            raise ValueError("Session id must be provided")
        nonce = secrets.token_bytes(NONCE_LENGTH_BYTES)
        sealed = AESGCM(self._derive_key(session_id)).encrypt(
            nonce,
            plaintext.encode("utf-8"),
            session_id.encode("utf-8"),
        )
        ciphertext, tag = sealed[:-TAG_LENGTH_BYTES], sealed[-TAG_LENGTH_BYTES:]
        return EncryptedCredential(ciphertext=ciphertext.hex(), nonce=nonce.hex(), tag=tag.hex())

    def decrypt(self, ciphertext: str, nonce: str, tag: str, session_id: str) -> bytearray:
        """Authenticate and decrypt a sealed credential.

        Returns the UTF-8 plaintext as a mutable buffer so the caller can zero
        it once used.

        Raises:
            DecryptError: On any malformed input, tag mismatch or key mismatch.
        """
        sealed = self._decode_hex(ciphertext) + self._decode_hex(tag, TAG_LENGTH_BYTES)
        nonce_bytes = self._decode_hex(nonce, NONCE_LENGTH_BYTES)
        if not session_id:
            raise DecryptError()
        try:
            plaintext = AESGCM(self._derive_key(session_id)).decrypt(
                nonce_bytes,
                sealed,
                session_id.encode("utf-8"),
            )
        except (InvalidTag, ValueError) as err:
            raise DecryptError() from err
        buffer = bytearray(plaintext)
        try:
            buffer.decode("utf-8")
        except UnicodeDecodeError as err:
            buffer[:] = b"\x00" * len(buffer)
            raise DecryptError() from err
        return buffer
