# tests/services/test_crypto.py
"""Tests for per-session credential encryption."""

from dataclasses import replace

import pytest

from bullet_relay.services.crypto import (
    NONCE_LENGTH_BYTES,
    TAG_LENGTH_BYTES,
    CredentialCipher,
    DecryptError,
    EncryptedCredential,
)

SESSION_ID_HEX_CHARS = 64


def _flip_first_byte(hex_value: str) -> str:
    raw = bytearray(bytes.fromhex(hex_value))
    raw[0] ^= 0x01
    return raw.hex()


def _open(cipher: CredentialCipher, sealed: EncryptedCredential, session_id: str) -> bytearray:
    return cipher.decrypt(sealed.ciphertext, sealed.nonce, sealed.tag, session_id)


@pytest.mark.parametrize("plaintext", ["secret-123", "sk-" + "a" * 48, "ключ-ünïcode-✓"])
def test_encrypt_then_decrypt_returns_plaintext(cipher: CredentialCipher, plaintext: str) -> None:
    session_id = cipher.generate_session_id()
    sealed = cipher.encrypt(plaintext, session_id)

    assert _open(cipher, sealed, session_id) == bytearray(plaintext.encode("utf-8"))


def test_sealed_fields_have_expected_shapes(cipher: CredentialCipher) -> None:
    session_id = cipher.generate_session_id()
    sealed = cipher.encrypt("secret-123", session_id)

    assert len(bytes.fromhex(sealed.nonce)) == NONCE_LENGTH_BYTES
    assert len(bytes.fromhex(sealed.tag)) == TAG_LENGTH_BYTES
    assert len(bytes.fromhex(sealed.ciphertext)) == len("secret-123")
    assert b"secret-123".hex() not in sealed.ciphertext


def test_each_encryption_uses_a_fresh_nonce(cipher: CredentialCipher) -> None:
    session_id = cipher.generate_session_id()
    first = cipher.encrypt("secret-123", session_id)
    second = cipher.encrypt("secret-123", session_id)

    assert first.nonce != second.nonce
    assert first.ciphertext != second.ciphertext


def test_session_ids_are_256_bit_hex_and_unique(cipher: CredentialCipher) -> None:
    ids = {cipher.generate_session_id() for _ in range(100)}

    assert len(ids) == 100
    for session_id in ids:
        assert len(session_id) == SESSION_ID_HEX_CHARS
        int(session_id, 16)


def test_sessions_derive_distinct_keys(cipher: CredentialCipher) -> None:
    first = cipher.generate_session_id()
    second = cipher.generate_session_id()

    assert cipher._derive_key(first) != cipher._derive_key(second)
    assert cipher._derive_key(first) == cipher._derive_key(first)


def test_flipped_ciphertext_byte_fails_closed(cipher: CredentialCipher) -> None:
    session_id = cipher.generate_session_id()
    sealed = cipher.encrypt("secret-123", session_id)
    tampered = replace(sealed, ciphertext=_flip_first_byte(sealed.ciphertext))

    for _ in range(3):
        with pytest.raises(DecryptError):
            _open(cipher, tampered, session_id)


@pytest.mark.parametrize("field", ["nonce", "tag"])
def test_flipped_nonce_or_tag_fails_closed(cipher: CredentialCipher, field: str) -> None:
    session_id = cipher.generate_session_id()
    sealed = cipher.encrypt("secret-123", session_id)
    tampered = replace(sealed, **{field: _flip_first_byte(getattr(sealed, field))})

    with pytest.raises(DecryptError):
        _open(cipher, tampered, session_id)


def test_wrong_session_id_fails(cipher: CredentialCipher) -> None:
    session_id = cipher.generate_session_id()
    sealed = cipher.encrypt("secret-123", session_id)

    with pytest.raises(DecryptError):
        _open(cipher, sealed, cipher.generate_session_id())


def test_other_master_secret_cannot_decrypt(cipher: CredentialCipher) -> None:
    session_id = cipher.generate_session_id()
    sealed = cipher.encrypt("secret-123", session_id)
    other = CredentialCipher(b"another-master-secret", n=2**10)

    with pytest.raises(DecryptError):
        _open(other, sealed, session_id)


@pytest.mark.parametrize(
    "overrides",
    [
        {"ciphertext": "not-hex"},
        {"nonce": "zz" * NONCE_LENGTH_BYTES},
        {"nonce": "00" * (NONCE_LENGTH_BYTES - 1)},
        {"tag": "00" * (TAG_LENGTH_BYTES + 1)},
        {"tag": ""},
    ],
)
def test_malformed_encodings_fail_closed(cipher: CredentialCipher, overrides: dict[str, str]) -> None:
    session_id = cipher.generate_session_id()
    sealed = replace(cipher.encrypt("secret-123", session_id), **overrides)

    with pytest.raises(DecryptError) as exc_info:
        _open(cipher, sealed, session_id)
    assert str(exc_info.value) == "Unable to decrypt credential"


def test_generated_master_secret_is_per_instance() -> None:
    first = CredentialCipher(n=2**10)
    second = CredentialCipher(n=2**10)
    session_id = first.generate_session_id()
    sealed = first.encrypt("secret-123", session_id)

    assert _open(first, sealed, session_id) == bytearray(b"secret-123")
    with pytest.raises(DecryptError):
        _open(second, sealed, session_id)


def test_empty_master_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        CredentialCipher(b"")
