# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bullet_relay.core.settings import Settings
from bullet_relay.main import create_app
from bullet_relay.services.crypto import CredentialCipher
from bullet_relay.services.relay import CredentialRelayService
from bullet_relay.services.session_store import SessionStore

# Cheap scrypt cost keeps the suite fast; production uses 2**14.
TEST_SCRYPT_N = 2**10
TEST_MASTER_SECRET = b"test-master-secret-0123456789abcdef"
DEFAULT_REPLY = "• Shipped features → happier users → 20% retention lift"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingGenerator:
    """Text generator double that records every call it receives."""

    def __init__(self, reply: str = DEFAULT_REPLY) -> None:
        self.reply = reply
        self.error: BaseException | None = None
        self.calls: list[tuple[str, str, str]] = []

    async def generate(self, system_prompt: str, user_prompt: str, credential: str) -> str:
        self.calls.append((system_prompt, user_prompt, credential))
        if self.error is not None:
            raise self.error
        return self.reply

    @property
    def credentials(self) -> list[str]:
        return [call[2] for call in self.calls]


def build_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "relay_master_secret": TEST_MASTER_SECRET.decode(),
        "default_api_key": None,
        "scrypt_n": TEST_SCRYPT_N,
        "log_level": "DEBUG",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cipher() -> CredentialCipher:
    return CredentialCipher(TEST_MASTER_SECRET, n=TEST_SCRYPT_N)


@pytest.fixture()
def store(clock: FakeClock) -> SessionStore:
    return SessionStore(60.0, clock=clock)


@pytest.fixture()
def relay(cipher: CredentialCipher, store: SessionStore) -> CredentialRelayService:
    return CredentialRelayService(cipher, store)


@pytest.fixture()
def generator() -> RecordingGenerator:
    return RecordingGenerator()


@pytest.fixture()
def test_settings() -> Settings:
    """Provide settings with a fixed master secret and no default API key."""
    return build_settings()


@pytest.fixture()
def make_client(generator: RecordingGenerator) -> Iterator[Callable[..., TestClient]]:
    """Return a factory building a started TestClient from settings overrides."""
    clients: list[TestClient] = []

    def _make(**overrides: Any) -> TestClient:
        app = create_app(build_settings(**overrides), generator=generator)
        client = TestClient(app, base_url="http://test")
        client.__enter__()
        clients.append(client)
        return client

    try:
        yield _make
    finally:
        for client in clients:
            client.__exit__(None, None, None)


@pytest.fixture()
def app(test_settings: Settings, generator: RecordingGenerator) -> FastAPI:
    return create_app(test_settings, generator=generator)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
