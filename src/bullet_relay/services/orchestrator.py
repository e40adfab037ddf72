# src/bullet_relay/services/orchestrator.py
"""Resolve a credential for one generation request and guarantee its release."""

from __future__ import annotations

import asyncio
import logging

from pydantic import SecretStr

from bullet_relay.core.prompts import SYSTEM_PROMPT, build_user_prompt
from bullet_relay.services.credential import EphemeralCredential
from bullet_relay.services.errors import (
    InputValidationError,
    NoCredentialError,
    ServiceError,
    SessionExpiredError,
    UpstreamError,
)
from bullet_relay.services.generation import TextGenerator
from bullet_relay.services.relay import CredentialRelayService

logger = logging.getLogger(__name__)

DEFAULT_GENERATION_TIMEOUT_SECONDS = 45.0


class BulletPointOrchestrator:
    """Turn ``(role, skills, session_id?)`` into bullet points.

    Exactly one credential source is chosen per request: the relayed session
    when a session id is given, otherwise the server default, otherwise the
    request is rejected. A session id that cannot be redeemed is never
    silently replaced by the default credential.
    """

    def __init__(
        self,
        relay: CredentialRelayService,
        generator: TextGenerator,
        *,
        default_credential: SecretStr | None = None,
        timeout_seconds: float = DEFAULT_GENERATION_TIMEOUT_SECONDS,
        role_max_length: int = 200,
        skills_max_length: int = 1000,
    ) -> None:
        self._relay = relay
        self._generator = generator
        self._default_credential = default_credential
        self._timeout_seconds = timeout_seconds
        self._role_max_length = role_max_length
        self._skills_max_length = skills_max_length

    @property
    def has_default_credential(self) -> bool:
        return bool(
            self._default_credential and self._default_credential.get_secret_value().strip()
        )

    def _clean_field(self, name: str, value: object, max_length: int) -> str:
        if not isinstance(value, str) or not value.strip():
            raise InputValidationError("Role and skills are required")
        cleaned = value.strip()
        if len(cleaned) > max_length:
            raise InputValidationError(f"{name} must be at most {max_length} characters")
        return cleaned

    async def _resolve_credential(self, session_id: str | None) -> EphemeralCredential:
        if session_id:
            try:
                return await self._relay.consume(session_id)
            except SessionExpiredError:
                raise
            except Exception as err:
                logger.exception("Unexpected failure redeeming a credential session")
                raise SessionExpiredError() from err
        default = self._default_credential
        if default is None or not default.get_secret_value().strip():
            raise NoCredentialError()
        return EphemeralCredential(default.get_secret_value(), source="default")

    async def generate_bullet_points(
        self,
        role: object,
        skills: object,
        session_id: str | None = None,
    ) -> str:
        """Validate input, pick a credential, call the generator, release the credential.

        Raises:
            InputValidationError: Missing or oversized ``role``/``skills``.
            NoCredentialError: No session given and no default credential.
            SessionExpiredError: The session could not be redeemed.
            UpstreamAuthError: The generator rejected the credential.
            UpstreamError: The generator failed or timed out.
        """
        cleaned_role = self._clean_field("Role", role, self._role_max_length)
        cleaned_skills = self._clean_field("Skills", skills, self._skills_max_length)

        credential = await self._resolve_credential(session_id)
        with credential:
            try:
                return await asyncio.wait_for(
                    self._generator.generate(
                        SYSTEM_PROMPT,
                        build_user_prompt(cleaned_role, cleaned_skills),
                        credential.reveal(),
                    ),
                    timeout=self._timeout_seconds,
                )
            except TimeoutError as err:
                logger.warning("Text generation exceeded %.1fs", self._timeout_seconds)
                raise UpstreamError() from err
            except ServiceError:
                raise
            except Exception as err:
                logger.exception("Unexpected failure during text generation")
                raise UpstreamError() from err
