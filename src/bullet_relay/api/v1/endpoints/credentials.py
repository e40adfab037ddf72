# src/bullet_relay/api/v1/endpoints/credentials.py
"""Credential relay endpoint: trade an API key for a single-use session id."""

from __future__ import annotations

from fastapi import APIRouter

from bullet_relay.api.v1.dependencies import (
    CallerKeyDep,
    RateLimiterDep,
    RelayServiceDep,
    enforce_rate_limit,
)
from bullet_relay.schemas.relay import (
    CredentialSubmitRequest,
    CredentialSubmitResponse,
    ErrorResponse,
)
from bullet_relay.services.rate_limit import Tier

router = APIRouter(prefix="/credentials", tags=["credentials"])

# Submissions get their own window so they never spend generation quota.
SUBMISSION_KEY_SUFFIX = ":submit"


@router.post(
    "",
    response_model=CredentialSubmitResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def submit_credential(
    payload: CredentialSubmitRequest,
    relay: RelayServiceDep,
    limiter: RateLimiterDep,
    caller_key: CallerKeyDep,
) -> CredentialSubmitResponse:
    """Encrypt the supplied credential and return a session id good for one use.

    The session expires after the relay TTL whether or not it is redeemed.
    """
    enforce_rate_limit(limiter, caller_key + SUBMISSION_KEY_SUFFIX, Tier.OWN_CREDENTIAL)
    session_id = await relay.submit(payload.credential.get_secret_value())
    return CredentialSubmitResponse(
        session_id=session_id,
        expires_in=int(relay.session_ttl_seconds),
    )
