# src/bullet_relay/api/v1/endpoints/generate.py
"""Bullet-point generation endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from bullet_relay.api.v1.dependencies import (
    CallerKeyDep,
    OrchestratorDep,
    RateLimiterDep,
    enforce_rate_limit,
)
from bullet_relay.schemas.relay import ErrorResponse, GenerateRequest, GenerateResponse
from bullet_relay.services.rate_limit import Tier

router = APIRouter(prefix="/generate", tags=["generation"])


@router.post(
    "",
    response_model=GenerateResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def generate_bullet_points(
    payload: GenerateRequest,
    orchestrator: OrchestratorDep,
    limiter: RateLimiterDep,
    caller_key: CallerKeyDep,
) -> GenerateResponse:
    """Generate resume bullet points for a role and skill list.

    The tier is chosen by whether the request references a session, not by
    which credential ends up being used.
    """
    tier = Tier.OWN_CREDENTIAL if payload.session_id else Tier.DEFAULT
    enforce_rate_limit(limiter, caller_key, tier)
    bullet_points = await orchestrator.generate_bullet_points(
        payload.role,
        payload.skills,
        payload.session_id,
    )
    return GenerateResponse(bullet_points=bullet_points)
