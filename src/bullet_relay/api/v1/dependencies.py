"""Shared API dependencies for service access and caller identity."""

from typing import Annotated

from fastapi import Depends, Request

from bullet_relay.core.settings import Settings
from bullet_relay.services.errors import RateLimitedError
from bullet_relay.services.orchestrator import BulletPointOrchestrator
from bullet_relay.services.rate_limit import Tier, TieredRateLimiter
from bullet_relay.services.relay import CredentialRelayService
from bullet_relay.utils.hash import blake3_hexdigest

UNKNOWN_CALLER = "unknown"


def get_settings(request: Request) -> Settings:
    """Return the settings the running application was built with."""
    return request.app.state.settings


def get_relay_service(request: Request) -> CredentialRelayService:
    """Return the application's credential relay."""
    return request.app.state.relay


def get_rate_limiter(request: Request) -> TieredRateLimiter:
    """Return the application's tiered rate limiter."""
    return request.app.state.rate_limiter


def get_orchestrator(request: Request) -> BulletPointOrchestrator:
    """Return the application's generation orchestrator."""
    return request.app.state.orchestrator


SettingsDep = Annotated[Settings, Depends(get_settings)]
RelayServiceDep = Annotated[CredentialRelayService, Depends(get_relay_service)]
RateLimiterDep = Annotated[TieredRateLimiter, Depends(get_rate_limiter)]
OrchestratorDep = Annotated[BulletPointOrchestrator, Depends(get_orchestrator)]


def get_caller_key(request: Request, settings: SettingsDep) -> str:
    """Derive the rate-limit identity of the caller from its network origin.

    The first ``X-Forwarded-For`` hop is only honoured when the service is
    configured to sit behind a trusted proxy. The address is hashed so raw
    client addresses are never held in limiter state.
    """
    origin = request.client.host if request.client else UNKNOWN_CALLER
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            origin = first_hop
    return blake3_hexdigest(origin.encode("utf-8"))


CallerKeyDep = Annotated[str, Depends(get_caller_key)]


def enforce_rate_limit(limiter: TieredRateLimiter, caller_key: str, tier: Tier) -> None:
    """Spend one request from ``tier`` or raise :class:`RateLimitedError`.

    Raises:
        RateLimitedError: With the seconds remaining in the caller's window.
    """
    if not limiter.allow(caller_key, tier):
        raise RateLimitedError(retry_after=limiter.retry_after(caller_key, tier))
