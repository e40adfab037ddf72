"""System endpoints exposing public runtime configuration."""

from __future__ import annotations

from fastapi import APIRouter

from bullet_relay.api.v1.dependencies import RateLimiterDep, RelayServiceDep, SettingsDep

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config(
    settings: SettingsDep,
    relay: RelayServiceDep,
    limiter: RateLimiterDep,
) -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets; reports only whether a default API key is configured.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "relay": {
            "session_ttl_seconds": relay.session_ttl_seconds,
            "sweep_interval_seconds": settings.session_sweep_interval_seconds,
            "default_api_key_configured": settings.has_default_api_key,
            "pending_sessions": relay.pending_sessions,
        },
        "rate_limits": {
            "window_seconds": limiter.window_seconds,
            "max_requests": settings.rate_limits,
        },
    }
