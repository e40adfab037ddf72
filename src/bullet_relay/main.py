# src/bullet_relay/main.py
"""Main entry point for the Bullet Relay application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bullet_relay.api.v1 import credentials_router, generate_router, system_router
from bullet_relay.core.settings import Settings
from bullet_relay.core.settings import settings as default_settings
from bullet_relay.services.errors import InternalServiceError, RateLimitedError, ServiceError
from bullet_relay.services.generation import (
    OpenAIChatGenerator,
    TextGenerator,
    load_generation_config,
)
from bullet_relay.services.orchestrator import BulletPointOrchestrator
from bullet_relay.services.rate_limit import Tier, TieredRateLimiter
from bullet_relay.services.relay import CredentialRelayService
from bullet_relay.services.sweeper import SessionSweepWorker

logger = logging.getLogger(__name__)

APP_DESCRIPTION = "Resume bullet-point generator with a single-use credential relay"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx logs request lines at INFO; keep them out of the default output.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _error_response(exc: ServiceError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message},
        headers=headers,
    )


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s on %s %s", type(exc).__name__, request.method, request.url.path)
    return _error_response(exc)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = sorted(
        {str(error["loc"][-1]) for error in exc.errors() if error.get("loc")}
    )
    message = "Invalid request body"
    if fields:
        message = f"Missing or invalid fields: {', '.join(fields)}"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return _error_response(InternalServiceError())


def create_app(
    settings: Settings | None = None,
    *,
    generator: TextGenerator | None = None,
) -> FastAPI:
    """Build the FastAPI application and the services it owns.

    Args:
        settings: Configuration; defaults to the environment-loaded settings.
        generator: Text generator; defaults to the OpenAI chat-completions client.

    Returns:
        An application whose relay, limiter and orchestrator live on ``app.state``
        and whose sweep worker runs for the lifetime of the app.
    """
    settings = settings or default_settings
    _configure_logging(settings.log_level)

    relay = CredentialRelayService.from_settings(settings)
    rate_limiter = TieredRateLimiter(
        {
            Tier.DEFAULT: settings.rate_limit_default_max,
            Tier.OWN_CREDENTIAL: settings.rate_limit_own_key_max,
        },
        window_seconds=settings.rate_limit_window_seconds,
    )
    owns_generator = generator is None
    text_generator: TextGenerator = generator or OpenAIChatGenerator(
        load_generation_config(settings)
    )
    orchestrator = BulletPointOrchestrator(
        relay,
        text_generator,
        default_credential=settings.default_api_key,
        timeout_seconds=settings.generation_timeout_seconds,
        role_max_length=settings.role_max_length,
        skills_max_length=settings.skills_max_length,
    )
    sweeper = SessionSweepWorker(
        relay.store,
        rate_limiter,
        interval_seconds=settings.session_sweep_interval_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await sweeper.start()
        logger.info(
            "%s %s ready (default API key configured: %s)",
            settings.app_name,
            settings.app_version,
            settings.has_default_api_key,
        )
        try:
            yield
        finally:
            await sweeper.stop()
            relay.store.clear()
            if owns_generator and isinstance(text_generator, OpenAIChatGenerator):
                await text_generator.close()

    app = FastAPI(
        title=settings.app_name,
        description=APP_DESCRIPTION,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.relay = relay
    app.state.rate_limiter = rate_limiter
    app.state.orchestrator = orchestrator
    app.state.sweeper = sweeper

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(credentials_router, prefix="/api/v1")
    app.include_router(generate_router, prefix="/api/v1")
    app.include_router(system_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": APP_DESCRIPTION,
            "docs": "/docs",
        }

    return app


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "bullet_relay.main:create_app",
        factory=True,
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )


if __name__ == "__main__":
    run()
