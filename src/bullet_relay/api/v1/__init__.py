# src/bullet_relay/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import credentials_router, generate_router, system_router

__all__ = [
    "credentials_router",
    "generate_router",
    "system_router",
]
