# src/bullet_relay/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .credentials import router as credentials_router
from .generate import router as generate_router
from .system import router as system_router

__all__ = [
    "credentials_router",
    "generate_router",
    "system_router",
]
