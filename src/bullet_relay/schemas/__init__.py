"""Pydantic schemas for the Bullet Relay API."""

from .relay import (
    CredentialSubmitRequest,
    CredentialSubmitResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
)

__all__ = [
    "CredentialSubmitRequest",
    "CredentialSubmitResponse",
    "ErrorResponse",
    "GenerateRequest",
    "GenerateResponse",
]
