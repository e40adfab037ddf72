"""Schemas for credential submission and bullet-point generation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class CredentialSubmitRequest(BaseModel):
    """Request carrying a caller-supplied upstream credential."""

    model_config = ConfigDict(hide_input_in_errors=True)

    credential: SecretStr = Field(..., description="Upstream API key, relayed once")


class CredentialSubmitResponse(BaseModel):
    """Session handle returned after a credential was accepted."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", description="Single-use session id")
    expires_in: int = Field(..., alias="expiresIn", description="Seconds until the session expires")


class GenerateRequest(BaseModel):
    """Request to generate resume bullet points."""

    model_config = ConfigDict(populate_by_name=True)

    role: str = Field(..., description="Job role, e.g. 'Software Developer'")
    skills: str = Field(..., description="Comma-separated skills")
    session_id: str | None = Field(
        default=None,
        alias="sessionId",
        description="Session id from the credential endpoint",
    )


class GenerateResponse(BaseModel):
    """Generated bullet points."""

    model_config = ConfigDict(populate_by_name=True)

    bullet_points: str = Field(..., alias="bulletPoints")


class ErrorResponse(BaseModel):
    """Error body shared by every endpoint."""

    error: str
