"""Exception hierarchy shared by the relay, orchestrator and HTTP layer.

Every error carries the HTTP status it maps to and a message that is safe to
show to callers. Internal detail belongs in the server log, never in
``public_message``.
"""

from __future__ import annotations

from fastapi import status


class ServiceError(RuntimeError):
    """Base class for failures that are rendered to callers as ``{"error": ...}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Failed to generate bullet points"

    def __init__(self, public_message: str | None = None) -> None:
        self.public_message = public_message or self.default_message
        super().__init__(self.public_message)


class InputValidationError(ServiceError):
    """Raised when a request is missing fields or carries out-of-bounds values."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Role and skills are required"


class CredentialValidationError(InputValidationError):
    """Raised when a submitted credential is empty or malformed."""

    default_message = "A valid API key is required"


class NoCredentialError(InputValidationError):
    """Raised when neither a session nor a server-default credential is available."""

    default_message = "No API key available. Please provide your own API key."


class RateLimitedError(ServiceError):
    """Raised when a caller exhausted the quota of a rate-limit tier."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, please try again later."

    def __init__(self, retry_after: int, public_message: str | None = None) -> None:
        super().__init__(public_message)
        self.retry_after = max(1, int(retry_after))


class SessionExpiredError(ServiceError):
    """Raised when a session reference cannot be redeemed."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Session expired, please resupply your API key."


class SessionNotFound(SessionExpiredError):
    """The session was never issued, was already consumed, or has expired."""


class CredentialDecryptFailed(SessionExpiredError):
    """The stored record could not be authenticated or decrypted."""


class UpstreamAuthError(ServiceError):
    """Raised when the text-generation service rejects the credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "The API key was rejected. Please check your API key."


class UpstreamError(ServiceError):
    """Raised when the text-generation service fails for any other reason."""


class InternalServiceError(ServiceError):
    """Raised for unexpected failures; details are logged, never returned."""
