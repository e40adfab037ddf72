"""Application settings and configuration.

This module defines all configuration options for the Bullet Relay service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files. Secrets
    are held as ``SecretStr`` so they never appear in reprs or logs.
    """

    # Application metadata
    app_name: str = Field(default="Bullet Relay", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # HTTP server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")

    # Credential relay
    relay_master_secret: SecretStr | None = Field(default=None, alias="RELAY_MASTER_SECRET")
    session_ttl_seconds: float = Field(default=60.0, gt=0, alias="SESSION_TTL_SECONDS")
    session_sweep_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        alias="SESSION_SWEEP_INTERVAL_SECONDS",
    )
    credential_min_length: int = Field(default=8, ge=1, alias="CREDENTIAL_MIN_LENGTH")
    credential_max_length: int = Field(default=512, ge=1, alias="CREDENTIAL_MAX_LENGTH")

    # scrypt cost parameters for per-session key derivation
    scrypt_n: int = Field(default=2**14, alias="SCRYPT_N")
    scrypt_r: int = Field(default=8, alias="SCRYPT_R")
    scrypt_p: int = Field(default=1, alias="SCRYPT_P")

    # Rate limiting (fixed window per caller and tier)
    rate_limit_window_seconds: float = Field(default=900.0, gt=0, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_default_max: int = Field(default=20, ge=1, alias="RATE_LIMIT_DEFAULT_MAX")
    rate_limit_own_key_max: int = Field(default=10, ge=1, alias="RATE_LIMIT_OWN_KEY_MAX")
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")

    # Upstream text generation
    default_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com", alias="OPENAI_BASE_URL")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_temperature: float = Field(default=0.7, alias="OPENAI_TEMPERATURE")
    openai_max_tokens: int = Field(default=500, alias="OPENAI_MAX_TOKENS")
    openai_timeout_seconds: float = Field(default=30.0, gt=0, alias="OPENAI_TIMEOUT_SECONDS")
    generation_timeout_seconds: float = Field(
        default=45.0,
        gt=0,
        alias="GENERATION_TIMEOUT_SECONDS",
    )

    # Free-text input bounds
    role_max_length: int = Field(default=200, alias="ROLE_MAX_LENGTH")
    skills_max_length: int = Field(default=1000, alias="SKILLS_MAX_LENGTH")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def has_default_api_key(self) -> bool:
        """Return True when a non-empty server-default credential is configured."""
        return bool(self.default_api_key and self.default_api_key.get_secret_value().strip())

    @property
    def rate_limits(self) -> dict[str, int]:
        """Return per-tier request ceilings keyed by tier value."""
        return {
            "default": self.rate_limit_default_max,
            "own_key": self.rate_limit_own_key_max,
        }


settings = Settings()
