"""Service settings read from the environment (and an optional `.env` file).

Only `DATABASE_URL` and `JWT_SECRET_KEY` are required; everything else has a
production-safe default.
"""

import re

LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Portal API settings. Field names map to upper-case environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="Async SQLAlchemy URL (postgresql+asyncpg://...)",
    )
    database_schema: str | None = Field(
        default=None,
        description="Schema placed first on the Postgres search_path (preview or test databases)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # JWT
    jwt_secret_key: str = Field(
        min_length=32,
        description="HMAC key for session tokens and reset grants (at least 32 characters)",
    )
    jwt_algorithm: str = Field(default="HS256", description="Algorithm for session tokens and reset grants")
    jwt_access_token_expire_minutes: int = Field(
        default=60,
        description="Session token expiration in minutes",
        gt=0,
    )

    # Roles
    default_role_name: str = Field(
        default="Student",
        min_length=1,
        description="Role attached to new users that register without explicit roles",
    )

    # Password policy
    password_min_length: int = Field(
        default=12,
        description="Minimum password length",
        ge=8,
    )
    password_dictionary_check_enabled: bool = Field(
        default=True,
        description="Reject passwords containing dictionary or common words (zxcvbn)",
    )
    password_breach_check_enabled: bool = Field(
        default=True,
        description="Reject passwords found in the breach corpus range API",
    )
    breach_api_url: str = Field(
        default="https://api.pwnedpasswords.com",
        description="Base URL of the k-anonymity breach range API",
    )
    breach_check_timeout: float = Field(
        default=5.0,
        description="Breach range request timeout in seconds",
        gt=0,
    )
    block_on_upstream_failure: bool = Field(
        default=False,
        description="Reject passwords when the breach service is unreachable (fail closed)",
    )
    password_history_depth: int = Field(
        default=5,
        description="Number of previous passwords that cannot be reused",
        ge=1,
    )
    password_max_age_days: int = Field(
        default=60,
        description="Password age in days after which a change is recommended at login",
        gt=0,
    )

    @field_validator("breach_api_url")
    @classmethod
    def validate_breach_api_url(cls, v: str) -> str:
        if not v.startswith("https://"):
            msg = "breach_api_url must use HTTPS"
            raise ValueError(msg)
        return v.rstrip("/")

    # Password reset
    password_reset_token_ttl_seconds: int = Field(
        default=900,
        description="Lifetime of password reset tokens in seconds",
        gt=0,
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web client, used to build reset links",
    )

    # Login
    login_reveal_unknown_email: bool = Field(
        default=False,
        description="Return 'Email not found' instead of the generic credentials error for unknown emails",
    )

    # Mail
    smtp_host: str = Field(
        default="",
        description="SMTP server host (empty disables delivery and logs messages instead)",
    )
    smtp_port: int = Field(default=587, description="SMTP server port", gt=0)
    smtp_username: str | None = Field(default=None, description="SMTP login user")
    smtp_password: str | None = Field(default=None, description="SMTP login password")
    smtp_use_tls: bool = Field(default=True, description="Issue STARTTLS before login")
    mail_from: str = Field(
        default="no-reply@portal.local",
        description="Sender address for outgoing mail",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum loguru level (TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL)",
    )
    log_dir: str | None = Field(
        default=None,
        description="When set, also write portal-api.log here, rotated daily",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated origins of web clients allowed to call the API",
    )
    cors_origin_regex: str = Field(
        default="",
        description="Regex for additional allowed origins (e.g. preview deployments)",
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Environment name reported by /info and the CLI",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="Prefix for all API routes",
    )
    rate_limit_per_minute: int = Field(
        default=200,
        description="Requests per minute per client IP on general endpoints",
        gt=0,
    )
    auth_rate_limit_per_minute: int = Field(
        default=20,
        description="Requests per minute per client IP on login and reset endpoints",
        gt=0,
    )
    trusted_proxy_headers: str = Field(
        default="X-Forwarded-For,X-Real-IP",
        description="Headers set by the reverse proxy that carry the client IP, highest priority first",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            msg = f"Unknown log_level: {v}"
            raise ValueError(msg)
        return level

    @property
    def trusted_proxy_header_list(self) -> list[str]:
        return _split_csv(self.trusted_proxy_headers)

    @property
    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins)


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()  # type: ignore[call-arg]
