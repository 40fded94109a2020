# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for SkillUp.
Settings are loaded from environment variables with sensible defaults.

Deployments may also ship a single JSON secrets blob in ``ENV_DATA``
carrying the database URL, the JWT signing secret, the frontend URL and
the SES SMTP relay credentials. Values found in the blob take precedence
over the individual environment variables.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

import json
from functools import lru_cache
from typing import Any, Literal, Self

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL configuration for the LMS record store.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        name: Database name.
        url_override: Full connection URL, takes precedence over components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        echo: Echo SQL statements to the log.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
        populate_by_name=True,
    )

    user: str = "skillup"
    password: SecretStr = SecretStr("skillup_password")
    host: str = "localhost"
    port: int = 5432
    name: str = "skillup"
    url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.name}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for tooling that needs one."""
        return self.url.replace("+asyncpg", "")


class JWTSettings(BaseSettings):
    """JWT authentication configuration.

    Attributes:
        secret_key: Secret key for verifying and signing tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Lifetime of locally issued tokens.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
        populate_by_name=True,
    )

    secret_key: SecretStr = Field(
        default=SecretStr("change-this-in-production"),
        validation_alias=AliasChoices("JWT_SECRET", "JWT_SECRET_KEY"),
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )


class MailSettings(BaseSettings):
    """SES SMTP relay configuration for outgoing email.

    Attributes:
        host: SMTP relay host.
        port: SMTP relay port (465 means implicit TLS).
        user: SMTP username.
        password: SMTP password.
        from_address: Default sender address.
        from_name: Display name of the sender.
        enabled: When False, emails are logged and dropped.
    """

    model_config = SettingsConfigDict(
        env_prefix="SES_SMTP_",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = "email-smtp.us-east-1.amazonaws.com"
    port: int = 465
    user: str = ""
    password: SecretStr = SecretStr("")
    from_address: str = Field(
        default="no-reply@skillup.local",
        validation_alias=AliasChoices("DEFAULT_FROM_EMAIL", "SES_SMTP_FROM_ADDRESS"),
    )
    from_name: str = Field(
        default="SkillUp Team",
        validation_alias=AliasChoices("FROM_NAME", "SES_SMTP_FROM_NAME"),
    )
    enabled: bool = False

    @property
    def use_tls(self) -> bool:
        """Whether the relay expects implicit TLS."""
        return self.port == 465


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        docs_enabled: Serve the OpenAPI docs pages.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    docs_enabled: bool = True


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        log_format: Log renderer, json or console.
        frontend_url: Public URL of the web frontend, used in emails.
        env_data: Raw JSON secrets blob.
        database: Database settings.
        jwt: JWT authentication settings.
        mail: SMTP relay settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"
    frontend_url: str = "http://localhost:3000"
    env_data: str | None = Field(default=None, validation_alias="ENV_DATA")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def apply_secrets_blob(self) -> Self:
        """Overlay values from the ENV_DATA secrets blob.

        Raises:
            ValueError: If the blob is not a JSON object.
        """
        if not self.env_data:
            return self

        blob = parse_secrets_blob(self.env_data)

        database_url = blob.get("DATABASE_URL") or blob.get("database_url")
        if database_url:
            self.database.url_override = database_url

        if blob.get("JWT_SECRET"):
            self.jwt.secret_key = SecretStr(blob["JWT_SECRET"])

        if blob.get("FRONTEND_URL"):
            self.frontend_url = blob["FRONTEND_URL"]

        ses = blob.get("ses") or {}
        if ses:
            self.mail.host = ses.get("SES_SMTP_HOST", self.mail.host)
            self.mail.port = int(ses.get("SES_SMTP_PORT", self.mail.port))
            self.mail.user = ses.get("SES_SMTP_USER", self.mail.user)
            if ses.get("SES_SMTP_PASS"):
                self.mail.password = SecretStr(ses["SES_SMTP_PASS"])
            self.mail.from_address = ses.get("DEFAULT_FROM_EMAIL", self.mail.from_address)
            self.mail.enabled = True

        return self

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.jwt.secret_key.get_secret_value() == "change-this-in-production":
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET or provide it in ENV_DATA."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


def parse_secrets_blob(raw: str) -> dict[str, Any]:
    """Decode the ENV_DATA secrets blob.

    The blob is sometimes stored JSON-encoded twice (a JSON string holding
    a JSON object), so a string result is decoded once more.

    Args:
        raw: Raw environment value.

    Returns:
        Decoded mapping.

    Raises:
        ValueError: If the value does not decode to a JSON object.
    """
    try:
        value: Any = json.loads(raw)
        if isinstance(value, str):
            value = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"ENV_DATA is not valid JSON: {e.msg}") from e

    if not isinstance(value, dict):
        raise ValueError("ENV_DATA must decode to a JSON object")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or after changing the environment.
    """
    get_settings.cache_clear()
