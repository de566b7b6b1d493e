"""Keygate configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "secret_key": "insecure-dev-key-change-me",
    "default_admin_password": "admin123",
    "default_staff_password": "staff123",
}


class KeygateSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KEYGATE_")

    environment: str = "development"
    secret_key: str = "insecure-dev-key-change-me"
    log_level: str = "INFO"

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/keygate.db"

    # API
    api_title: str = "Keygate"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Auth
    token_ttl: int = 8 * 3600  # seconds

    # Accounts seeded into an empty user table
    default_admin_username: str = "admin"
    default_admin_password: str = "admin123"
    default_staff_username: str = "staff"
    default_staff_password: str = "staff123"

    # Listing
    default_log_limit: int = 50
    max_log_limit: int = 500
    recent_activity_size: int = 10

    @property
    def db_backend(self) -> str:
        """Dialect part of the database URL, e.g. ``sqlite+aiosqlite``."""
        return self.db_url.split("://", 1)[0]

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"KEYGATE_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure defaults. Set KEYGATE_SECRET_KEY, "
                "KEYGATE_DEFAULT_ADMIN_PASSWORD and KEYGATE_DEFAULT_STAFF_PASSWORD for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> KeygateSettings:
    settings = KeygateSettings()
    settings.validate_for_production()
    return settings
