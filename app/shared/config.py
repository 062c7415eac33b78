from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from app.domain.exceptions import ConfigurationError


load_dotenv()

CIPHER_KEY_MIN_LENGTH = 32


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    environment: str
    log_level: str
    postgres_dsn: str
    db_pool_min: int
    db_pool_max: int
    cipher_primary_key: str
    token_lifespan_hours: int
    refresh_lifespan_hours: int
    google_client_id: str
    portal_origin: str
    mail_mode: str
    mail_api_url: str
    mail_api_key: str
    mail_sender: str
    mail_timeout_seconds: float

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        environment=_env("APP_ENV", "development"),
        log_level=_env("LOG_LEVEL", "INFO"),
        postgres_dsn=_env("POSTGRES_DSN", ""),
        db_pool_min=int(_env("DB_POOL_MIN", "2")),
        db_pool_max=int(_env("DB_POOL_MAX", "10")),
        cipher_primary_key=_env("CIPHER_PRIMARY_KEY", ""),
        token_lifespan_hours=int(_env("TOKEN_LIFESPAN_HOURS", "168")),
        refresh_lifespan_hours=int(_env("REFRESH_LIFESPAN_HOURS", "720")),
        google_client_id=_env("GOOGLE_CLIENT_ID", ""),
        portal_origin=_env("PORTAL_ORIGIN", "http://localhost:3000"),
        mail_mode=_env("MAIL_MODE", "console"),
        mail_api_url=_env("MAIL_API_URL", ""),
        mail_api_key=_env("MAIL_API_KEY", ""),
        mail_sender=_env("MAIL_SENDER", "Every.music <noreply@every.music>"),
        mail_timeout_seconds=float(_env("MAIL_TIMEOUT_SECONDS", "10")),
    )


def validate_settings(settings: Settings) -> None:
    mandatory = {
        "POSTGRES_DSN": settings.postgres_dsn,
        "CIPHER_PRIMARY_KEY": settings.cipher_primary_key,
    }
    missing = [name for name, value in mandatory.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing mandatory configuration: {', '.join(missing)}")
    if len(settings.cipher_primary_key) < CIPHER_KEY_MIN_LENGTH:
        raise ConfigurationError(f"CIPHER_PRIMARY_KEY must be at least {CIPHER_KEY_MIN_LENGTH} characters")
    if settings.db_pool_min > settings.db_pool_max:
        raise ConfigurationError("DB_POOL_MIN must not exceed DB_POOL_MAX")
