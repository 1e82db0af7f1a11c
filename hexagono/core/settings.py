# hexagono/core/settings.py
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # === General / app ===
    # sin APP_ENV explícito se asume producción
    APP_ENV: str = "production"  # development | staging | production | test
    PUBLIC_BASE_URL: str = "http://localhost:3000"
    DEFAULT_LANGUAGE: str = "es"
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # === Database ===
    DATABASE_URL: str = "sqlite:///./hexagono.db"

    # === Empresa ===
    COMPANY_NAME: str = "Hexágono Web"
    COMPANY_EMAIL: str = "contacto@hexagono.xyz"
    COMPANY_PHONE: str = "+54 11 2378-2307"
    COMPANY_WEBSITE: str = "https://hexagono.xyz"
    ADMIN_EMAIL: str = "admin@hexagono.xyz"

    # === E-mail (Resend) ===
    RESEND_API_KEY: Optional[str] = None
    EMAIL_MAX_RETRIES: int = 3
    EMAIL_RETRY_BASE_SECONDS: float = 1.0

    # === Auth ===
    ADMIN_USERNAME: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    CRON_SECRET: Optional[str] = None

    # === Cotizaciones ===
    ENFORCE_STATUS_TRANSITIONS: bool = True
    REMINDER_THRESHOLD_HOURS: int = Field(48, ge=1)
    REMINDER_BATCH_LIMIT: int = Field(100, ge=1)
    REMINDER_MAX_CONCURRENCY: int = Field(5, ge=1)
    HIGH_PRIORITY_THRESHOLD: int = 300000
    ESTIMATED_RESPONSE_HOURS: int = 48
    QUOTE_NUMBER_MAX_ATTEMPTS: int = 5

    # === Rate limiting ===
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_QUOTE_CREATE: str = "5/15minutes"
    RATE_LIMIT_DEFAULT: str = "100/minute"

    # === Logging / observability ===
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings singleton con overrides simples según APP_ENV."""
    s = Settings()

    env = s.APP_ENV.lower()
    if env == "production":
        s.LOG_LEVEL = "WARNING"
    elif env == "development":
        s.LOG_LEVEL = "DEBUG"

    return s


# from hexagono.core.settings import settings
settings = get_settings()
