"""Cinegate Backend — Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./cinegate.db"

    # Session tokens; endpoints refuse to sign while JWT_SECRET is empty
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    SESSION_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "auth-token"

    # Password hashing
    BCRYPT_ROUNDS: int = 12

    # Admin (single shared identity)
    ADMIN_USERNAME: str = ""
    ADMIN_PASSWORD: str = ""
    ADMIN_REQUIRE_BASIC_AUTH: bool = True
    ADMIN_SESSION_HOURS: int = 4

    # Shared password for the non-account browsing mode
    PLATFORM_PASSWORD: str = ""

    # In-process rate limiter (single instance only)
    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_MINUTES: int = 15

    # Access codes
    ACCESS_CODE_LENGTH: int = 12
    ACCESS_CODE_TTL_HOURS: int = 24
    ACCESS_CODE_MAX_ATTEMPTS: int = 10

    # Library
    WATCH_HISTORY_LIMIT: int = 20

    # HTTP
    # Only honour X-Forwarded-For behind a proxy that overwrites it. Otherwise
    # run uvicorn with --forwarded-allow-ips and leave this off.
    TRUST_FORWARDED_FOR: bool = False
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
