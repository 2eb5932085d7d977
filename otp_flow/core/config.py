"""Application configuration powered by pydantic-settings."""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized strongly-typed configuration loaded from `.env`."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PROJECT_NAME: str = "OTP Verification Front-end"
    PROJECT_VERSION: str = "1.0.0"

    AUTH_SERVICE_URL: str = Field("http://localhost:8000", description="Base URL of the authentication API")
    AUTH_SERVICE_TIMEOUT_SECONDS: float = 20.0
    AUTH_VERIFY_OTP_PATH: str = "/auth/verify-otp"
    AUTH_RESEND_OTP_PATH: str = "/auth/resend-otp"
    AUTH_RESET_PASSWORD_PATH: str = "/auth/reset-password"

    OTP_LENGTH: int = 6
    PASSWORD_MIN_LENGTH: int = 6

    # Resend cooldown restarted after every successful resend
    OTP_RESEND_COOLDOWN_SECONDS: int = 60
    COOLDOWN_TICK_SECONDS: float = 1.0

    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8080

    # Verify sessions not touched for this long are torn down
    SESSION_IDLE_TTL_SECONDS: float = 1800.0

    LOGIN_PATH: str = "/login"
    LOG_LEVEL: str = "INFO"

    ALLOWED_ORIGINS: List[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]


@lru_cache
def get_settings() -> Settings:
    """Cache and return a singleton Settings instance to avoid re-parsing env."""
    return Settings()


settings = get_settings()
