"""
Configuration management for MedTrack
"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "MedTrack"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: str = "development"

    # API
    API_PREFIX: str = "/api"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Database
    DATABASE_URL: str = "sqlite:///./medtrack.db"
    DATABASE_ECHO: bool = False
    SEED_DEMO_DATA: bool = False

    # All stored timestamps are wall-clock times in this zone
    TIMEZONE: str = "UTC"

    # LLM Configuration (OpenAI-compatible chat completions API)
    LLM_API_KEY: Optional[str] = None
    LLM_BASE_URL: str = "https://api.cerebras.ai/v1"
    LLM_MODEL: str = "llama3.1-8b"
    LLM_PARSE_MODEL: Optional[str] = None
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 2048
    LLM_TIMEOUT_SECONDS: int = 30
    DEFAULT_LANGUAGE: str = "en"

    # Security
    SECRET_KEY: str = "medtrack-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Client
    API_BASE_URL: str = "http://localhost:3000"
    CLIENT_RETRY_ATTEMPTS: int = 50
    CLIENT_RETRY_DELAY_SECONDS: float = 4.0
    CLIENT_TIMEOUT_SECONDS: float = 30.0

    # Reminders
    REMINDER_POLL_SECONDS: float = 10.0
    REMINDER_KEY_RETENTION_HOURS: int = 48
    RECENT_ALERTS_LIMIT: int = 10
    DEFAULT_SNOOZE_MINUTES: int = 15

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


class AnalyticsConfig:
    """Windows used by the analytics aggregator"""

    DAILY_SERIES_LIMIT: int = 30
    DELAY_SAMPLES_LIMIT: int = 50
    MISSED_WINDOW_DAYS: int = 7
    WEEKDAY_NAMES: list[str] = [
        "Sunday", "Monday", "Tuesday", "Wednesday",
        "Thursday", "Friday", "Saturday"
    ]


# Database table names
class TableNames:
    USERS = "users"
    MEDICINES = "medicines"
    DOSE_LOGS = "dose_logs"


settings = get_settings()
analytics_config = AnalyticsConfig()
