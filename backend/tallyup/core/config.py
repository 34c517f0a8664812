"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "TallyUp"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./tallyup.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Periods
    PERIOD_TIMEZONE: str = ""  # IANA zone used to read epoch timestamps; empty = system local zone

    # Expenses
    DEFAULT_CATEGORY: str = "uncategorized"
    ALLOW_FUTURE_EXPENSES: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()


def get_period_timezone():
    """Zone used to read epoch timestamps, or None for the system local zone."""
    if not settings.PERIOD_TIMEZONE:
        return None
    from zoneinfo import ZoneInfo
    return ZoneInfo(settings.PERIOD_TIMEZONE)
