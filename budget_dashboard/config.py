from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

from budget_dashboard.utils.constants import DEFAULT_TASK_NAME

# Project root (one level above the package)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = f"sqlite:///{_PROJECT_ROOT / 'budget_dashboard.db'}"

    # App
    APP_NAME: str = "Budget Dashboard"
    DEBUG: bool = True
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # CORS (override with env var CORS_ORIGINS as a JSON array)
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # Import
    DEFAULT_TASK_NAME: str = DEFAULT_TASK_NAME

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
