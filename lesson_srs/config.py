from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (parent of lesson_srs folder)
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables (prefix SRS_)"""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        env_prefix="SRS_",
        extra="ignore",
    )

    database_url: str = "sqlite:///./lesson_srs.db"
    echo_sql: bool = False

    # Calendar used for due-date windows and streak day boundaries
    timezone: str = "UTC"

    # Attempt history windows
    retention_window: int = Field(default=10, ge=1)
    streak_history_limit: int = Field(default=100, ge=1)
    upcoming_window_days: int = Field(default=7, ge=1)

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
