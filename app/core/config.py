"""
Application configuration settings
"""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Application Requirements Tracker"
    VERSION: str = "1.0.0"
    DATABASE_URL: str = "sqlite+aiosqlite:///./requirements_tracker.db"
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    # Library uploads
    BUCKET_DIR: Path = Path("./bucket")
    MAX_FILE_SIZE: int = 10 * 1024 * 1024
    ALLOWED_EXTENSIONS: set = {".pdf", ".doc", ".docx", ".png", ".jpg", ".jpeg", ".txt"}

    # Seed the graduate/undergraduate/scholarship templates on startup
    SEED_SYSTEM_TEMPLATES: bool = True

    DEFAULT_REQUIREMENTS_LIMIT: int = 100
    DEFAULT_TEMPLATES_LIMIT: int = 50


settings = Settings()
settings.BUCKET_DIR.mkdir(parents=True, exist_ok=True)
