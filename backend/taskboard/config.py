"""Central application settings loaded from environment variables."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./taskboard.db"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # Identity tokens are issued by the external login service and signed with this secret.
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    TOKEN_ALGORITHM: str = "HS256"

    # Day boundary used for overdue detection and the "today" panel
    TASK_TIMEZONE: str = "America/Toronto"

    ACTIVITY_LOG_LIMIT: int = 50
    CHAT_HISTORY_LIMIT: int = 200

    # werkzeug.security method string for team passwords
    TEAM_PASSWORD_HASH_METHOD: str = "scrypt"

    class Config:
        # Load backend/.env regardless of the working directory.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
