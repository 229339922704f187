"""
POSHER Configuration

Environment variables and application settings.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "POSHER"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Visibility
    POSE_VISIBILITY_THRESHOLD: float = 0.45       # live coach overlay
    FULL_BODY_VISIBILITY_THRESHOLD: float = 0.5   # full-body tracker
    TOO_CLOSE_DISTANCE_PX: float = 100.0          # min shoulder-hip vertical gap

    # Feedback
    MAX_DISPLAY_CUES: int = 2

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
