"""Application configuration."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Form Check"
    debug: bool = False
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Feedback log
    feedback_log_capacity: int = 50  # Entries kept, newest first

    # Pose input
    landmark_visibility_threshold: float = 0.5  # Below this a landmark counts as missing

    # Analyzer registry (HTTP adapter)
    max_analyzers: int = 100
    analyzer_idle_timeout_s: Optional[float] = 600.0  # None keeps analyzers until deleted

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
