"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./seatplan.db")
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")

    # Security
    ADMIN_TOKEN: str = os.getenv("ADMIN_TOKEN", "admin_token_123")
    ADMIN_NAME: str = os.getenv("ADMIN_NAME", "admin")

    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Layout editor
    LAYOUT_CACHE_PATH: str = os.getenv("LAYOUT_CACHE_PATH", "./layout_cache.json")
    LAYOUT_SAVE_DEBOUNCE_SECONDS: float = float(os.getenv("LAYOUT_SAVE_DEBOUNCE_SECONDS", "0.8"))
    LAYOUT_SAVE_RETRIES: int = int(os.getenv("LAYOUT_SAVE_RETRIES", "3"))
    LAYOUT_SAVE_BACKOFF_SECONDS: float = float(os.getenv("LAYOUT_SAVE_BACKOFF_SECONDS", "0.5"))

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # File limits
    MAX_UPLOAD_SIZE: int = 2 * 1024 * 1024  # 2MB

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

    class Config:
        env_file = ".env"

settings = Settings()
