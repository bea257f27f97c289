"""FundSpark — Central Configuration via Pydantic Settings."""

import os
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── Identity tokens ──
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_days: int = 7
    refresh_token_days: int = 30
    bcrypt_rounds: int = 12

    # ── Email relay ──
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from: Optional[str] = None

    # ── App ──
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    scheduler_enabled: bool = True
    lifecycle_sweep_minutes: int = 15
    default_page_size: int = 12

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/fundspark.db"
        return "sqlite:///./fundspark.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
