"""
Application configuration.
Everything comes from environment variables (or a .env file next to where the
server is started).
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


BACKEND_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DB_PATH = BACKEND_DIR / "data" / "app.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    host: str = "0.0.0.0"
    port: int = 5000

    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"

    # SMTP, Gmail with an app password by default
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    email_from: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_verify_on_startup: bool = True

    # folder with a built single-page frontend (index.html); nothing is served when unset
    frontend_dir: Optional[Path] = None
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_pass)

    @property
    def sender_address(self) -> str:
        sender = self.email_from or self.email_user
        if not sender:
            raise ConfigError("Email service is not configured")
        return sender


@lru_cache
def get_settings() -> Settings:
    return Settings()
