"""
Configuration helpers for the Hoaxify backend.

Settings are read once from environment variables so that routers/services do
not fetch os.environ directly. Tests clear the cache after changing the env.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    upload_dir: str
    profile_dir: str
    token_store: str
    log_level: str

    @property
    def profile_folder(self) -> Path:
        return Path(self.upload_dir) / self.profile_dir


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _choice(value: str | None, allowed: set[str], default: str) -> str:
        normalized = (value or "").strip().lower()
        return normalized if normalized in allowed else default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./hoaxify.db").strip(),
        upload_dir=os.getenv("UPLOAD_DIR", "upload"),
        profile_dir=os.getenv("PROFILE_DIR", "profile"),
        token_store=_choice(os.getenv("TOKEN_STORE"), {"sql", "memory"}, "sql"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
