# config.py
# Environment-driven settings for the study camp store.

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

_BASE_DIR = Path(__file__).resolve().parent
load_dotenv(dotenv_path=_BASE_DIR / ".env")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in _TRUE_VALUES


class Settings(BaseModel):
    """Runtime configuration resolved from the process environment."""

    database_url: str = "sqlite:///study_camp.db"
    storage_backend: str = "sql"  # 'sql' or 'memory'
    login_delay_seconds: float = 0.5
    strict_mode: bool = False
    log_level: str = "INFO"
    frontend_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    @classmethod
    def from_env(cls) -> Settings:
        configured_origins = os.getenv("STUDY_CAMP_FRONTEND_ORIGINS")
        extra: dict[str, object] = {}
        if configured_origins:
            extra["frontend_origins"] = [
                origin.strip() for origin in configured_origins.split(",") if origin.strip()
            ]
        return cls(
            **extra,
            database_url=os.getenv("STUDY_CAMP_DATABASE_URL", "sqlite:///study_camp.db"),
            storage_backend=os.getenv("STUDY_CAMP_STORAGE", "sql").strip().lower(),
            login_delay_seconds=float(os.getenv("STUDY_CAMP_LOGIN_DELAY", "0.5")),
            strict_mode=_env_flag("STUDY_CAMP_STRICT"),
            log_level=os.getenv("STUDY_CAMP_LOG_LEVEL", "INFO").upper(),
        )


_CACHED_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _CACHED_SETTINGS
    if _CACHED_SETTINGS is None:
        _CACHED_SETTINGS = Settings.from_env()
    return _CACHED_SETTINGS
